"""
Copyright (c) 2020, the SDAR developers
See LICENSE for details

Configuration settings for the sdar command.
"""

import argparse
import os
import sys

from appdirs import AppDirs

from sdar import SdarError
from sdar.crypto import strkey
from sdar.util import helpers


# Set the data directory in a OS-appropriate location.
_ad = AppDirs("sdar", False)
DATA_DIR = _ad.user_data_dir

# The configuration file name.
CONFIG_NAME = "sdar.conf"
LOG_NAME = "sdar.log"

MAINNET = "mainnet"
TESTNET = "testnet"

# Network specific default settings.
NetworkDefaults = {
    MAINNET: {"horizon": "https://horizon.stellar.org/"},
    TESTNET: {"horizon": "https://horizon-testnet.stellar.org/"},
}

DEFAULT_TIMEOUT = 30.0

log = helpers.getLogger("CONFIG")


def configPath(dataDir=None):
    return os.path.join(dataDir or DATA_DIR, CONFIG_NAME)


def fileConfig(path):
    """
    Read the optional configuration file. Recognized keys are "horizon" and
    "timeout". A missing file is an empty configuration.

    Args:
        path (str): The configuration file path.

    Returns:
        dict: The settings found in the file.
    """
    if not os.path.isfile(path):
        return {}
    cfg = helpers.readINI(path, ["horizon", "timeout"])
    if "timeout" in cfg:
        try:
            cfg["timeout"] = float(cfg["timeout"])
        except ValueError:
            raise SdarError(f"invalid timeout {cfg['timeout']!r} in {path}")
    return cfg


class CmdArgs:
    """
    CmdArgs are the command-line configuration options, with settings from
    the configuration file filling in what isn't given on the command line.
    """

    def __init__(self, argv=None, dataDir=None):
        """
        Args:
            argv (list(str)): The arguments. Defaults to sys.argv[1:].
            dataDir (str): The directory holding sdar.conf. Defaults to
                DATA_DIR.
        """
        self.logLevel = helpers.logLvl("info")
        self.moduleLevels = {}
        parser = argparse.ArgumentParser(
            prog="sdar", description="Count the votes for a Stellar asset."
        )
        parser.add_argument("code", help="the asset code")
        parser.add_argument("issuer", help="the asset issuer's public key")
        parser.add_argument("--testnet", action="store_true", help="use testnet")
        parser.add_argument("--horizon", help="Horizon server URL")
        parser.add_argument(
            "--addresses",
            action="store_true",
            help="show the voting addresses instead of the vote totals",
        )
        parser.add_argument(
            "--loglevel", help="e.g. debug, or VOTE:debug,HORIZON:warning"
        )
        args, unknown = parser.parse_known_args(argv)
        if unknown:
            sys.exit(f"unknown arguments: {unknown}")
        if not strkey.isValidPublicKey(args.issuer):
            sys.exit(f"invalid issuer {args.issuer}")

        self.dataDir = dataDir or DATA_DIR
        self.netName = TESTNET if args.testnet else MAINNET
        self.code = args.code
        self.issuer = args.issuer
        self.showAddresses = args.addresses

        fileCfg = fileConfig(configPath(self.dataDir))
        self.horizon = (
            args.horizon
            or fileCfg.get("horizon")
            or NetworkDefaults[self.netName]["horizon"]
        )
        self.timeout = fileCfg.get("timeout", DEFAULT_TIMEOUT)

        if args.loglevel:
            try:
                lvl, self.moduleLevels = helpers.parseLogLevels(args.loglevel)
            except (KeyError, ValueError):
                sys.exit(f"malformed loglevel specifier: {args.loglevel}")
            if lvl is not None:
                self.logLevel = lvl

    def logPath(self):
        """
        The log file path. The data directory is created if needed.
        """
        if not helpers.mkdir(self.dataDir):
            raise SdarError(f"data directory {self.dataDir} is a file")
        return os.path.join(self.dataDir, LOG_NAME)


cmdArgs = None


def load(argv=None):
    """
    Load and return the command-line configuration. The configuration is only
    loaded once. Successive calls return the same instance.

    Returns:
        CmdArgs: The configuration.
    """
    global cmdArgs
    if not cmdArgs:
        cmdArgs = CmdArgs(argv)
    return cmdArgs

"""
Copyright (c) 2020, the SDAR developers
See LICENSE for details

Logging and file helpers shared by the sdar modules.
"""

import configparser
import logging
from logging import Logger
from logging.handlers import RotatingFileHandler
import os
from pathlib import Path
import sys
import traceback
from typing import Dict, Iterable, Optional, Tuple, Union


LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(funcName)s(%(lineno)d) %(message)s"

logLevelMap = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "notset": logging.NOTSET,
    "0": logging.NOTSET,
}


def formatTraceback(err: Exception) -> str:
    """
    Format a traceback for an error so that it can go into logs or be attached
    to a wrapping exception.

    Args:
        err: The error the traceback is extracted from.

    Returns:
        The __str__() of the error, followed by the standard formatting
            of the traceback on the following lines.
    """
    return "".join(traceback.format_exception(None, err, err.__traceback__))


def mkdir(path: Union[Path, str]) -> bool:
    """
    Create the directory if it doesn't exist.

    Args:
        path: the directory path.

    Returns:
        False if a regular file is sitting at path, else True.
    """
    if os.path.isdir(path):
        return True
    if os.path.isfile(path):
        return False
    os.makedirs(path)
    return True


class LogSettings:
    """
    Process-wide logging state. Levels registered here are applied to loggers
    handed out by getLogger, including loggers created before the levels were
    registered.
    """

    root = logging.getLogger("")
    defaultLevel = logging.INFO
    moduleLevels: Dict[str, int] = {}
    loggers: Dict[str, Logger] = {}


LogSettings.root.setLevel(logging.NOTSET)


def logLvl(s: str) -> int:
    """
    Get the log level for a name from logLevelMap. Case-insensitive.
    """
    return logLevelMap[s.lower()]


def parseLogLevels(spec: str) -> Tuple[Optional[int], Dict[str, int]]:
    """
    Parse a log level specifier. A bare level name sets the default level,
    e.g. "debug". A comma-separated list of name:level pairs sets per-logger
    levels, e.g. "VOTE:debug,HORIZON:warning".

    Args:
        spec: The specifier.

    Returns:
        The default level, or None if the specifier only has per-logger
            levels, and the name->level map.

    Raises:
        KeyError or ValueError for a malformed specifier.
    """
    if any(ch in spec for ch in (",", ":")):
        levels = {}
        for pair in spec.split(","):
            name, lvl = pair.split(":")
            if not name:
                raise ValueError(f"missing logger name in {spec!r}")
            levels[name] = logLvl(lvl)
        return None, levels
    return logLvl(spec), {}


def prepareLogging(
    filepath: Union[Path, str, None] = None,
    logLvl: int = logging.INFO,
    lvlMap: Optional[Dict[str, int]] = None,
) -> None:
    """
    Prepare for using getLogger. Logs to stdout. If filepath is provided, log
    output is also written to a rotating log file at that location. Existing
    loggers have their levels reset according to logLvl and lvlMap.

    Args:
        filepath: The base name for the rotating log file.
        logLvl: The default level for loggers without an entry in lvlMap.
        lvlMap: name->level entries added to the registered module levels.
    """
    LogSettings.defaultLevel = logLvl
    LogSettings.moduleLevels.update(lvlMap if lvlMap else {})
    for name, logger in LogSettings.loggers.items():
        logger.setLevel(LogSettings.moduleLevels.get(name, LogSettings.defaultLevel))

    formatter = logging.Formatter(LOG_FORMAT)
    if filepath:
        fileHandler = RotatingFileHandler(
            filepath, mode="a", maxBytes=5 * 1024 * 1024, backupCount=2,
        )
        fileHandler.setFormatter(formatter)
        LogSettings.root.addHandler(fileHandler)
    if not sys.executable.endswith("pythonw.exe"):
        # No console under pythonw on windows.
        printHandler = logging.StreamHandler()
        printHandler.setFormatter(formatter)
        LogSettings.root.addHandler(printHandler)


def getLogger(name: str) -> Logger:
    """
    Gets a named logger. If the name has a level registered with
    prepareLogging, that level is used, otherwise the default.

    Args:
        name: The logger name.
    """
    l = LogSettings.root.getChild(name)
    l.setLevel(LogSettings.moduleLevels.get(name, LogSettings.defaultLevel))
    LogSettings.loggers[name] = l
    return l


def readINI(path: Union[Path, str], keys: Iterable[str]) -> Dict[str, str]:
    """
    Read the specified keys from an INI-formatted file. Section headers are
    optional and all sections are searched. Keys that are not found are not
    present in the result.

    Args:
        path: The path to the INI file.
        keys: Keys to search for.

    Returns:
        Discovered keys and values.
    """
    config = configparser.ConfigParser(strict=False)
    with open(path) as f:
        # configparser won't take a file without a section header.
        config.read_string("[sdar]\n" + f.read())
    res = {}
    for section in config.sections():
        for k in config[section]:
            if k in keys:
                res[k] = config[section][k]
    return res

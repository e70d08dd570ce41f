"""
Copyright (c) 2020, the SDAR developers
See LICENSE for details

The sdar command. Prints the vote totals for an asset, or its current voting
addresses with --addresses.
"""

import sys

from sdar import SdarError, config
from sdar.stellar.asset import Asset
from sdar.stellar.horizon import HorizonClient
from sdar.util import helpers
from sdar.vote import Voting


log = helpers.getLogger("APP")


def run(cfg, out=sys.stdout):
    """
    Run the query described by the configuration.

    Args:
        cfg (config.CmdArgs): The configuration.
        out (file): Where the results are written.
    """
    asset = Asset(cfg.code, cfg.issuer)
    voting = Voting(HorizonClient(cfg.horizon, timeout=cfg.timeout))
    log.info(f"querying {cfg.horizon} for {asset.code}:{asset.issuer}")
    if cfg.showAddresses:
        statuses = voting.votingAddresses(asset)
        for k in ("up", "down"):
            st = statuses[k]
            state = "active" if st.active else "unused"
            print(f"{k}: {st.address} ({state})", file=out)
        return
    tally = voting.votes(asset)
    print(f"up: {tally.up}", file=out)
    print(f"down: {tally.down}", file=out)


def main(argv=None):
    cfg = config.load(argv)
    helpers.prepareLogging(cfg.logPath(), cfg.logLevel, cfg.moduleLevels)
    try:
        run(cfg)
    except SdarError as err:
        log.error(helpers.formatTraceback(err))
        sys.exit(f"error: {err}")


if __name__ == "__main__":
    main()

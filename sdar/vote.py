"""
Copyright (c) 2020, the SDAR developers
See LICENSE for details

Voting by wallet. Every asset has two hierarchies of voting addresses, one per
vote direction, derived from a seed built from the asset's identity. Votes are
the VOTE balances held at the "active" addresses of a hierarchy, that is,
addresses that trust both the voted asset and VOTE and whose only signer is
their own master key at weight zero. Such an address can never move its
balance again.

Addresses are discovered by walking the hierarchy from index 0 until the first
address with no funded account.
"""

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
import threading

from sdar import SdarError
from sdar.crypto.hdwallet import HDWallet
from sdar.stellar.asset import VOTE_ASSET, VOTE_CODE, VOTE_ISSUER, Direction
from sdar.util.helpers import getLogger


log = getLogger("VOTE")

__all__ = [
    "VOTE_CODE",
    "VOTE_ISSUER",
    "AddressStatus",
    "InvariantViolated",
    "NotConfigured",
    "ScanCancelled",
    "ScanEntry",
    "Tally",
    "Voting",
    "activeVotingAddresses",
    "deriveWallet",
    "isActive",
    "isValid",
    "scan",
    "seedFor",
    "setAccountLookup",
    "validVotingAddresses",
    "votes",
    "votingAddresses",
]


class NotConfigured(SdarError):
    """
    A query was made before an account lookup was registered.
    """

    pass


class InvariantViolated(SdarError):
    """
    An account that passed the eligibility check is missing data that the
    check guarantees.
    """

    pass


class ScanCancelled(SdarError):
    """
    A scan was stopped before reaching an unfunded address.
    """

    pass


def seedFor(asset, direction):
    """
    The derivation seed for the asset's voting addresses in one direction. The
    seed is the issuer's raw public key, then the asset code's bytes, then the
    direction digit, taken together as hex.

    Args:
        asset (Asset): The voted asset.
        direction (Direction): The vote direction.

    Returns:
        bytes: The seed.

    Raises:
        InvalidIssuerKey: The asset issuer is not a valid public key.
    """
    rawIssuer = asset.rawIssuer().hex()
    rawCode = asset.code.encode().hex()
    return bytes.fromhex(rawIssuer + rawCode + Direction.parse(direction).tag)


def deriveWallet(asset, direction):
    """
    The HDWallet holding the asset's voting addresses in one direction.

    Args:
        asset (Asset): The voted asset.
        direction (Direction): The vote direction.

    Returns:
        HDWallet: The wallet.
    """
    return HDWallet(seedFor(asset, direction))


class ScanEntry:
    """
    One step of a scan.
    """

    def __init__(self, index, address, account):
        self.index = index
        self.address = address
        self.account = account

    def __repr__(self):
        return f"ScanEntry({self.index}, {self.address!r}, {self.account!r})"


def scan(wallet, lookup, stop=None):
    """
    Walk the wallet's addresses from index 0, looking up each one. The entry
    for the first unfunded address is the last one generated. The walk
    continues for as long as there are funded accounts, so callers that need
    a bound should use itertools.islice.

    Exceptions raised by lookup propagate to the consumer.

    Args:
        wallet (HDWallet): The derivation context.
        lookup (func(str) -> Account): The account lookup.
        stop (threading.Event): Optional. If set, the scan raises
            ScanCancelled before its next lookup.

    Yields:
        ScanEntry: The index, address, and account.
    """
    index = 0
    while True:
        if stop is not None and stop.is_set():
            raise ScanCancelled(f"scan stopped at index {index}")
        address = wallet.publicKey(index)
        account = lookup(address)
        log.debug(f"scanned index {index}: {address}")
        yield ScanEntry(index, address, account)
        if not account.funded:
            return
        index += 1


def isActive(account, asset):
    """
    Whether the account's votes count for the asset. Active accounts trust the
    asset and the VOTE asset, and have a single signer that is the account's
    own master key with weight 0.

    Args:
        account (Account): The account snapshot.
        asset (Asset): The voted asset.

    Returns:
        bool: True if active.
    """
    hasAssetTrustline = False
    hasVoteTrustline = False
    for b in account.balances:
        if b.isAsset(asset):
            hasAssetTrustline = True
        elif b.isAsset(VOTE_ASSET):
            hasVoteTrustline = True

    if not hasAssetTrustline or not hasVoteTrustline:
        return False

    signers = account.signers
    if len(signers) != 1:
        return False
    return signers[0].publicKey == account.accountId and signers[0].weight == 0


class AddressStatus:
    """
    The next voting address for a direction and whether it is already active.
    """

    def __init__(self, address, active):
        self.address = address
        self.active = active

    def __eq__(self, other):
        if not isinstance(other, AddressStatus):
            return NotImplemented
        return self.address == other.address and self.active == other.active

    def __repr__(self):
        return f"AddressStatus({self.address!r}, active={self.active})"


class Tally:
    """
    The VOTE totals for an asset.
    """

    def __init__(self, up, down):
        """
        Args:
            up (Decimal): Sum of VOTE balances at active up addresses.
            down (Decimal): Sum of VOTE balances at active down addresses.
        """
        self.up = up
        self.down = down

    def __getitem__(self, k):
        return getattr(self, Direction.parse(k).name.lower())

    def __repr__(self):
        return f"Tally(up={self.up}, down={self.down})"


class Voting:
    """
    Voting answers vote queries against the ledger reached through an account
    lookup function. Nothing is cached between calls, every query re-scans
    from index 0.
    """

    def __init__(self, lookup):
        """
        Args:
            lookup (func(str) -> Account): Returns the account snapshot for an
                address. Unfunded addresses must be returned as an Account
                with no balance, not raised as errors.
        """
        self.lookup = lookup

    isActive = staticmethod(isActive)

    def scan(self, asset, direction, stop=None):
        """
        Scan the asset's voting addresses in one direction.

        Args:
            asset (Asset): The voted asset.
            direction (Direction): The vote direction.
            stop (threading.Event): Optional. Cancels the scan when set.

        Returns:
            generator(ScanEntry): The scan.
        """
        return scan(deriveWallet(asset, direction), self.lookup, stop)

    def _bothDirections(self, func, asset):
        """
        Run func(asset, direction, stop) for UP and DOWN concurrently, each in
        its own thread. If either direction fails, stop is set so that the
        other direction's scan is cancelled at its next lookup, and the
        failure is raised once both threads are done.

        Returns:
            tuple: The UP and DOWN results.
        """
        stop = threading.Event()

        def run(direction):
            try:
                return func(asset, direction, stop)
            except Exception:
                stop.set()
                raise

        with ThreadPoolExecutor(max_workers=2) as executor:
            futures = [executor.submit(run, d) for d in (Direction.UP, Direction.DOWN)]
        for fut in futures:
            err = fut.exception()
            if err is not None and not isinstance(err, ScanCancelled):
                raise err
        up, down = futures
        return up.result(), down.result()

    def sumVotes(self, asset, direction, stop=None):
        """
        Sum the VOTE balances at the active addresses in one direction.

        Args:
            asset (Asset): The voted asset.
            direction (Direction): The vote direction.
            stop (threading.Event): Optional. Cancels the scan when set.

        Returns:
            Decimal: The sum.
        """
        total = Decimal(0)
        for entry in self.scan(asset, direction, stop):
            if not isActive(entry.account, asset):
                continue
            voteBalance = entry.account.balanceOf(VOTE_ASSET)
            if voteBalance is None:
                raise InvariantViolated(
                    f"active address {entry.address} has no {VOTE_CODE} balance"
                )
            total += voteBalance.balance
        return total

    def votes(self, asset):
        """
        The vote totals for an asset.

        Args:
            asset (Asset): The voted asset.

        Returns:
            Tally: The up and down totals.
        """
        up, down = self._bothDirections(self.sumVotes, asset)
        log.debug(f"{asset!r} votes: up {up}, down {down}")
        return Tally(up=up, down=down)

    def votingAddress(self, asset, direction, stop=None):
        """
        The first address in scan order that is active or unfunded. This is
        the address a voter should send VOTE to.

        Args:
            asset (Asset): The voted asset.
            direction (Direction): The vote direction.
            stop (threading.Event): Optional. Cancels the scan when set.

        Returns:
            AddressStatus: The address and whether it is active.
        """
        for entry in self.scan(asset, direction, stop):
            active = isActive(entry.account, asset)
            if active or not entry.account.funded:
                return AddressStatus(entry.address, active)
        # A scan always ends with an unfunded entry.
        raise InvariantViolated("scan ended without an unfunded address")

    def votingAddresses(self, asset):
        """
        The up and down voting addresses for an asset.

        Args:
            asset (Asset): The voted asset.

        Returns:
            dict: AddressStatus for keys "up" and "down".
        """
        up, down = self._bothDirections(self.votingAddress, asset)
        return {"up": up, "down": down}

    def isValid(self, address, asset, direction=None):
        """
        Whether address is one of the asset's current voting addresses, as
        returned by votingAddresses. Addresses that were voting addresses
        before a later address became the frontier are not valid. Valid does
        not mean active.

        Args:
            address (str): The address to check.
            asset (Asset): The voted asset.
            direction (Direction): If provided, only the voting address for
                this direction is checked.

        Returns:
            bool: True if valid.
        """
        if direction is not None:
            return self.votingAddress(asset, direction).address == address
        statuses = self.votingAddresses(asset)
        return address in (statuses["up"].address, statuses["down"].address)

    def activeVotingAddresses(self, asset, direction):
        """
        Every active address in one direction.

        Args:
            asset (Asset): The voted asset.
            direction (Direction): The vote direction.

        Returns:
            list(str): The active addresses in derivation order.
        """
        addrs = []
        for entry in self.scan(asset, direction):
            if isActive(entry.account, asset):
                log.debug(f"active voting address at index {entry.index}")
                addrs.append(entry.address)
        return addrs

    def validVotingAddresses(self, asset, direction):
        """
        Every funded address in one direction, active or not. The unfunded
        address that ends the scan is excluded.

        Args:
            asset (Asset): The voted asset.
            direction (Direction): The vote direction.

        Returns:
            list(str): The addresses in derivation order.
        """
        return [
            entry.address
            for entry in self.scan(asset, direction)
            if entry.account.funded
        ]


_voting = None


def setAccountLookup(lookup):
    """
    Register the app-wide account lookup used by the module-level query
    functions. Registering again replaces the previous lookup.

    Args:
        lookup (func(str) -> Account): The account lookup.
    """
    global _voting
    _voting = Voting(lookup)


def _default():
    if _voting is None:
        raise NotConfigured("no account lookup registered, call setAccountLookup")
    return _voting


def votes(asset):
    """See Voting.votes."""
    return _default().votes(asset)


def votingAddresses(asset):
    """See Voting.votingAddresses."""
    return _default().votingAddresses(asset)


def isValid(address, asset, direction=None):
    """See Voting.isValid."""
    return _default().isValid(address, asset, direction)


def activeVotingAddresses(asset, direction):
    """See Voting.activeVotingAddresses."""
    return _default().activeVotingAddresses(asset, direction)


def validVotingAddresses(asset, direction):
    """See Voting.validVotingAddresses."""
    return _default().validVotingAddresses(asset, direction)

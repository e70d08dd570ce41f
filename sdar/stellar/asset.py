"""
Copyright (c) 2020, the SDAR developers
See LICENSE for details

Assets and vote directions.
"""

from enum import Enum

from sdar import SdarError
from sdar.crypto import strkey


# The marker asset. Its balance at an eligible voting address is the weight of
# the votes cast from that address.
VOTE_CODE = "VOTE"
VOTE_ISSUER = ""

MAX_CODE_LENGTH = 12


class AssetError(SdarError):
    pass


class Direction(Enum):
    """
    Which outcome the votes at an address count toward. The value is the
    digit embedded in the address derivation seed.
    """

    UP = 1
    DOWN = 2

    @property
    def tag(self):
        """
        The one-byte hex tag appended to the derivation seed, "01" or "02".
        """
        return "0" + str(self.value)

    @staticmethod
    def parse(d):
        """
        Parse a Direction from a name ("up", "DOWN") or a Direction.

        Args:
            d (str or Direction): The direction.

        Returns:
            Direction: The parsed direction.
        """
        if isinstance(d, Direction):
            return d
        try:
            return Direction[str(d).upper()]
        except KeyError:
            raise SdarError(f"unknown vote direction {d!r}")


class Asset:
    """
    A Stellar asset, identified by its code and issuer. Assets are immutable
    values.
    """

    __slots__ = ("_code", "_issuer")

    def __init__(self, code, issuer):
        """
        Args:
            code (str): Asset code, 1 to 12 printable ASCII characters.
            issuer (str): The issuer's StrKey public key.
        """
        if not isinstance(code, str) or not 0 < len(code) <= MAX_CODE_LENGTH:
            raise AssetError(f"asset code must be 1-{MAX_CODE_LENGTH} characters")
        if not all(33 <= ord(c) <= 126 for c in code):
            raise AssetError(f"asset code {code!r} has non-printable characters")
        object.__setattr__(self, "_code", code)
        object.__setattr__(self, "_issuer", issuer)

    def __setattr__(self, k, v):
        raise AttributeError("Asset is immutable")

    @property
    def code(self):
        return self._code

    @property
    def issuer(self):
        return self._issuer

    def rawIssuer(self):
        """
        The issuer's raw public key.

        Returns:
            bytes: The 32-byte key.

        Raises:
            InvalidIssuerKey: The issuer is not a valid StrKey public key.
        """
        return strkey.decodePublicKey(self._issuer)

    def matches(self, code, issuer):
        """
        Whether this asset is identified by code and issuer.
        """
        return self._code == code and self._issuer == issuer

    def __eq__(self, other):
        if not isinstance(other, Asset):
            return NotImplemented
        return self._code == other._code and self._issuer == other._issuer

    def __hash__(self):
        return hash((self._code, self._issuer))

    def __repr__(self):
        return f"Asset({self._code!r}, {self._issuer!r})"


VOTE_ASSET = Asset(VOTE_CODE, VOTE_ISSUER)

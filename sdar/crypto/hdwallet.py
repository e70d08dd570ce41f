"""
Copyright (c) 2020, the SDAR developers
See LICENSE for details

SLIP-0010 hierarchical deterministic keys on the ed25519 curve, as used by
Stellar wallets (SEP-0005). Only hardened derivation is defined for ed25519.
"""

import hashlib
import hmac

from nacl.signing import SigningKey

from sdar import SdarError

from . import strkey


HARDENED_KEY_START = 2 ** 31
MAX_INDEX = HARDENED_KEY_START - 1
MASTER_KEY = b"ed25519 seed"

# BIP0044 purpose and SLIP-0044 coin type for Stellar lumens.
PURPOSE = 44
STELLAR_COIN_TYPE = 148


class ParameterRangeError(SdarError):
    """
    An input parameter is out of the acceptable range.
    """

    pass


def hmacDigest(key, msg, digestmod=hashlib.sha512):
    """
    Get the hmac keyed hash.

    Args:
        key (byte-like): the key
        msg (byte-like): the message
        digestmod (digest): A hashlib digest type constant.

    Returns:
        bytes: The secure hash of msg.
    """
    h = hmac.new(key, msg=msg, digestmod=digestmod)
    return h.digest()


class ExtendedKey:
    """
    ExtendedKey is an ed25519 private key with the chain code needed to derive
    hardened children.
    """

    def __init__(self, key, chainCode, depth=0, childNum=0):
        """
        Args:
            key (bytes-like): The 32-byte private key.
            chainCode (bytes-like): The 32-byte chain code.
            depth (int): Key depth. The master key is at depth 0.
            childNum (int): The child number, including the hardened offset.
        """
        self.key = bytes(key)
        self.chainCode = bytes(chainCode)
        self.depth = depth
        self.childNum = childNum

    @staticmethod
    def new(seed):
        """
        Create the master key from a seed.

        Args:
            seed (bytes-like): The seed.

        Returns:
            ExtendedKey: The master key.
        """
        # I = HMAC-SHA512(Key = "ed25519 seed", Data = seed)
        # Il is the master secret key and Ir is the master chain code. Every
        # Il is a valid ed25519 key, so unlike secp256k1 there is no range
        # check.
        lr = hmacDigest(MASTER_KEY, bytes(seed))
        return ExtendedKey(key=lr[:32], chainCode=lr[32:])

    def child(self, i):
        """
        Derive the hardened child at index i.

        Args:
            i (int): The child index. The hardened offset is added.

        Returns:
            ExtendedKey: The child key.
        """
        if not 0 <= i <= MAX_INDEX:
            raise ParameterRangeError(f"child index {i} out of range [0, {MAX_INDEX}]")
        childNum = i + HARDENED_KEY_START
        # 0x00 || ser256(parentKey) || ser32(i)
        data = b"\x00" + self.key + childNum.to_bytes(4, byteorder="big")
        ilr = hmacDigest(self.chainCode, data)
        return ExtendedKey(
            key=ilr[:32],
            chainCode=ilr[32:],
            depth=self.depth + 1,
            childNum=childNum,
        )

    def derivePath(self, *indices):
        """
        Derive a descendant through a sequence of hardened indices.

        Args:
            *indices (int): The path, e.g. 44, 148, 0 for m/44'/148'/0'.

        Returns:
            ExtendedKey: The descendant key.
        """
        key = self
        for i in indices:
            key = key.child(i)
        return key

    def publicKey(self):
        """
        The raw ed25519 public key.

        Returns:
            bytes: The 32-byte public key.
        """
        return SigningKey(self.key).verify_key.encode()

    def address(self):
        """
        The StrKey-encoded public key.

        Returns:
            str: The "G..." address.
        """
        return strkey.encodePublicKey(self.publicKey())


class HDWallet:
    """
    HDWallet derives Stellar account keys along m/44'/148'/index' from a seed.
    The same seed and index always produce the same key.
    """

    def __init__(self, seed):
        """
        Args:
            seed (bytes-like): The wallet seed.
        """
        self.seed = bytes(seed)
        self.coinKey = ExtendedKey.new(self.seed).derivePath(PURPOSE, STELLAR_COIN_TYPE)

    def accountKey(self, index):
        """
        The extended key for the account at index.

        Args:
            index (int): The account index.

        Returns:
            ExtendedKey: The account key.
        """
        return self.coinKey.child(index)

    def publicKey(self, index):
        """
        The StrKey public key for the account at index.

        Args:
            index (int): The account index.

        Returns:
            str: The "G..." address.
        """
        return self.accountKey(index).address()

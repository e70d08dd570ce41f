"""
Copyright (c) 2020, the SDAR developers
See LICENSE for details

Stellar StrKey encoding of ed25519 public keys. A StrKey is the base32
encoding of version byte || payload || CRC16-XModem checksum, with the
checksum serialized little-endian.
"""

import base64
import binascii

from sdar import SdarError


ED25519_KEY_SIZE = 32

# VERSION_ACCOUNT_ID is the version byte of an ed25519 public key. Encoded
# keys start with "G".
VERSION_ACCOUNT_ID = 6 << 3

# Version byte + key + 2-byte checksum, base32 encoded without padding.
ENCODED_KEY_LENGTH = 56


class StrKeyError(SdarError):
    pass


class InvalidIssuerKey(StrKeyError):
    """
    An asset issuer is not a well-formed StrKey ed25519 public key.
    """

    pass


def crc16XModem(b):
    """
    The CRC16-XModem checksum (polynomial 0x1021, initial value 0).

    Args:
        b (bytes-like): The data.

    Returns:
        int: The 16-bit checksum.
    """
    return binascii.crc_hqx(bytes(b), 0)


def encodeCheck(version, payload):
    """
    Encode the payload with a version byte and checksum.

    Args:
        version (int): The version byte.
        payload (bytes-like): The data to encode.

    Returns:
        str: The StrKey.
    """
    data = bytes([version]) + bytes(payload)
    data += crc16XModem(data).to_bytes(2, byteorder="little")
    return base64.b32encode(data).decode().rstrip("=")


def decodeCheck(version, s):
    """
    Decode a StrKey, verifying its version byte and checksum.

    Args:
        version (int): The expected version byte.
        s (str): The StrKey.

    Returns:
        bytes: The payload.
    """
    if not isinstance(s, str):
        raise StrKeyError(f"expected a string, got {type(s).__name__}")
    try:
        # Re-pad to a multiple of 8 characters for the base64 module.
        data = base64.b32decode(s + "=" * (-len(s) % 8))
    except (binascii.Error, ValueError) as err:
        raise StrKeyError(f"invalid base32 in {s!r}: {err}")
    if len(data) < 3:
        raise StrKeyError(f"{s!r} is too short to be a StrKey")
    if data[0] != version:
        raise StrKeyError(f"unexpected version byte {data[0]} in {s!r}")
    body, checksum = data[:-2], data[-2:]
    if crc16XModem(body).to_bytes(2, byteorder="little") != checksum:
        raise StrKeyError(f"checksum mismatch in {s!r}")
    # Reject non-canonical encodings whose trailing bits were ignored.
    if encodeCheck(version, body[1:]) != s:
        raise StrKeyError(f"non-canonical StrKey {s!r}")
    return body[1:]


def encodePublicKey(pubKey):
    """
    Encode a raw ed25519 public key as a "G..." address.

    Args:
        pubKey (bytes-like): The 32-byte public key.

    Returns:
        str: The encoded address.
    """
    if len(pubKey) != ED25519_KEY_SIZE:
        raise StrKeyError(f"expected {ED25519_KEY_SIZE} byte key, got {len(pubKey)}")
    return encodeCheck(VERSION_ACCOUNT_ID, pubKey)


def decodePublicKey(s):
    """
    Decode a "G..." address to the raw ed25519 public key.

    Args:
        s (str): The encoded address.

    Returns:
        bytes: The 32-byte public key.

    Raises:
        InvalidIssuerKey: s is not a valid encoded ed25519 public key.
    """
    if not isinstance(s, str) or len(s) != ENCODED_KEY_LENGTH:
        raise InvalidIssuerKey(f"{s!r} is not a {ENCODED_KEY_LENGTH}-character key")
    try:
        return decodeCheck(VERSION_ACCOUNT_ID, s)
    except StrKeyError as err:
        raise InvalidIssuerKey(str(err))


def isValidPublicKey(s):
    """
    Whether s is a valid encoded ed25519 public key.
    """
    try:
        decodePublicKey(s)
        return True
    except InvalidIssuerKey:
        return False

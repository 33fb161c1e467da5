"""
Canonical text encoding for age keys.

Keys are rendered as Bech32 strings whose human-readable part is a tag
naming the kind of key:

    - Secret keys: ``AGE-SECRET-KEY-1...`` (uppercase)
    - Recipients (public keys): ``age1...`` (lowercase)

Case carries no meaning; it only makes secret material stand out.
Decoding accepts either case and checks the tag before the payload, so
a recipient handed to a function expecting a secret key is reported as
the wrong kind of key rather than as a damaged one.
"""

from __future__ import annotations

from enum import Enum
from typing import Final

from . import bech32
from .exceptions import WrongLengthError, WrongTagError

__all__ = [
    "KEY_SIZE",
    "KeyTag",
    "decode",
    "encode",
]

KEY_SIZE: Final[int] = 32
"""Size in bytes of every encoded key payload."""


class KeyTag(Enum):
    """Human-readable tags distinguishing the two key namespaces."""

    SECRET = "AGE-SECRET-KEY-"
    """Tag for X25519 secret keys. Rendered in uppercase."""

    PUBLIC = "age"
    """Tag for X25519 recipients. Rendered in lowercase."""

    @property
    def hrp(self) -> str:
        """The tag as the lowercase Bech32 human-readable part."""
        return self.value.lower()

    @property
    def uppercase(self) -> bool:
        """Whether strings under this tag are rendered in uppercase."""
        return self is KeyTag.SECRET


def encode(tag: KeyTag, payload: bytes) -> str:
    """
    Encode a 32-byte key under `tag`.

    The checksum is computed afresh on every call.

    Args:
        tag: Which key namespace to encode into.
        payload: Exactly 32 bytes of key material.

    Returns:
        The canonical string, uppercase for secret keys.

    Raises:
        WrongLengthError: If `payload` is not 32 bytes.
    """
    if len(payload) != KEY_SIZE:
        raise WrongLengthError(expected=KEY_SIZE, actual=len(payload))

    s = bech32.encode(tag.hrp, bytes(payload))
    return s.upper() if tag.uppercase else s


def decode(tag: KeyTag, s: str) -> bytes:
    """
    Decode a key string, verifying its tag, checksum and length.

    Args:
        tag: The tag the string must carry.
        s: An all-uppercase or all-lowercase encoded key.

    Returns:
        Exactly 32 payload bytes.

    Raises:
        MalformedError: If the string is not valid Bech32.
        WrongTagError: If the string carries a different tag.
        BadChecksumError: If the checksum does not match.
        WrongLengthError: If the payload is not 32 bytes.
    """
    hrp, data_part = bech32.split(s)
    if hrp != tag.hrp:
        raise WrongTagError(expected=tag.value, actual=hrp)

    payload = bech32.decode_data(hrp, data_part)
    if len(payload) != KEY_SIZE:
        raise WrongLengthError(expected=KEY_SIZE, actual=len(payload))

    return payload

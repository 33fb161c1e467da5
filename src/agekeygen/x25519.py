"""
X25519 identities and recipients.

An age X25519 identity is a 32-byte Curve25519 scalar. Its recipient is
the public point obtained by multiplying the clamped scalar with the
curve's base point (RFC 7748).

    identity  (secret)  --scalar mult-->  recipient  (public)
    AGE-SECRET-KEY-1...                    age1...

The identity is what decrypts files and must stay private. The recipient
is what others encrypt to and can be shared freely.

References:
    - https://datatracker.ietf.org/doc/html/rfc7748 (X25519)
    - https://age-encryption.org/v1
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import x25519

from .encoding import KEY_SIZE, KeyTag, decode, encode
from .exceptions import InsecureRandomError
from .types import Bytes32

__all__ = [
    "PublicKey",
    "SecretKey",
    "X25519Identity",
    "X25519Recipient",
    "clamp",
    "derive_public_key",
    "generate",
]

logger = logging.getLogger(__name__)


class SecretKey(Bytes32):
    """
    A 32-byte X25519 secret scalar.

    The bytes never appear in `repr` or `str`. Use `hex()` or `bytes()`
    when the raw material is really needed.
    """

    def __repr__(self) -> str:
        return "SecretKey(<redacted>)"

    def __str__(self) -> str:
        return "<redacted>"


class PublicKey(Bytes32):
    """A 32-byte X25519 public key (Montgomery u-coordinate)."""


def clamp(scalar: bytes) -> SecretKey:
    """
    Apply X25519 scalar clamping.

    Clears the three low bits (cofactor), clears bit 255 and sets bit 254.

    Args:
        scalar: 32 bytes, little-endian.

    Returns:
        The clamped scalar.
    """
    k = bytearray(scalar)
    if len(k) != KEY_SIZE:
        raise ValueError(f"Expected {KEY_SIZE} bytes, got {len(k)}")
    k[0] &= 248
    k[31] &= 127
    k[31] |= 64
    return SecretKey(k)


def derive_public_key(secret: bytes) -> PublicKey:
    """
    Compute the public key for a secret scalar.

    The curve primitive clamps the scalar itself, so unclamped keys
    written by other tools derive the same point as their clamped form.

    Args:
        secret: 32-byte secret scalar.

    Returns:
        The matching public key.
    """
    private_key = x25519.X25519PrivateKey.from_private_bytes(bytes(secret))
    return PublicKey(
        private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
    )


@dataclass(frozen=True, slots=True)
class X25519Recipient:
    """
    The public half of an X25519 identity.

    Attributes:
        public_key: The 32-byte public key.
    """

    public_key: PublicKey

    def __post_init__(self) -> None:
        if not isinstance(self.public_key, PublicKey):
            object.__setattr__(self, "public_key", PublicKey(self.public_key))

    @classmethod
    def parse(cls, s: str) -> X25519Recipient:
        """
        Parse an ``age1...`` recipient string.

        Raises:
            DecodeError: If the string is not a valid recipient.
        """
        return cls(public_key=PublicKey(decode(KeyTag.PUBLIC, s)))

    def recipient_string(self) -> str:
        """Return the canonical lowercase ``age1...`` string."""
        return encode(KeyTag.PUBLIC, self.public_key)

    def __str__(self) -> str:
        return self.recipient_string()


@dataclass(frozen=True, slots=True, repr=False)
class X25519Identity:
    """
    An X25519 secret key together with its derived recipient.

    Instances are immutable. The public key is recomputed from the
    secret key whenever it is needed and can never drift from it.

    Attributes:
        secret_key: The 32-byte secret scalar.
    """

    secret_key: SecretKey

    def __post_init__(self) -> None:
        if not isinstance(self.secret_key, SecretKey):
            object.__setattr__(self, "secret_key", SecretKey(self.secret_key))

    @classmethod
    def generate(cls) -> X25519Identity:
        """
        Generate a new random identity.

        Returns:
            A fresh identity.
        """
        return generate()

    @classmethod
    def parse(cls, s: str) -> X25519Identity:
        """
        Parse an ``AGE-SECRET-KEY-1...`` string.

        The decoded scalar is kept as-is, so the identity re-encodes to
        the same text.

        Raises:
            DecodeError: If the string is not a valid secret key.
        """
        return cls(secret_key=SecretKey(decode(KeyTag.SECRET, s)))

    @property
    def public_key(self) -> PublicKey:
        """The public key derived from `secret_key`."""
        return derive_public_key(self.secret_key)

    def recipient(self) -> X25519Recipient:
        """Return the recipient for this identity."""
        return X25519Recipient(public_key=self.public_key)

    def recipient_string(self) -> str:
        """Return the canonical lowercase ``age1...`` string."""
        return encode(KeyTag.PUBLIC, self.public_key)

    def secret_string(self) -> str:
        """Return the canonical uppercase ``AGE-SECRET-KEY-1...`` string."""
        return encode(KeyTag.SECRET, self.secret_key)

    def __str__(self) -> str:
        return self.secret_string()

    def __repr__(self) -> str:
        return f"X25519Identity(recipient={self.recipient_string()})"


def generate(randbytes: Callable[[int], bytes] | None = None) -> X25519Identity:
    """
    Generate a new X25519 identity from the operating system CSPRNG.

    Draws 32 bytes, clamps them and derives the public key. A failing or
    short random source aborts generation; there is no fallback.

    Args:
        randbytes: Source of secure random bytes. Defaults to `os.urandom`.

    Returns:
        A fresh identity.

    Raises:
        InsecureRandomError: If the random source is unavailable or
            returns fewer than 32 bytes.
    """
    source = randbytes if randbytes is not None else os.urandom
    try:
        scalar = source(KEY_SIZE)
    except (OSError, NotImplementedError) as e:
        raise InsecureRandomError(f"secure random source unavailable: {e}") from e

    if len(scalar) != KEY_SIZE:
        raise InsecureRandomError(
            f"secure random source returned {len(scalar)} bytes, expected {KEY_SIZE}"
        )

    identity = X25519Identity(secret_key=clamp(scalar))
    logger.debug("Generated X25519 identity, recipient=%s", identity.recipient_string())
    return identity

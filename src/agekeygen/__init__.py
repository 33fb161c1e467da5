"""
age X25519 key generation, encoding and identity-file parsing.

The identity key (secret) and the recipient (public) are both rendered as
Bech32 strings:

- Identity: ``AGE-SECRET-KEY-1...`` (uppercase)
- Recipient: ``age1...`` (lowercase)
"""

from .encoding import KeyTag, decode, encode
from .exceptions import (
    BadChecksumError,
    DecodeError,
    GenerationError,
    IdentityFileTooLargeError,
    InsecureRandomError,
    KeyFormatError,
    MalformedError,
    ParseError,
    WrongLengthError,
    WrongTagError,
)
from .identity_file import (
    IdentityFileRecord,
    format_identity,
    format_recipients,
    parse_identities,
    parse_recipients,
)
from .x25519 import (
    PublicKey,
    SecretKey,
    X25519Identity,
    X25519Recipient,
    clamp,
    derive_public_key,
    generate,
)

__all__ = [
    # Encoding
    "KeyTag",
    "decode",
    "encode",
    # Keys
    "PublicKey",
    "SecretKey",
    "X25519Identity",
    "X25519Recipient",
    "clamp",
    "derive_public_key",
    "generate",
    # Identity files
    "IdentityFileRecord",
    "format_identity",
    "format_recipients",
    "parse_identities",
    "parse_recipients",
    # Exceptions
    "BadChecksumError",
    "DecodeError",
    "GenerationError",
    "IdentityFileTooLargeError",
    "InsecureRandomError",
    "KeyFormatError",
    "MalformedError",
    "ParseError",
    "WrongLengthError",
    "WrongTagError",
]

"""Exception hierarchy for key generation, encoding and identity-file parsing."""

from __future__ import annotations


class KeyFormatError(Exception):
    """
    Base exception for all agekeygen errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class DecodeError(KeyFormatError):
    """
    Base class for failures decoding an encoded key string.

    Each subclass names exactly one reason, so callers can tell a key of
    the wrong kind from a damaged one.
    """


class WrongTagError(DecodeError):
    """
    Raised when the string does not carry the expected human-readable tag.

    Attributes:
        expected: The tag the caller asked for.
        actual: The tag found in the string.
    """

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"expected tag {expected!r}, got {actual!r}")


class MalformedError(DecodeError):
    """Raised when the string is not structurally valid Bech32."""


class BadChecksumError(DecodeError):
    """Raised when the Bech32 checksum does not match the tag and payload."""

    def __init__(self) -> None:
        super().__init__("invalid checksum")


class WrongLengthError(DecodeError):
    """
    Raised when a decoded payload is not the required number of bytes.

    Attributes:
        expected: Required payload length in bytes.
        actual: Length actually found.
    """

    def __init__(self, *, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"payload must be exactly {expected} bytes, got {actual}")


class ParseError(KeyFormatError):
    """
    Raised when a line of an identity or recipients file fails to decode.

    The whole parse is abandoned: no records from earlier lines are
    returned alongside this error.

    Attributes:
        line: 1-based line number of the offending line.
        cause: The decode error raised for that line.
    """

    def __init__(self, line: int, cause: DecodeError) -> None:
        self.line = line
        self.cause = cause
        super().__init__(f"error at line {line}: {cause.message}")


class IdentityFileTooLargeError(KeyFormatError):
    """
    Raised when an input stream exceeds the configured size bound.

    Attributes:
        limit: Maximum accepted size in characters.
    """

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"input exceeds the {limit} character limit")


class GenerationError(KeyFormatError):
    """Base class for key generation failures."""


class InsecureRandomError(GenerationError):
    """
    Raised when the secure random source is unavailable or misbehaves.

    Generation never falls back to a weaker source.
    """

"""
Identity and recipients files.

An identity file holds one secret key per line::

    # created: 2021-01-02T15:30:45+01:00
    # public key: age1lvyvwawkr0mcnnnncaghunadrqkmuf9e6507x9y920xxpp866cnql7dp2z
    AGE-SECRET-KEY-1N9JEPW6DWJ0ZQUDX63F5A03GX8QUW7PXDE39N8UYF82VZ9PC8UFS3M7XA9

Grammar, per line:

    - Empty: skipped.
    - Starting with '#': a comment, skipped. The "public key" comment
      written by the generator is documentation only; recipients are
      always re-derived from the secret key.
    - Anything else: exactly one encoded key.

Parsing is all or nothing. The first bad line aborts with its line number
and nothing decoded before it is returned, so a caller never works with
a silently truncated keyring.

A recipients file uses the same grammar with ``age1...`` lines.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import IO, Final, Iterable, Iterator

from .config import KeygenConfig
from .exceptions import DecodeError, IdentityFileTooLargeError, ParseError
from .x25519 import X25519Identity, X25519Recipient

__all__ = [
    "COMMENT_PREFIX",
    "IdentityFileRecord",
    "format_identity",
    "format_recipients",
    "iter_records",
    "parse_identities",
    "parse_recipients",
]

logger = logging.getLogger(__name__)

COMMENT_PREFIX: Final = "#"
"""Lines starting with this marker carry no key material."""


@dataclass(frozen=True, slots=True)
class IdentityFileRecord:
    """
    One data line of an identity or recipients file.

    Attributes:
        line_number: 1-based position of the line in its stream.
        text: The line with its line terminator removed.
    """

    line_number: int
    text: str

    def to_identity(self) -> X25519Identity:
        """Decode the line as a secret key."""
        return X25519Identity.parse(self.text)

    def to_recipient(self) -> X25519Recipient:
        """Decode the line as a recipient."""
        return X25519Recipient.parse(self.text)


def iter_records(stream: IO[str], config: KeygenConfig | None = None) -> Iterator[IdentityFileRecord]:
    """
    Yield the data lines of a text stream, skipping blanks and comments.

    The stream is read but never closed.

    Args:
        stream: Text stream positioned at the start of the file.
        config: Size bound to apply. Defaults to `KeygenConfig()`.

    Raises:
        IdentityFileTooLargeError: If the stream holds more characters
            than the configured bound.
    """
    limit = (config or KeygenConfig()).max_identity_file_size

    data = stream.read(limit + 1)
    if len(data) > limit:
        raise IdentityFileTooLargeError(limit)

    for line_number, line in enumerate(data.split("\n"), start=1):
        line = line.removesuffix("\r")
        if not line or line.startswith(COMMENT_PREFIX):
            continue
        yield IdentityFileRecord(line_number=line_number, text=line)


def parse_identities(stream: IO[str], config: KeygenConfig | None = None) -> list[X25519Identity]:
    """
    Parse every secret key in an identity file, in file order.

    Args:
        stream: Text stream to read. Owned by the caller.
        config: Parser limits. Defaults to `KeygenConfig()`.

    Returns:
        The identities found. An empty list is a valid result.

    Raises:
        ParseError: If a data line is not a valid secret key.
        IdentityFileTooLargeError: If the input exceeds the size bound.
    """
    identities: list[X25519Identity] = []
    for record in iter_records(stream, config):
        try:
            identities.append(record.to_identity())
        except DecodeError as e:
            raise ParseError(record.line_number, e) from e

    logger.debug("Parsed %d identities", len(identities))
    return identities


def parse_recipients(stream: IO[str], config: KeygenConfig | None = None) -> list[X25519Recipient]:
    """
    Parse every recipient in a recipients file, in file order.

    Args:
        stream: Text stream to read. Owned by the caller.
        config: Parser limits. Defaults to `KeygenConfig()`.

    Returns:
        The recipients found. An empty list is a valid result.

    Raises:
        ParseError: If a data line is not a valid recipient.
        IdentityFileTooLargeError: If the input exceeds the size bound.
    """
    recipients: list[X25519Recipient] = []
    for record in iter_records(stream, config):
        try:
            recipients.append(record.to_recipient())
        except DecodeError as e:
            raise ParseError(record.line_number, e) from e

    logger.debug("Parsed %d recipients", len(recipients))
    return recipients


def format_identity(identity: X25519Identity, created: datetime | None = None) -> str:
    """
    Render a freshly generated identity as an identity file.

    Args:
        identity: The identity to write.
        created: Creation time for the header comment. Defaults to now,
            in the local timezone.

    Returns:
        Two comment lines (creation time, public key) and the secret key
        line, each newline-terminated.
    """
    if created is None:
        created = datetime.now().astimezone()

    return (
        f"{COMMENT_PREFIX} created: {created.isoformat(timespec='seconds')}\n"
        f"{COMMENT_PREFIX} public key: {identity.recipient_string()}\n"
        f"{identity.secret_string()}\n"
    )


def format_recipients(identities: Iterable[X25519Identity]) -> str:
    """Render one recipient per line, without comments."""
    return "".join(f"{identity.recipient_string()}\n" for identity in identities)

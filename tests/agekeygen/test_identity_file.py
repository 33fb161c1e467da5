"""Tests for identity and recipients file parsing and formatting."""

from __future__ import annotations

import io
from datetime import datetime, timedelta, timezone

import pytest

from agekeygen.config import KeygenConfig
from agekeygen.exceptions import (
    BadChecksumError,
    IdentityFileTooLargeError,
    MalformedError,
    ParseError,
    WrongTagError,
)
from agekeygen.identity_file import (
    IdentityFileRecord,
    format_identity,
    format_recipients,
    iter_records,
    parse_identities,
    parse_recipients,
)
from agekeygen.x25519 import X25519Identity, generate


def _corrupt_last_symbol(s: str) -> str:
    """Replace the final checksum symbol with a different valid symbol."""
    replacement = "Q" if s[-1] != "Q" else "P"
    return s[:-1] + replacement


class TestIterRecords:
    """Tests for the line scanner."""

    def test_skips_blanks_and_comments(self) -> None:
        """Only data lines are yielded, with their 1-based line numbers."""
        text = "# comment\n\nfirst\n  \n#another\nsecond\n"
        records = list(iter_records(io.StringIO(text)))

        assert records == [
            IdentityFileRecord(line_number=3, text="first"),
            IdentityFileRecord(line_number=4, text="  "),
            IdentityFileRecord(line_number=6, text="second"),
        ]

    def test_strips_carriage_returns(self) -> None:
        """CRLF line endings are accepted."""
        records = list(iter_records(io.StringIO("a\r\n\r\nb\r\n")))
        assert [r.text for r in records] == ["a", "b"]
        assert [r.line_number for r in records] == [1, 3]

    def test_last_line_without_newline(self) -> None:
        """A final line without a terminator is still read."""
        records = list(iter_records(io.StringIO("a\nb")))
        assert [r.text for r in records] == ["a", "b"]

    def test_size_limit(self) -> None:
        """Streams larger than the configured bound are rejected."""
        config = KeygenConfig(max_identity_file_size=10)
        with pytest.raises(IdentityFileTooLargeError) as exc_info:
            list(iter_records(io.StringIO("x" * 11), config))
        assert exc_info.value.limit == 10

    def test_size_limit_inclusive(self) -> None:
        """A stream exactly at the bound is accepted."""
        config = KeygenConfig(max_identity_file_size=10)
        assert len(list(iter_records(io.StringIO("x" * 10), config))) == 1


class TestParseIdentities:
    """Tests for parse_identities()."""

    def test_ordering_with_comments_and_blank(self) -> None:
        """Three keys among comments and a blank line come back in file order."""
        identities = [generate() for _ in range(3)]
        text = (
            f"# created: 2021-01-02T15:30:45+01:00\n"
            f"{identities[0].secret_string()}\n"
            f"# public key: {identities[1].recipient_string()}\n"
            f"{identities[1].secret_string()}\n"
            f"\n"
            f"{identities[2].secret_string()}\n"
        )

        parsed = parse_identities(io.StringIO(text))

        assert parsed == identities

    def test_abort_on_corrupted_checksum(self) -> None:
        """A bad line aborts the parse with its line number and cause."""
        good = generate().secret_string()
        bad = _corrupt_last_symbol(generate().secret_string())

        with pytest.raises(ParseError) as exc_info:
            parse_identities(io.StringIO(f"{good}\n{bad}\n"))

        assert exc_info.value.line == 2
        assert isinstance(exc_info.value.cause, BadChecksumError)
        assert exc_info.value.__cause__ is exc_info.value.cause
        assert "error at line 2" in str(exc_info.value)

    @pytest.mark.parametrize("text", ["", "# only a comment\n", "\n\n", "#a\n\n#b"])
    def test_empty_inputs(self, text: str) -> None:
        """Inputs without data lines yield no identities and no error."""
        assert parse_identities(io.StringIO(text)) == []

    def test_public_key_comment_not_trusted(self) -> None:
        """Recipients are derived from the secret key, never from comments."""
        identity = generate()
        other = generate()
        text = f"# public key: {other.recipient_string()}\n{identity.secret_string()}\n"

        [parsed] = parse_identities(io.StringIO(text))

        assert parsed.recipient_string() == identity.recipient_string()

    def test_recipient_line_is_wrong_tag(self) -> None:
        """A recipient in an identity file is the wrong kind of key."""
        text = f"{generate().recipient_string()}\n"
        with pytest.raises(ParseError) as exc_info:
            parse_identities(io.StringIO(text))
        assert exc_info.value.line == 1
        assert isinstance(exc_info.value.cause, WrongTagError)

    def test_leading_whitespace_is_malformed(self) -> None:
        """Data lines must hold the key and nothing else."""
        text = f"  {generate().secret_string()}\n"
        with pytest.raises(ParseError) as exc_info:
            parse_identities(io.StringIO(text))
        assert isinstance(exc_info.value.cause, MalformedError)

    def test_indented_comment_is_data(self) -> None:
        """Only lines starting with '#' are comments."""
        with pytest.raises(ParseError):
            parse_identities(io.StringIO(" # not a comment\n"))

    def test_lowercase_secret_key_accepted(self) -> None:
        """Secret keys decode regardless of case."""
        identity = generate()
        [parsed] = parse_identities(io.StringIO(identity.secret_string().lower()))
        assert parsed == identity

    def test_stream_left_open(self) -> None:
        """The parser never closes the caller's stream."""
        stream = io.StringIO(generate().secret_string())
        parse_identities(stream)
        assert not stream.closed

    def test_roundtrip_through_format_identity(self) -> None:
        """A generated identity file parses back to the same identity."""
        identity = generate()
        assert parse_identities(io.StringIO(format_identity(identity))) == [identity]

    def test_size_limit_from_config(self) -> None:
        """The configured bound applies to parsing."""
        text = format_identity(generate())
        config = KeygenConfig(max_identity_file_size=len(text) - 1)
        with pytest.raises(IdentityFileTooLargeError):
            parse_identities(io.StringIO(text), config)


class TestParseRecipients:
    """Tests for parse_recipients()."""

    def test_ordering(self) -> None:
        """Recipients come back in file order."""
        identities = [generate() for _ in range(2)]
        text = format_recipients(identities)

        parsed = parse_recipients(io.StringIO(f"# recipients\n\n{text}"))

        assert [str(r) for r in parsed] == [i.recipient_string() for i in identities]

    def test_identity_line_rejected(self) -> None:
        """A secret key in a recipients file is the wrong kind of key."""
        text = f"# ok\n{generate().secret_string()}\n"
        with pytest.raises(ParseError) as exc_info:
            parse_recipients(io.StringIO(text))
        assert exc_info.value.line == 2
        assert isinstance(exc_info.value.cause, WrongTagError)

    def test_empty(self) -> None:
        """No recipient lines means no recipients."""
        assert parse_recipients(io.StringIO("")) == []


class TestFormat:
    """Tests for identity and recipients file rendering."""

    def test_format_identity(self) -> None:
        """The identity file has a header comment and the secret key."""
        identity = X25519Identity.parse(
            "AGE-SECRET-KEY-1N9JEPW6DWJ0ZQUDX63F5A03GX8QUW7PXDE39N8UYF82VZ9PC8UFS3M7XA9"
        )
        created = datetime(2021, 1, 2, 15, 30, 45, tzinfo=timezone(timedelta(hours=1)))

        text = format_identity(identity, created)

        assert text == (
            "# created: 2021-01-02T15:30:45+01:00\n"
            "# public key: age1lvyvwawkr0mcnnnncaghunadrqkmuf9e6507x9y920xxpp866cnql7dp2z\n"
            "AGE-SECRET-KEY-1N9JEPW6DWJ0ZQUDX63F5A03GX8QUW7PXDE39N8UYF82VZ9PC8UFS3M7XA9\n"
        )

    def test_format_identity_default_time(self) -> None:
        """Without an explicit time, the current local time is used."""
        lines = format_identity(generate()).splitlines()

        assert lines[0].startswith("# created: ")
        created = datetime.fromisoformat(lines[0].removeprefix("# created: "))
        assert created.tzinfo is not None
        assert lines[1].startswith("# public key: age1")
        assert lines[2].startswith("AGE-SECRET-KEY-1")

    def test_format_recipients(self) -> None:
        """One recipient per line, no comments."""
        identities = [generate() for _ in range(3)]
        text = format_recipients(identities)

        assert text.splitlines() == [i.recipient_string() for i in identities]
        assert text.endswith("\n")
        assert "#" not in text

    def test_format_recipients_empty(self) -> None:
        assert format_recipients([]) == ""

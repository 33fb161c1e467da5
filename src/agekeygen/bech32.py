"""
Bech32 encoding and decoding (BIP 173).

WHAT IS BECH32?
---------------
Bech32 is a checksummed base-32 text format designed for strings that
humans read aloud, type, and copy by hand. A string has three parts::

    age1ql3z7hjy54pw3hyww5ayyfg7zqgvc7w3j2elw8zmrj2kg5sfn9aqmcac8p
    ^^^ ^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^
    |  |                                          ^^^^^^-- checksum (6 symbols)
    |  +-- separator, always the LAST '1' in the string
    +-- human-readable part (HRP)

The data part uses a 32-symbol alphabet that leaves out '1', 'b', 'i'
and 'o', which are easy to confuse with other characters.


CASE RULES
----------
A string is either all lowercase or all uppercase. Both forms decode to
the same value. Mixed case is rejected, since it is a strong sign that
the string was damaged.


THE CHECKSUM
------------
The checksum is a BCH code over GF(32). It is computed over the expanded
HRP and the data symbols, so changing either part invalidates it. Any
error affecting up to four symbols is guaranteed to be detected.

HRP expansion turns each HRP character into two 5-bit values (high bits,
then low bits) separated by a zero::

    expand("age") = [3, 3, 3, 0, 1, 7, 5]


BIT REGROUPING
--------------
Payload bytes are 8-bit; Bech32 symbols carry 5 bits. Encoding regroups
8 -> 5 with zero padding at the end. Decoding regroups 5 -> 8 and
rejects leftover padding that is 5 bits or longer or that is not zero,
so every payload has exactly one valid encoding.

A 32-byte key needs ceil(256 / 5) = 52 data symbols, plus 6 checksum
symbols.


LENGTH
------
BIP 173 limits strings to 90 characters. age identities do not fit that
bound (a secret key with its tag is 74 characters, but plugin identities
can be much longer), so no length limit is enforced here.


References:
    BIP 173:
        https://github.com/bitcoin/bips/blob/master/bip-0173.mediawiki
    age format specification:
        https://age-encryption.org/v1
"""

from __future__ import annotations

from typing import Final, Iterable

from .exceptions import BadChecksumError, MalformedError

__all__ = [
    "CHARSET",
    "CHECKSUM_LENGTH",
    "SEPARATOR",
    "convert_bits",
    "decode",
    "decode_data",
    "encode",
    "split",
]

CHARSET: Final[str] = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
"""Bech32 data alphabet. Symbol value is the index in this string."""

SEPARATOR: Final[str] = "1"
"""Separator between the HRP and the data part."""

CHECKSUM_LENGTH: Final[int] = 6
"""Number of checksum symbols at the end of the data part."""

_GENERATOR: Final[tuple[int, ...]] = (
    0x3B6A57B2,
    0x26508E6D,
    0x1EA119FA,
    0x3D4233DD,
    0x2A1462B3,
)
"""Generator coefficients of the BCH code."""

_CHARSET_REV: Final[dict[str, int]] = {c: i for i, c in enumerate(CHARSET)}


def _polymod(values: Iterable[int]) -> int:
    """Compute the BCH checksum state over a sequence of 5-bit values."""
    chk = 1
    for value in values:
        top = chk >> 25
        chk = (chk & 0x1FFFFFF) << 5 ^ value
        for i, gen in enumerate(_GENERATOR):
            if (top >> i) & 1:
                chk ^= gen
    return chk


def _hrp_expand(hrp: str) -> list[int]:
    """Expand the HRP into the values that feed the checksum."""
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def _create_checksum(hrp: str, data: list[int]) -> list[int]:
    """Compute the six checksum symbols for `hrp` and `data`."""
    values = _hrp_expand(hrp) + data
    polymod = _polymod(values + [0] * CHECKSUM_LENGTH) ^ 1
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(CHECKSUM_LENGTH)]


def _verify_checksum(hrp: str, data: list[int]) -> bool:
    """Return True when `data` ends with a valid checksum for `hrp`."""
    return _polymod(_hrp_expand(hrp) + data) == 1


def convert_bits(data: Iterable[int], from_bits: int, to_bits: int, pad: bool) -> list[int]:
    """
    Regroup a sequence of `from_bits`-wide values into `to_bits`-wide values.

    Args:
        data: Input values, each below 2**from_bits.
        from_bits: Width of each input value.
        to_bits: Width of each output value.
        pad: Zero-pad the final group when encoding. When False, leftover
            bits must be shorter than `from_bits` and all zero.

    Returns:
        The regrouped values.

    Raises:
        MalformedError: If an input value is out of range or the padding
            is invalid.
    """
    acc = 0
    bits = 0
    result: list[int] = []
    max_value = (1 << to_bits) - 1
    max_acc = (1 << (from_bits + to_bits - 1)) - 1

    for value in data:
        if value < 0 or value >> from_bits:
            raise MalformedError(f"value {value} does not fit in {from_bits} bits")
        acc = ((acc << from_bits) | value) & max_acc
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            result.append((acc >> bits) & max_value)

    if pad:
        if bits:
            result.append((acc << (to_bits - bits)) & max_value)
    elif bits >= from_bits:
        raise MalformedError("illegal zero padding")
    elif (acc << (to_bits - bits)) & max_value:
        raise MalformedError("non-zero padding")

    return result


def encode(hrp: str, data: bytes) -> str:
    """
    Encode `data` as a lowercase Bech32 string under `hrp`.

    Args:
        hrp: Human-readable part, printable ASCII without spaces.
        data: Payload bytes of any length.

    Returns:
        The lowercase Bech32 string.

    Raises:
        MalformedError: If the HRP is empty or contains characters
            outside printable ASCII.
    """
    if not hrp:
        raise MalformedError("empty human-readable part")
    for c in hrp:
        if not 33 <= ord(c) <= 126:
            raise MalformedError(f"invalid character {c!r} in human-readable part")

    hrp = hrp.lower()
    values = convert_bits(data, 8, 5, pad=True)
    combined = values + _create_checksum(hrp, values)
    return hrp + SEPARATOR + "".join(CHARSET[v] for v in combined)


def split(s: str) -> tuple[str, str]:
    """
    Split a Bech32 string into its lowercase HRP and data part.

    Only structure is checked here. Symbols and checksum are verified by
    `decode_data`, which lets callers inspect the HRP first.

    Args:
        s: Candidate Bech32 string.

    Returns:
        Tuple of (hrp, data_part), both lowercase.

    Raises:
        MalformedError: On mixed case, a missing separator, an empty or
            invalid HRP, or a data part shorter than the checksum.
    """
    if s.lower() != s and s.upper() != s:
        raise MalformedError("mixed case")

    s = s.lower()
    pos = s.rfind(SEPARATOR)
    if pos < 0:
        raise MalformedError("separator '1' not found")
    if pos == 0:
        raise MalformedError("empty human-readable part")

    hrp = s[:pos]
    for c in hrp:
        if not 33 <= ord(c) <= 126:
            raise MalformedError(f"invalid character {c!r} in human-readable part")

    data_part = s[pos + 1 :]
    if len(data_part) < CHECKSUM_LENGTH:
        raise MalformedError("data part shorter than the checksum")

    return hrp, data_part


def decode_data(hrp: str, data_part: str) -> bytes:
    """
    Verify and decode the data part of a Bech32 string.

    Args:
        hrp: Lowercase human-readable part, as returned by `split`.
        data_part: Lowercase data part including the checksum.

    Returns:
        The payload bytes.

    Raises:
        MalformedError: On symbols outside the alphabet or invalid padding.
        BadChecksumError: If the checksum does not match.
    """
    values: list[int] = []
    for c in data_part:
        value = _CHARSET_REV.get(c)
        if value is None:
            raise MalformedError(f"invalid character {c!r} in data part")
        values.append(value)

    if not _verify_checksum(hrp, values):
        raise BadChecksumError()

    return bytes(convert_bits(values[:-CHECKSUM_LENGTH], 5, 8, pad=False))


def decode(s: str) -> tuple[str, bytes]:
    """
    Decode a Bech32 string.

    Args:
        s: All-lowercase or all-uppercase Bech32 string.

    Returns:
        Tuple of (lowercase hrp, payload bytes).

    Raises:
        MalformedError: If the string is not structurally valid.
        BadChecksumError: If the checksum does not match.
    """
    hrp, data_part = split(s)
    return hrp, decode_data(hrp, data_part)

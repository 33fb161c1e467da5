"""Tests for fixed-length byte array types."""

from typing import Any

import pytest

from agekeygen.types import BaseBytes, Bytes32


def test_bytes_inheritance_ok() -> None:
    assert issubclass(Bytes32, BaseBytes)
    assert Bytes32.LENGTH == 32
    v = Bytes32(b"\x00" * 32)
    assert isinstance(v, Bytes32)
    assert isinstance(v, bytes)
    assert len(v) == 32


@pytest.mark.parametrize(
    "value",
    [
        b"\x07" * 32,
        bytearray(b"\x07" * 32),
        [7] * 32,
    ],
)
def test_bytes32_coercion(value: Any) -> None:
    assert bytes(Bytes32(value)) == b"\x07" * 32


@pytest.mark.parametrize("length", [0, 31, 33, 64])
def test_bytes32_wrong_length_raises(length: int) -> None:
    with pytest.raises(ValueError, match="expects exactly 32 bytes"):
        Bytes32(b"\x00" * length)


def test_rejects_text() -> None:
    """Key material is never built from a text string."""
    with pytest.raises(TypeError):
        Bytes32("07" * 32)


def test_repr_and_hex() -> None:
    v = Bytes32(bytes(range(32)))
    assert repr(v) == f"Bytes32({bytes(range(32)).hex()})"
    assert v.hex() == bytes(range(32)).hex()


def test_missing_length_raises() -> None:
    with pytest.raises(TypeError, match="must define LENGTH"):
        BaseBytes(b"")

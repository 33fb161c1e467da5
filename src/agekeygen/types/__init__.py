"""Reusable type definitions for agekeygen."""

from .base import StrictBaseModel
from .byte_arrays import BaseBytes, Bytes32

__all__ = [
    "BaseBytes",
    "Bytes32",
    "StrictBaseModel",
]

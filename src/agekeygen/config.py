"""
Runtime configuration for agekeygen.

Settings come from environment variables and apply across the parser and
the command-line tool.
"""

from __future__ import annotations

import os
from typing import Final, Mapping

from pydantic import Field, field_validator

from .types import StrictBaseModel

MAX_IDENTITY_FILE_SIZE: Final = 1 << 24
"""Largest identity or recipients file accepted, in characters (16 Mi)."""

LOG_LEVEL: Final = "WARNING"
"""Default logging level for the command-line tool."""

_SUPPORTED_LOG_LEVELS: Final[list[str]] = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

ENV_PREFIX: Final = "AGE_KEYGEN_"
"""Prefix of the environment variables read by `KeygenConfig.from_env`."""


class KeygenConfig(StrictBaseModel):
    """Runtime configuration for key generation and identity-file parsing."""

    max_identity_file_size: int = Field(default=MAX_IDENTITY_FILE_SIZE, gt=0)
    """Upper bound, in characters, on the size of a parsed input stream."""

    log_level: str = LOG_LEVEL
    """Logging level used when `--verbose` is not given."""

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        if v not in _SUPPORTED_LOG_LEVELS:
            raise ValueError(f"Invalid log level '{v}'. Supported values: {_SUPPORTED_LOG_LEVELS}")
        return v

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> KeygenConfig:
        """
        Build a configuration from ``AGE_KEYGEN_*`` environment variables.

        Args:
            environ: Mapping to read instead of `os.environ`.

        Raises:
            ValueError: If a variable holds an invalid value.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        raw_limit = env.get(f"{ENV_PREFIX}MAX_IDENTITY_FILE_SIZE")
        if raw_limit is not None:
            try:
                values["max_identity_file_size"] = int(raw_limit)
            except ValueError:
                raise ValueError(
                    f"Invalid {ENV_PREFIX}MAX_IDENTITY_FILE_SIZE: '{raw_limit}' is not an integer"
                ) from None

        raw_level = env.get(f"{ENV_PREFIX}LOG_LEVEL")
        if raw_level is not None:
            values["log_level"] = raw_level.upper()

        return cls(**values)

"""Pytest configuration and shared fixtures."""

import logging
import os
from collections.abc import Iterator

import pytest
from hypothesis import settings

from agekeygen.config import ENV_PREFIX

# Create a profile named "no_deadline" with deadline disabled.
settings.register_profile("no_deadline", deadline=None)
settings.load_profile("no_deadline")


@pytest.fixture(autouse=True)
def _isolate_keygen(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run every test without AGE_KEYGEN_* settings or leftover CLI log handlers."""
    for name in list(os.environ):
        if name.startswith(ENV_PREFIX):
            monkeypatch.delenv(name)

    yield

    logger = logging.getLogger("agekeygen")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)

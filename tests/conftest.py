"""Shared pytest fixtures for svcwire tests."""

from __future__ import annotations

import pytest

from svcwire.container import Container
from svcwire.lock_mode import LockMode
from tests.doubles import RecordingContainer


@pytest.fixture()
def container() -> Container:
    """Default container with dotted-path class imports enabled."""
    return Container()


@pytest.fixture()
def strict_container() -> Container:
    """Container that only constructs explicitly registered classes."""
    return Container(import_classes=False)


@pytest.fixture()
def unlocked_container() -> Container:
    """Container without resolution locking."""
    return Container(lock_mode=LockMode.NONE)


@pytest.fixture()
def recording_container() -> RecordingContainer:
    """Container double recording ``get`` calls."""
    return RecordingContainer()

"""Shared pytest fixtures."""

import pytest

from exam_monitor.services.registry import SessionRegistry
from tests.fakes import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(clock):
    return SessionRegistry(clock=clock)

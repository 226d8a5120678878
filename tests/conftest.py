"""
Shared pytest fixtures and configuration for anyflux tests.
"""

from dataclasses import dataclass

import pytest

from anyflux import Store, _reset_registry, reset_config


@pytest.fixture(autouse=True)
def reset_registry():
    """Reset this thread's registry and the config before each test to prevent state leakage."""
    _reset_registry()
    reset_config()


@dataclass(frozen=True)
class Counter(Store):
    count: int = 0


@pytest.fixture
def counter_store():
    """Provide a simple frozen-dataclass store class."""
    return Counter

"""Unit tests for the Store base class and structural contract."""

from dataclasses import dataclass

import pytest

from anyflux import Store, StoreProtocol, is_store


@pytest.mark.unit
@pytest.mark.store
def test_store_new_calls_constructor_without_arguments():
    """Store.new() builds the default instance"""

    @dataclass(frozen=True)
    class Settings(Store):
        theme: str = "light"

    assert Settings.new() == Settings(theme="light")


@pytest.mark.unit
@pytest.mark.store
def test_store_default_should_notify_is_inequality():
    """Default significance is plain inequality"""

    @dataclass(frozen=True)
    class Settings(Store):
        theme: str = "light"

    assert Settings().should_notify(Settings(theme="dark")) is True
    assert Settings().should_notify(Settings()) is False


@pytest.mark.unit
@pytest.mark.store
def test_store_should_notify_can_ignore_fields():
    """Subclasses decide significance themselves"""

    @dataclass(frozen=True)
    class Tracked(Store):
        value: int = 0
        revision: int = 0

        def should_notify(self, other):
            return self.value != other.value

    assert Tracked(1, 1).should_notify(Tracked(1, 2)) is False
    assert Tracked(1, 1).should_notify(Tracked(2, 1)) is True


@pytest.mark.unit
@pytest.mark.store
def test_store_protocol_accepts_duck_typed_classes():
    """Classes with new() and should_notify() satisfy the protocol without subclassing"""

    class Plain:
        @classmethod
        def new(cls):
            return cls()

        def should_notify(self, other):
            return self is not other

    assert isinstance(Plain(), StoreProtocol)
    assert is_store(Plain)
    assert not is_store(object)

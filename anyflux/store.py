"""
anyflux Store - The State Capability
====================================

Every piece of shared state in anyflux is a *store*: a class that knows how to
build its own initial value and how to judge whether a change between two of
its values matters to subscribers.

Two ways to define one:

**Store**: subclass the base class. `new()` defaults to calling the class with
no arguments and `should_notify()` defaults to inequality, so a frozen
dataclass gets both for free.

**StoreProtocol**: any class with a `new()` classmethod and a
`should_notify()` method satisfies the structural contract, no subclassing
required.

Basic Usage
-----------

```python
from dataclasses import dataclass

from anyflux import Store, get_or_init


@dataclass(frozen=True)
class Counter(Store):
    count: int = 0


ctx = get_or_init(Counter)
ctx.reduce(lambda s: Counter(s.count + 1))  # True
```

Cross-store initialization
--------------------------

`new()` may request other stores. The registry never holds a borrow while a
constructor runs, so this is safe:

```python
@dataclass(frozen=True)
class Session(Store):
    user: str = ""

    @classmethod
    def new(cls):
        settings = get_or_init(Settings).state
        return cls(user=settings.default_user)
```

Snapshots are shared by reference between every holder. Treat them as
immutable and return a new value from reductions instead of mutating the one
you were given.
"""

from typing import Protocol, Type, TypeVar, runtime_checkable

S = TypeVar("S")


@runtime_checkable
class StoreProtocol(Protocol):
    """Structural contract for store types."""

    @classmethod
    def new(cls: Type[S]) -> S:
        """Produce the initial state."""
        ...

    def should_notify(self: S, other: S) -> bool:
        """Return True if moving from self (old) to other (new) is significant."""
        ...


class Store:
    """
    Base class for state types.

    Subclasses override `new()` when the initial state needs anything beyond
    a no-argument constructor (including other stores), and `should_notify()`
    when significance is not plain inequality, e.g. to ignore bookkeeping
    fields.
    """

    @classmethod
    def new(cls: Type[S]) -> S:
        return cls()

    def should_notify(self, other) -> bool:
        return self != other


def is_store(obj) -> bool:
    """Check whether a class (or instance) satisfies the store contract."""
    return callable(getattr(obj, "new", None)) and callable(
        getattr(obj, "should_notify", None)
    )

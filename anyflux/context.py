"""
anyflux Context - Per-Thread Store Registry and Reductions
==========================================================

This module holds the registry that maps each store class to its one shared
instance on the current thread, and the `Context` handle used to read and
transition that instance.

Registry
--------

`get_or_init(S)` returns the `Context` for store class `S`, building it with
`S.new()` the first time it is asked for on this thread. The registry is a
dict from class to an entry cell holding either `None` (pending) or the
ready `Context`.

Store constructors are allowed to request other stores. To make that work the
registry only borrows its map for the instant it takes to find or insert an
entry, and `S.new()` runs with nothing borrowed. A per-thread set of classes
under construction turns a constructor that asks for its own class (directly
or through another store) into a `ReentrantInitError` instead of a second
construction.

Reductions
----------

`Context.reduce(f)` reads the current snapshot, computes `f(old)`, swaps the
result in and returns `old.should_notify(new)`. Nothing else can run on the
thread in between, so it is atomic from the caller's point of view.

`Context.reduce_future(f)` does the same with an awaitable-returning `f`.
Other tasks on the event loop may run while `f` is suspended, including other
reductions of the same store. Those writes are lost when the future
reduction resumes and writes a value computed from its stale `old`, and its
notification decision compares against that stale `old`:

```python
ctx = get_or_init(Counter)

async def slow(s):
    await asyncio.sleep(0)
    return Counter(s.count + 10)

async def main():
    task = asyncio.ensure_future(ctx.reduce_future(slow))
    await asyncio.sleep(0)
    ctx.reduce(lambda s: Counter(s.count + 1))  # overwritten below
    await task

asyncio.run(main())
ctx.state.count  # 10
```
"""

import copy
import logging
import threading
from typing import (
    Any,
    Awaitable,
    Callable,
    Coroutine,
    Dict,
    Generic,
    Optional,
    Set,
    Type,
    TypeVar,
)

from .config import get_config
from .mrc import Mrc

S = TypeVar("S")


# ============================================================================
# EXCEPTIONS
# ============================================================================


class RegistryUnavailableError(RuntimeError):
    """Raised when the thread-local registry cannot be reached."""

    pass


class RegistryInvariantError(RuntimeError):
    """Raised when a registry entry is still pending after initialization."""

    pass


class ReentrantInitError(RuntimeError):
    """Raised when a store's constructor requests its own store."""

    pass


# ============================================================================
# CONTEXT
# ============================================================================


class Context(Generic[S]):
    """
    Handle onto one shared store instance.

    Copies made with `clone()` (or `copy.copy`) share the same cell, so a
    reduction through any of them is visible through all of them.
    """

    __slots__ = ("store",)

    def __init__(self, store: Mrc[S]):
        self.store = store

    def clone(self) -> "Context[S]":
        return Context(self.store)

    __copy__ = clone

    @property
    def state(self) -> S:
        """The current snapshot."""
        return self.store.borrow()

    def get(self) -> S:
        return self.store.borrow()

    def reduce(self, f: Callable[[S], S]) -> bool:
        """Apply f to the state, returning whether subscribers should be notified."""
        old = self.store.borrow()
        new = f(old)
        self.store.replace(new)
        return old.should_notify(new)

    def set(self, value: S) -> bool:
        """Replace the state outright, with the same notification rule as reduce()."""
        return self.reduce(lambda _: value)

    def reduce_mut(self, f: Callable[[S], Any]) -> bool:
        """
        Mutate a deep copy of the state in place, then swap it in.

        The snapshot other holders see is never touched, nested containers
        included; f's return value is ignored.
        """
        old = self.store.borrow()
        new = copy.deepcopy(old)
        f(new)
        self.store.replace(new)
        return old.should_notify(new)

    def reduce_future(
        self, f: Callable[[S], Awaitable[S]]
    ) -> Coroutine[Any, Any, bool]:
        """
        Apply an asynchronous reduction to the state.

        Returns a coroutine resolving to whether subscribers should be
        notified. Raises RuntimeError right away when future reductions are
        disabled in the config.
        """
        if not get_config().future_reductions:
            raise RuntimeError("Future reductions not enabled")
        return self._reduce_future(f)

    async def _reduce_future(self, f: Callable[[S], Awaitable[S]]) -> bool:
        old = self.store.borrow()
        new = await f(old)
        self.store.replace(new)
        return old.should_notify(new)

    def ptr_eq(self, other: "Context") -> bool:
        return self.store.ptr_eq(other.store)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Context):
            return NotImplemented
        return self.ptr_eq(other)

    def __hash__(self) -> int:
        return id(self.store)

    def __repr__(self) -> str:
        return f"Context({self.store!r})"


# ============================================================================
# REGISTRY
# ============================================================================

# Holds all shared state, one registry per thread.
_local = threading.local()


def _get_local() -> threading.local:
    local = _local
    if local is None:
        # Module globals are cleared during interpreter shutdown.
        logging.error("anyflux registry accessed after thread-local teardown")
        raise RegistryUnavailableError("anyflux registry thread local unavailable")
    return local


def _get_contexts() -> Mrc[Dict[type, Mrc[Optional[Context]]]]:
    local = _get_local()
    if not hasattr(local, "contexts"):
        local.contexts = Mrc({})
    return local.contexts


def _get_initializing() -> Set[type]:
    local = _get_local()
    if not hasattr(local, "initializing"):
        local.initializing = set()
    return local.initializing


def _entry_for(
    entries: Dict[type, Mrc[Optional[Context]]], store_cls: type
) -> Mrc[Optional[Context]]:
    """Find the entry for store_cls, inserting it as pending if absent."""
    entry = entries.get(store_cls)
    if entry is None:
        entry = entries[store_cls] = Mrc(None)
    return entry


def get_or_init(store_cls: Type[S]) -> Context[S]:
    """
    Get the Context for a store class, creating the store on first use.

    `store_cls.new()` runs at most once per thread. It may call get_or_init
    for other store classes; asking for its own class raises
    ReentrantInitError. Exceptions from `new()` propagate and leave the entry
    pending, so the next call tries again.
    """
    contexts = _get_contexts()

    # Single short borrow of the map; never held while a store is built.
    entry = contexts.with_mut(lambda entries: _entry_for(entries, store_cls))

    if entry.borrow() is None:
        initializing = _get_initializing()
        if store_cls in initializing:
            logging.debug(f"Rejecting reentrant init of {store_cls.__qualname__}")
            raise ReentrantInitError(
                f"{store_cls.__qualname__}.new() requested {store_cls.__qualname__} "
                "while it was being created"
            )

        initializing.add(store_cls)
        logging.debug(f"Initializing store {store_cls.__qualname__}")
        try:
            state = store_cls.new()
        except Exception as e:
            logging.debug(f"Store {store_cls.__qualname__} failed to initialize: {e}")
            raise
        finally:
            initializing.discard(store_cls)

        entry.replace(Context(Mrc(state)))
        logging.debug(f"Store {store_cls.__qualname__} initialized")

    context = entry.borrow()
    if context is None:
        logging.error(f"Context for {store_cls.__qualname__} not initialized")
        raise RegistryInvariantError("Context not initialized")

    return context.clone()


def is_initialized(store_cls: type) -> bool:
    """Check whether store_cls has a ready Context on this thread."""
    entry = _get_contexts().borrow().get(store_cls)
    return entry is not None and entry.borrow() is not None


def _reset_registry() -> None:
    """
    Drop this thread's registry for testing purposes.

    Contexts already handed out keep working but are no longer shared with
    later get_or_init calls. Not for production use.
    """
    _get_local().__dict__.clear()

"""
anyflux Mrc - Shared Mutable Cell
=================================

`Mrc` ("mutable reference cell") gives several handles read/write access to
one slot. Handles are just references to the same `Mrc` object, so a write
through one is seen through all of them.

The cell assumes single-threaded, cooperative use and checks it at runtime:

- A mutable borrow is exclusive. Reading or borrowing again while
  `borrow_mut()` or `with_mut()` is active raises `BorrowError`.
- A cell belongs to the thread that created it. Touching it from another
  thread raises `CrossThreadAccessError` (see `Config.detect_cross_thread`).
"""

import threading
from contextlib import contextmanager
from typing import Callable, Generic, Iterator, TypeVar

from .config import get_config

T = TypeVar("T")
R = TypeVar("R")


class BorrowError(RuntimeError):
    """Raised when a cell is accessed while it is mutably borrowed."""

    pass


class CrossThreadAccessError(RuntimeError):
    """Raised when a cell is accessed from a thread that does not own it."""

    pass


class RefMut(Generic[T]):
    """Write-through view of a cell's slot, valid inside `borrow_mut()`."""

    __slots__ = ("_cell",)

    def __init__(self, cell: "Mrc[T]"):
        self._cell = cell

    @property
    def value(self) -> T:
        return self._cell._value

    @value.setter
    def value(self, new_value: T) -> None:
        self._cell._value = new_value


class Mrc(Generic[T]):
    """Single-thread interior-mutability cell."""

    __slots__ = ("_value", "_borrowed_mut", "_owner")

    def __init__(self, value: T):
        self._value = value
        self._borrowed_mut = False
        self._owner = threading.get_ident()

    def _check_access(self) -> None:
        if (
            get_config().detect_cross_thread
            and threading.get_ident() != self._owner
        ):
            raise CrossThreadAccessError(
                f"Mrc created on thread {self._owner} accessed from "
                f"thread {threading.get_ident()}"
            )
        if self._borrowed_mut:
            raise BorrowError("Mrc already mutably borrowed")

    def borrow(self) -> T:
        """Return the current value."""
        self._check_access()
        return self._value

    @contextmanager
    def borrow_mut(self) -> Iterator[RefMut[T]]:
        """
        Exclusively borrow the slot for the duration of the block.

        Yields a RefMut whose `value` attribute reads and writes the slot.
        """
        self._check_access()
        self._borrowed_mut = True
        try:
            yield RefMut(self)
        finally:
            self._borrowed_mut = False

    def with_mut(self, f: Callable[[T], R]) -> R:
        """Run f on the value while holding an exclusive borrow."""
        with self.borrow_mut() as slot:
            return f(slot.value)

    def replace(self, value: T) -> T:
        """Swap in a new value and return the previous one."""
        with self.borrow_mut() as slot:
            old = slot.value
            slot.value = value
        return old

    def ptr_eq(self, other: "Mrc") -> bool:
        return self is other

    @property
    def is_borrowed_mut(self) -> bool:
        return self._borrowed_mut

    def __repr__(self) -> str:
        if self._borrowed_mut:
            return "Mrc(<borrowed>)"
        return f"Mrc({self._value!r})"

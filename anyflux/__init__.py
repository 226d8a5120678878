"""
anyflux - Per-Thread Singleton Stores

Each store class gets exactly one shared instance per thread, created lazily
on first access. Reductions swap in new snapshots and report whether the
change is worth telling subscribers about.
"""

from .config import Config, configure, get_config, reset_config
from .context import (
    Context,
    ReentrantInitError,
    RegistryInvariantError,
    RegistryUnavailableError,
    _reset_registry,
    get_or_init,
    is_initialized,
)
from .mrc import BorrowError, CrossThreadAccessError, Mrc, RefMut
from .store import Store, StoreProtocol, is_store

__all__ = [
    # Stores
    "Store",
    "StoreProtocol",
    "is_store",
    # Registry and contexts
    "Context",
    "get_or_init",
    "is_initialized",
    # Shared cell
    "Mrc",
    "RefMut",
    # Configuration
    "Config",
    "configure",
    "get_config",
    "reset_config",
    # Exceptions
    "BorrowError",
    "CrossThreadAccessError",
    "ReentrantInitError",
    "RegistryInvariantError",
    "RegistryUnavailableError",
    # Testing utilities (internal use)
    "_reset_registry",
]

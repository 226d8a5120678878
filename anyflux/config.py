"""
anyflux Config - Runtime Switches
=================================

Module-level configuration for optional behaviour. Defaults are read from the
environment once, at import time, and can be overridden with `configure()`.

Options:
- future_reductions: enables `Context.reduce_future` (ANYFLUX_FUTURE_REDUCTIONS)
- detect_cross_thread: makes `Mrc` reject access from a foreign thread
  (ANYFLUX_DETECT_CROSS_THREAD)
"""

import os
from dataclasses import dataclass, fields, replace
from typing import Optional

_FALSE_VALUES = ("0", "false", "no", "off")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() not in _FALSE_VALUES


@dataclass(frozen=True)
class Config:
    """Immutable set of runtime switches."""

    future_reductions: bool = True
    detect_cross_thread: bool = True

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            future_reductions=_env_flag("ANYFLUX_FUTURE_REDUCTIONS", True),
            detect_cross_thread=_env_flag("ANYFLUX_DETECT_CROSS_THREAD", True),
        )


_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the active configuration.

    Lazily built from the environment on first access.
    """
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def configure(**overrides) -> Config:
    """
    Override individual options and return the new configuration.

    Raises TypeError for option names Config does not define.
    """
    global _config
    known = {f.name for f in fields(Config)}
    unknown = set(overrides) - known
    if unknown:
        raise TypeError(f"Unknown config option(s): {', '.join(sorted(unknown))}")
    _config = replace(get_config(), **overrides)
    return _config


def reset_config() -> None:
    """Drop overrides so the next access re-reads the environment."""
    global _config
    _config = None

"""Environment-driven settings for withdefer."""

from __future__ import annotations

import os
from dataclasses import dataclass

_TRUTHY = ("1", "true", "yes")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class DeferConfig:
    """Settings read from ``WITHDEFER_*`` environment variables.

    Attributes:
        debug: Log invocation phase transitions at DEBUG level.
        cleanup_tracebacks: Attach ``exc_info`` to cleanup failure warnings.
    """

    debug: bool = False
    cleanup_tracebacks: bool = True

    @classmethod
    def from_env(cls) -> DeferConfig:
        return cls(
            debug=_env_flag("WITHDEFER_DEBUG", False),
            cleanup_tracebacks=_env_flag("WITHDEFER_CLEANUP_TRACEBACKS", True),
        )


DEFAULT_CONFIG = DeferConfig.from_env()

__all__ = ["DEFAULT_CONFIG", "DeferConfig"]

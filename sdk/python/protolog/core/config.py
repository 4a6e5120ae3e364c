"""
Settings resolution.

Every setting resolves the same way: an explicit argument wins, then the
environment variable, then the built-in default.

    PROTOLOG_LEVEL=DEBUG      # default level for protolog.get_logger()
    PROTOLOG_TYPED=1          # Options.from_env() emits @type on every message
"""

from __future__ import annotations

import logging
import os

_TRUE  = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def _resolve(explicit: str | None, env_var: str, default: str) -> str:
    if explicit:
        return explicit.strip()
    from_env = os.environ.get(env_var, "").strip()
    if from_env:
        return from_env
    return default


def resolve_flag(explicit: bool | None, env_var: str, default: bool) -> bool:
    """Resolve a boolean setting. Raises ValueError on an unrecognised env value."""
    if explicit is not None:
        return bool(explicit)
    raw = _resolve(None, env_var, "").lower()
    if not raw:
        return default
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError(f"{env_var}={raw!r} is not a boolean (use 1/0, true/false, yes/no)")


def resolve_level(explicit: int | str | None, env_var: str = "PROTOLOG_LEVEL", default: str = "INFO") -> int:
    """Resolve a logging level given as a number or a level name."""
    if isinstance(explicit, int):
        return explicit
    name  = _resolve(explicit, env_var, default).upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError(f"unknown log level {name!r}")
    return level

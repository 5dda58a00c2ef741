# clipcache/inputs/settings.py
"""
FetchPolicy loader with light environment overrides.

Environment overrides (optional)
--------------------------------
- CLIPCACHE_USER_AGENT      -> FetchPolicy.user_agent
- CLIPCACHE_TIMEOUT_S       -> FetchPolicy.timeout_s (float)
- CLIPCACHE_SHARING_DOMAIN  -> FetchPolicy.sharing_domain
- CLIPCACHE_SHARING_ORIGIN  -> FetchPolicy.sharing_origin
- CLIPCACHE_MAX_WORKERS     -> FetchPolicy.max_workers (int)
- CLIPCACHE_DEBUG           -> debug logging in the CLI (1/true/yes/on)

Unparseable numbers are ignored (the default is kept); values that parse but
fail validation raise ValueError.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import ValidationError

from clipcache.schemas.models import FetchPolicy

ENV_PREFIX = "CLIPCACHE_"

_TRUTHY = {"1", "true", "yes", "on"}


def _env(prefix: str, name: str) -> str | None:
    val = os.getenv(f"{prefix}{name}")
    if val is None:
        return None
    val = val.strip()
    return val or None


def load_policy(env_prefix: str = ENV_PREFIX, **overrides: Any) -> FetchPolicy:
    """
    Build a FetchPolicy from defaults, then env vars, then explicit keyword overrides.
    """
    values: dict[str, Any] = {}

    for field in ("user_agent", "sharing_domain", "sharing_origin"):
        raw = _env(env_prefix, field.upper())
        if raw:
            values[field] = raw

    timeout = _env(env_prefix, "TIMEOUT_S")
    if timeout:
        try:
            values["timeout_s"] = float(timeout)
        except ValueError:
            pass

    workers = _env(env_prefix, "MAX_WORKERS")
    if workers:
        try:
            values["max_workers"] = int(workers)
        except ValueError:
            pass

    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return FetchPolicy.model_validate(values)
    except ValidationError as e:
        raise ValueError(f"Invalid fetch policy:\n{e}") from e


def debug_enabled(env_prefix: str = ENV_PREFIX) -> bool:
    return (_env(env_prefix, "DEBUG") or "").lower() in _TRUTHY


__all__ = ["ENV_PREFIX", "load_policy", "debug_enabled"]

"""Shared helpers for reading settings: keyword override, then environment, then default."""
from __future__ import annotations

import os
from typing import Mapping

_TRUE = ("1", "true", "yes", "on")


def env_setting(overrides: Mapping[str, object], attr: str, env: str, default: object) -> object:
    value = overrides.get(attr)
    if value is not None:
        return value
    raw = os.environ.get(env, "").strip()
    return raw if raw else default


def env_int(overrides: Mapping[str, object], attr: str, env: str, default: int) -> int:
    value = env_setting(overrides, attr, env, default)
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValueError(f"{env} must be an integer, got {value!r}") from None


def env_bool(overrides: Mapping[str, object], attr: str, env: str, default: bool) -> bool:
    value = env_setting(overrides, attr, env, default)
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE

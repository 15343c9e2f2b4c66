"""Runtime configuration, read from LOAM_* environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from .runtime import DEFAULT_MAX_CALL_DEPTH

ENV_MAX_CALL_DEPTH = "LOAM_MAX_CALL_DEPTH"
ENV_DEBUG_PY_TRACE = "LOAM_DEBUG_PY_TRACE"
ENV_LOG_LEVEL = "LOAM_LOG_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"", "0", "false", "no", "off"}


@dataclass(frozen=True)
class LoamConfig:
    max_call_depth: int = DEFAULT_MAX_CALL_DEPTH
    debug_py_trace: bool = False
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LoamConfig":
        env = os.environ if environ is None else environ
        config = cls()

        raw_depth = env.get(ENV_MAX_CALL_DEPTH)
        if raw_depth is not None:
            try:
                depth = int(raw_depth.strip())
            except ValueError:
                raise ValueError(f"{ENV_MAX_CALL_DEPTH} must be an integer, got {raw_depth!r}") from None
            if depth < 1:
                raise ValueError(f"{ENV_MAX_CALL_DEPTH} must be at least 1, got {depth}")
            config = replace(config, max_call_depth=depth)

        raw_trace = env.get(ENV_DEBUG_PY_TRACE)
        if raw_trace is not None:
            config = replace(config, debug_py_trace=_parse_flag(ENV_DEBUG_PY_TRACE, raw_trace))

        raw_level = env.get(ENV_LOG_LEVEL)
        if raw_level is not None:
            level = raw_level.strip().upper()
            if not isinstance(logging.getLevelName(level), int):
                raise ValueError(f"{ENV_LOG_LEVEL} must be a logging level name, got {raw_level!r}")
            config = replace(config, log_level=level)

        return config


def _parse_flag(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"{name} must be one of 1/true/yes/on or 0/false/no/off, got {raw!r}")


def debug_py_trace_enabled() -> bool:
    """Live check of the traceback toggle (the REPL flips it at runtime)."""
    return os.environ.get(ENV_DEBUG_PY_TRACE, "").strip().lower() in _TRUTHY

"""Loguru configuration for the interpreter and its front ends."""

from __future__ import annotations

import os
import sys
from typing import Any, Literal

from loguru import logger
from rich.console import Console
from rich.logging import RichHandler

LogProfile = Literal["default", "repl"]

LOG_FILTER_ENV = "JEKO_LOG_FILTER"
DEFAULT_LEVEL = "warning"

_RECORD_FORMAT = "{time:HH:mm:ss.SSS} | {level:<7} | {name}:{line} | {message}"
_active_profile: LogProfile | None = None


def parse_log_filter(raw: str | None = None) -> tuple[str, dict[str | None, str | int | bool]]:
    """Split a JEKO_LOG_FILTER value into a global level and per-module levels.

    ``"debug,jeko.runtime=info,jeko.runtime.commands=false"`` means DEBUG
    everywhere, INFO for ``jeko.runtime`` and nothing from the command
    module. A bare level sets the global threshold; when none is given the
    threshold is ``warning``.
    """
    text = raw if raw is not None else os.getenv(LOG_FILTER_ENV, DEFAULT_LEVEL)
    level = DEFAULT_LEVEL
    modules: dict[str | None, str | int | bool] = {}
    for entry in filter(None, (part.strip() for part in text.lower().split(","))):
        module, sep, module_level = entry.partition("=")
        if not sep:
            level = entry
            continue
        module_level = module_level.strip()
        modules[module.strip()] = False if module_level == "false" else module_level.upper()
    return level, modules


def _sink_for(profile: LogProfile) -> tuple[Any, str]:
    if profile == "repl":
        # Records go through rich so they do not tear the prompt line.
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
            markup=False,
            rich_tracebacks=False,
        )
        return handler, "{message}"
    return sys.stderr, _RECORD_FORMAT


def configure_logging(*, profile: LogProfile = "default") -> None:
    """Install the single process-wide handler for ``profile``.

    Calling again with the active profile is a no-op, so every CLI entry
    point may call this unconditionally.
    """
    global _active_profile
    if profile == _active_profile:
        return

    level, modules = parse_log_filter()
    # The "" entry is the fallback for modules without their own level.
    modules.setdefault("", level.upper())
    sink, record_format = _sink_for(profile)

    logger.remove()
    logger.add(sink, level=0, format=record_format, filter=modules, backtrace=False, diagnose=False)
    _active_profile = profile

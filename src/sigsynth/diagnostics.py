"""Optional render diagnostics written to an append-only log file."""
from __future__ import annotations

import time
from pathlib import Path

__all__ = [
    "DEFAULT_LOG_PATH",
    "enable_render_logging",
    "log_render_event",
    "render_log_path",
    "render_logging_enabled",
]


DEFAULT_LOG_PATH = Path("logs/render.log")

_LOG_RENDER = False
_LOG_PATH = DEFAULT_LOG_PATH


def enable_render_logging(enabled: bool, path: str | Path | None = None) -> None:
    """Enable or disable render logging, optionally redirecting the log file."""

    global _LOG_RENDER, _LOG_PATH
    _LOG_RENDER = bool(enabled)
    if path is not None:
        _LOG_PATH = Path(path)


def render_logging_enabled() -> bool:
    """Return ``True`` when render logging is enabled."""

    return _LOG_RENDER


def render_log_path() -> Path:
    return _LOG_PATH


def log_render_event(message: str) -> None:
    """Append ``message`` to the render log when logging is enabled."""

    if not _LOG_RENDER:
        return
    _LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
    stamp = time.strftime("%Y-%m-%d %H:%M:%S")
    with _LOG_PATH.open("a", encoding="utf-8") as handle:
        handle.write(f"[{stamp}] {message}\n")

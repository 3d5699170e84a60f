from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from chipforge.core.utils.io import ensure_directory

_CHIPFORGE_HANDLER: Optional[logging.Handler] = None
_CONFIGURED_TARGET: Optional[str] = None

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
STDERR_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _level_from_name(name: str) -> int:
    level = getattr(logging, str(name).upper(), None)
    return level if isinstance(level, int) else logging.WARNING


def configure_stdlib_logging(*, level: str = "WARNING", log_path: Optional[Path] = None) -> None:
    """Install the chipforge handler on the root logger.

    Logs go to stderr, or to ``log_path`` when given, so stdout stays clean
    for command output. Idempotent per-process: calling again with the same
    target only adjusts the level.
    """
    global _CHIPFORGE_HANDLER, _CONFIGURED_TARGET

    target = str(Path(log_path).resolve()) if log_path is not None else "<stderr>"
    root = logging.getLogger()
    root.setLevel(_level_from_name(level))

    if _CHIPFORGE_HANDLER is not None:
        if _CONFIGURED_TARGET == target:
            _CHIPFORGE_HANDLER.setLevel(_level_from_name(level))
            return
        root.removeHandler(_CHIPFORGE_HANDLER)
        _CHIPFORGE_HANDLER.close()
        _CHIPFORGE_HANDLER = None

    handler: logging.Handler
    if log_path is not None:
        ensure_directory(Path(target).parent)
        handler = logging.FileHandler(target, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(STDERR_FORMAT))
    handler.setLevel(_level_from_name(level))
    root.addHandler(handler)

    _CHIPFORGE_HANDLER = handler
    _CONFIGURED_TARGET = target


def reset_stdlib_logging_for_tests() -> None:
    """Test-only: remove the chipforge handler."""
    global _CHIPFORGE_HANDLER, _CONFIGURED_TARGET
    if _CHIPFORGE_HANDLER is not None:
        logging.getLogger().removeHandler(_CHIPFORGE_HANDLER)
        _CHIPFORGE_HANDLER.close()
    _CHIPFORGE_HANDLER = None
    _CONFIGURED_TARGET = None


__all__ = ["configure_stdlib_logging", "reset_stdlib_logging_for_tests"]

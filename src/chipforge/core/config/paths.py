"""Project root resolution.

Resolution priority:
1. Explicit ``repo_root`` argument (the CLI ``--repo-root`` flag)
2. ``CHIPFORGE_PROJECT_ROOT`` environment variable
3. Nearest ancestor of the working directory holding ``.chipforge`` or ``.git``
4. The working directory itself
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Union

from chipforge.core.exceptions import ConfigError

PROJECT_ROOT_ENV = "CHIPFORGE_PROJECT_ROOT"
PROJECT_CONFIG_DIR = ".chipforge"
ROOT_MARKERS = (PROJECT_CONFIG_DIR, ".git")


def find_marked_ancestor(start: Path) -> Optional[Path]:
    """Closest directory at or above ``start`` containing a root marker."""
    for candidate in (start, *start.parents):
        if any((candidate / marker).exists() for marker in ROOT_MARKERS):
            return candidate
    return None


def resolve_project_root(repo_root: Union[str, Path, None] = None) -> Path:
    """Resolve the project root.

    Raises:
        ConfigError: If an explicit or environment root does not exist, or
            points at the ``.chipforge`` directory itself.
    """
    source = "--repo-root"
    raw = repo_root
    if raw is None:
        raw = os.environ.get(PROJECT_ROOT_ENV) or None
        source = PROJECT_ROOT_ENV

    if raw is not None:
        path = Path(raw).expanduser().resolve()
        if not path.is_dir():
            raise ConfigError(f"{source} points at a missing directory: {path}", context={"path": str(path)})
        if path.name == PROJECT_CONFIG_DIR:
            raise ConfigError(
                f"{source} points at the {PROJECT_CONFIG_DIR} directory; use the project root instead",
                context={"path": str(path)},
            )
        return path

    cwd = Path.cwd().resolve()
    return find_marked_ancestor(cwd) or cwd


__all__ = ["PROJECT_ROOT_ENV", "find_marked_ancestor", "resolve_project_root"]

"""Shared CLI utility functions."""
from __future__ import annotations

import argparse
from pathlib import Path

from chipforge.core.config import ConfigManager, resolve_project_root
from chipforge.core.logging import configure_stdlib_logging


def get_repo_root(args: argparse.Namespace) -> Path:
    """Get project root from ``--repo-root`` or auto-detect.

    Args:
        args: Parsed arguments with optional repo_root attribute

    Returns:
        Path: Project root path
    """
    return resolve_project_root(getattr(args, "repo_root", None) or None)


def get_config_manager(args: argparse.Namespace) -> ConfigManager:
    """ConfigManager for the project root selected by ``args``."""
    return ConfigManager(get_repo_root(args))


def apply_logging_config(args: argparse.Namespace, config: ConfigManager) -> None:
    """Use the configured log level unless --verbose already asked for DEBUG."""
    if not getattr(args, "verbose", False):
        configure_stdlib_logging(level=config.logging_level)


__all__ = ["get_repo_root", "get_config_manager", "apply_logging_config"]

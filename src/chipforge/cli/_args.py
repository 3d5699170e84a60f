"""Common CLI argument registration utilities.

This module provides reusable argument registration functions to reduce
duplication across CLI commands.
"""
from __future__ import annotations

import argparse


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    """Add --json flag for JSON output mode.

    Args:
        parser: ArgumentParser to add the flag to
    """
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_repo_root_flag(parser: argparse.ArgumentParser) -> None:
    """Add --repo-root flag for project root override.

    Args:
        parser: ArgumentParser to add the flag to
    """
    parser.add_argument(
        "--repo-root",
        type=str,
        help="Override project root path",
    )


def add_overwrite_flag(parser: argparse.ArgumentParser) -> None:
    """Add --overwrite flag."""
    parser.add_argument(
        "--overwrite",
        action="store_true",
        default=None,
        help="Replace existing output files",
    )


def add_verbose_flag(parser: argparse.ArgumentParser) -> None:
    """Add -v/--verbose flag (debug logging to stderr)."""
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) logging on stderr",
    )


__all__ = [
    "add_json_flag",
    "add_repo_root_flag",
    "add_overwrite_flag",
    "add_verbose_flag",
]

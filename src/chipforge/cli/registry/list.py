"""
chipforge registry list command.

SUMMARY: List registries and their ids
"""

from __future__ import annotations

import argparse

from chipforge.cli import (
    OutputFormatter,
    add_json_flag,
    add_repo_root_flag,
    apply_logging_config,
    get_config_manager,
)
from chipforge.core.exceptions import ChipforgeError

SUMMARY = "List registries and their ids"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_repo_root_flag(parser)
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    """List every registry in the store."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        config = get_config_manager(args)
        apply_logging_config(args, config)
        store = config.build_store()
    except ChipforgeError as e:
        formatter.error(e, error_code="registry_error")
        return 1

    registries = [store.registry(name) for name in store.names()]
    if formatter.json_mode:
        formatter.json_output(
            {
                "registries": [
                    {
                        "name": reg.name,
                        "managed_by": reg.managed_by,
                        "description": reg.description,
                        "ids": list(reg.ids()),
                    }
                    for reg in registries
                    if reg is not None
                ]
            }
        )
        return 0

    for reg in registries:
        if reg is None:
            continue
        formatter.text(f"{reg.name} ({reg.managed_by}): {', '.join(reg.ids())}")
    return 0

"""
chipforge registry show command.

SUMMARY: Show the entries of one registry
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

SUMMARY = "Show the entries of one registry"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument("name", help="Registry name (e.g. role, behaviors, frontend)")
    parser.add_argument("--tag", help="Only entries carrying this tag")
    parser.add_argument("--category", help="Only entries in this category")
    add_repo_root_flag(parser)
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    """Show registry entries, optionally filtered by tag and category."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        config = get_config_manager(args)
        apply_logging_config(args, config)
        store = config.build_store()
    except ChipforgeError as e:
        formatter.error(e, error_code="registry_error")
        return 1

    registry = store.registry(args.name)
    if registry is None:
        formatter.error(
            KeyError(args.name),
            f"Unknown registry '{args.name}'. Valid registries: {', '.join(store.names())}",
            error_code="unknown_registry",
        )
        return 1

    entries = list(registry.values())
    if args.tag:
        entries = store.chips_by_tag(args.tag, registry.name)
    if args.category:
        in_category = {e.id for e in store.chips_by_category(args.category, registry.name)}
        entries = [e for e in entries if e.id in in_category]

    if formatter.json_mode:
        formatter.json_output(
            {
                "name": registry.name,
                "managed_by": registry.managed_by,
                "description": registry.description,
                "entries": [e.to_dict() for e in entries],
            }
        )
        return 0

    formatter.text(f"{registry.name} ({registry.managed_by})")
    if registry.description:
        formatter.text(registry.description)
    for entry in entries:
        formatter.text(f"\n{entry.id}: {entry.name}")
        formatter.text_kv("description", entry.description)
        formatter.text_kv("path", entry.content_ref)
        if entry.tags:
            formatter.text_kv("tags", ", ".join(sorted(entry.tags)))
        if entry.category:
            formatter.text_kv("category", entry.category)
    return 0

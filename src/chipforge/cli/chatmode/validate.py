"""
chipforge chatmode validate command.

SUMMARY: Validate agent configurations without generating output
"""

from __future__ import annotations

import argparse
from typing import Any, Dict, List

from chipforge.cli import (
    OutputFormatter,
    add_json_flag,
    add_repo_root_flag,
    apply_logging_config,
    get_config_manager,
    print_success,
)
from chipforge.core.agents import iter_agent_config_files, load_agent_config_file
from chipforge.core.exceptions import ChipforgeError

SUMMARY = "Validate agent configurations without generating output"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "configs",
        nargs="+",
        metavar="CONFIG",
        help="Agent configuration files or directories of them",
    )
    add_repo_root_flag(parser)
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    """Validate agent configurations."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        config = get_config_manager(args)
        apply_logging_config(args, config)
        validator = config.build_validator()
        sources = iter_agent_config_files(args.configs)
    except ChipforgeError as e:
        formatter.error(e, error_code="validate_error")
        return 1

    reports: List[Dict[str, Any]] = []
    failures = 0
    for source in sources:
        report: Dict[str, Any] = {"source": str(source)}
        try:
            outcome = validator.validate(load_agent_config_file(source))
        except ChipforgeError as e:
            failures += 1
            report.update(valid=False, error=e.to_json_error())
            formatter.source_error(source, e)
            reports.append(report)
            continue

        report["valid"] = outcome.ok
        if outcome.ok:
            report["name"] = outcome.config.name  # type: ignore[union-attr]
            if not formatter.json_mode:
                print_success(f"{source}: valid ({outcome.config.name})")  # type: ignore[union-attr]
        else:
            failures += 1
            report["issues"] = [issue.to_dict() for issue in outcome.issues]
            formatter.source_issues(source, outcome.issues)
        reports.append(report)

    if formatter.json_mode:
        formatter.json_output({"status": "error" if failures else "success", "results": reports})

    return 1 if failures or not sources else 0

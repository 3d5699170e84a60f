"""
chipforge chatmode generate command.

SUMMARY: Generate chatmode files from agent configurations

Validates each configuration against the registries, renders it and writes
``<name>.chatmode.md`` to the output directory. A failing configuration is
reported and the remaining ones are still generated.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from chipforge.cli import (
    OutputFormatter,
    add_json_flag,
    add_overwrite_flag,
    add_repo_root_flag,
    apply_logging_config,
    get_config_manager,
    print_success,
)
from chipforge.core.agents import iter_agent_config_files
from chipforge.core.exceptions import AgentConfigValidationError, ChipforgeError
from chipforge.core.prompts import PromptResolver
from chipforge.core.rendering import ChatmodeGenerator, GenerationResult

SUMMARY = "Generate chatmode files from agent configurations"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "configs",
        nargs="+",
        metavar="CONFIG",
        help="Agent configuration files (.yaml, .yml, .json, .py) or directories of them",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        help="Directory to write chatmodes to (default: output.chatmodes_dir)",
    )
    add_overwrite_flag(parser)
    add_repo_root_flag(parser)
    add_json_flag(parser)


def _report_failure(formatter: OutputFormatter, result: GenerationResult) -> None:
    error = result.error
    if isinstance(error, AgentConfigValidationError):
        formatter.source_issues(result.source, error.issues)
    else:
        formatter.source_error(result.source, error)


def main(args: argparse.Namespace) -> int:
    """Generate chatmodes."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        config = get_config_manager(args)
        apply_logging_config(args, config)
        store = config.build_store()
        generator = ChatmodeGenerator(
            store,
            PromptResolver.default(),
            config.repo_root,
            validator=config.build_validator(store),
            output_dir=Path(args.output_dir) if args.output_dir else config.output_dir,
            max_workers=config.max_workers,
        )
        overwrite = config.overwrite if args.overwrite is None else args.overwrite
        sources = iter_agent_config_files(args.configs)
    except ChipforgeError as e:
        formatter.error(e, error_code="generate_error")
        return 1

    if not sources:
        formatter.error(ValueError("No agent configuration files found"), error_code="generate_error")
        return 1

    results = generator.generate_many(sources, overwrite=overwrite)
    failed = [r for r in results if not r.success]

    if formatter.json_mode:
        formatter.json_output(
            {
                "status": "error" if failed else "success",
                "generated": len(results) - len(failed),
                "failed": len(failed),
                "results": [r.to_dict() for r in results],
            }
        )
    else:
        for result in results:
            if result.success:
                print_success(f"Generated {result.output_path}")
                for warning in result.warnings:
                    formatter.source_warning(result.source, warning)
            else:
                _report_failure(formatter, result)
        formatter.text(f"\n{len(results) - len(failed)} generated, {len(failed)} failed")

    return 1 if failed else 0

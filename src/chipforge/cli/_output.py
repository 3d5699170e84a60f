"""CLI output helpers.

Command results go to stdout, as text or JSON. Errors, warnings and
validation issues go to stderr so ``--json`` output stays parseable.
"""
from __future__ import annotations

import json
import sys
from typing import Any, Dict, Optional, Sequence

from chipforge.core.exceptions import ChipforgeError, ValidationIssue, format_issues

ISSUE_INDENT = "    - "


class OutputFormatter:
    """Text or JSON output for one command invocation."""

    def __init__(self, json_mode: bool = False, indent: int = 2):
        self.json_mode = json_mode
        self.indent = indent

    def error(
        self,
        error: Exception,
        message: Optional[str] = None,
        *,
        error_code: str = "error",
    ) -> None:
        """Report a command-level failure on stderr.

        In JSON mode the payload carries ``error_code`` and, for chipforge
        errors, their context.
        """
        msg = message or str(error)
        if self.json_mode:
            output: Dict[str, Any] = {"error": error_code, "message": msg}
            if isinstance(error, ChipforgeError) and error.context:
                output["context"] = error.context
            print(json.dumps(output, indent=self.indent, default=str), file=sys.stderr)
        else:
            print(f"Error: {msg}", file=sys.stderr)

    def source_error(self, source: object, message: object) -> None:
        """Text-mode failure for one input file; silent in JSON mode."""
        if not self.json_mode:
            print(f"Error: {source}: {message}", file=sys.stderr)

    def source_issues(self, source: object, issues: Sequence[ValidationIssue]) -> None:
        """Text-mode listing of every validation issue for one input file."""
        if not self.json_mode:
            print(f"Error: {source}: invalid agent configuration", file=sys.stderr)
            print(format_issues(issues, indent=ISSUE_INDENT), file=sys.stderr)

    def source_warning(self, source: object, message: object) -> None:
        if not self.json_mode:
            print(f"Warning: {source}: {message}", file=sys.stderr)

    def json_output(self, data: Any) -> None:
        print(json.dumps(data, indent=self.indent, default=str))

    def text(self, message: str) -> None:
        print(message)

    def text_kv(self, key: str, value: Any, prefix: str = "  ") -> None:
        if not self.json_mode:
            print(f"{prefix}{key}: {value}")


def print_success(message: str) -> None:
    """Print success message with checkmark."""
    print(f"✓ {message}")


__all__ = ["OutputFormatter", "print_success"]

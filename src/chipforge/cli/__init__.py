"""
chipforge CLI package.

Provides the command-line interface with auto-discovery of commands
from subfolders (chatmode/, registry/).

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Shared CLI utilities
"""
from ._output import OutputFormatter, print_success
from ._args import (
    add_json_flag,
    add_overwrite_flag,
    add_repo_root_flag,
    add_verbose_flag,
)
from ._utils import apply_logging_config, get_config_manager, get_repo_root

__all__ = [
    # Output formatting
    "OutputFormatter",
    "print_success",
    # Argument helpers
    "add_json_flag",
    "add_overwrite_flag",
    "add_repo_root_flag",
    "add_verbose_flag",
    # Utilities
    "apply_logging_config",
    "get_config_manager",
    "get_repo_root",
]

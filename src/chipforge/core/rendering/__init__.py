"""Chatmode rendering."""
from .chatmode import (
    ChatmodeGenerator,
    GenerationResult,
    RenderResult,
    split_frontmatter,
    yaml_scalar,
)

__all__ = [
    "ChatmodeGenerator",
    "GenerationResult",
    "RenderResult",
    "split_frontmatter",
    "yaml_scalar",
]

"""Shared helpers (I/O, merging, template rendering)."""
from .io import atomic_write, ensure_directory, read_text, read_yaml, write_text
from .merge import deep_merge
from .templates import render_template_text

__all__ = [
    "atomic_write",
    "ensure_directory",
    "read_text",
    "read_yaml",
    "write_text",
    "deep_merge",
    "render_template_text",
]

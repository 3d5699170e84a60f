"""Jinja2 text template rendering.

Templates are kept readable as Markdown; control blocks sit on their own
lines, so the environment trims them.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict

from jinja2 import Environment, StrictUndefined, Template


@lru_cache(maxsize=1)
def _environment() -> Environment:
    # Without trimming, tag-only lines would become empty lines.
    return Environment(
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
        autoescape=False,
    )


@lru_cache(maxsize=32)
def compile_template(text: str) -> Template:
    """Compile ``text`` once; identical sources share the compiled template."""
    return _environment().from_string(text)


def render_template_text(text: str, context: Dict[str, Any]) -> str:
    """Render ``text`` with Jinja2 using ``context`` as template variables."""
    return compile_template(text).render(**context)


__all__ = ["compile_template", "render_template_text"]

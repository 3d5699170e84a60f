"""Tests for file I/O, merging and template helpers."""
from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from jinja2 import UndefinedError

from chipforge.core.utils import atomic_write, deep_merge, read_text, read_yaml, render_template_text, write_text


def test_write_text_creates_parents_and_replaces(tmp_path: Path) -> None:
    target = tmp_path / "a" / "b" / "file.md"

    write_text(target, "first")
    write_text(target, "second")

    assert read_text(target) == "second"
    assert [p.name for p in target.parent.iterdir()] == ["file.md"]


def test_atomic_write_leaves_original_on_failure(tmp_path: Path) -> None:
    target = tmp_path / "file.md"
    target.write_text("original", encoding="utf-8")

    def _boom(f) -> None:
        f.write("partial")
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        atomic_write(target, _boom)

    assert target.read_text(encoding="utf-8") == "original"
    assert [p.name for p in tmp_path.iterdir()] == ["file.md"]


def test_read_text_missing(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_text(tmp_path / "missing.md")


def test_read_yaml_defaults(tmp_path: Path) -> None:
    broken = tmp_path / "broken.yaml"
    broken.write_text("a: [", encoding="utf-8")

    assert read_yaml(tmp_path / "missing.yaml", default={}) == {}
    assert read_yaml(broken, default="fallback") == "fallback"
    with pytest.raises(yaml.YAMLError):
        read_yaml(broken, raise_on_error=True)


def test_deep_merge() -> None:
    base = {"output": {"chatmodes_dir": "a", "overwrite": False}, "tags": ["x"]}

    merged = deep_merge(base, {"output": {"overwrite": True}, "tags": ["+", "y"]})

    assert merged == {"output": {"chatmodes_dir": "a", "overwrite": True}, "tags": ["x", "y"]}
    assert base["output"]["overwrite"] is False
    assert deep_merge(base, {"tags": ["z"]})["tags"] == ["z"]


def test_render_template_text_is_strict() -> None:
    assert render_template_text("{% if x %}\nyes\n{% endif %}\n", {"x": True}) == "yes\n"
    with pytest.raises(UndefinedError):
        render_template_text("{{ missing }}", {})

"""Tests for registry definitions, files and discovery."""
from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from chipforge.core.exceptions import RegistryDefinitionError
from chipforge.core.registries import (
    FRAMEWORK,
    PROJECT,
    build_registry,
    discover_project_registries,
    load_builtin_registries,
    load_registry_file,
)


def _entry(entry_id: str, **extra: object) -> dict:
    data = {"id": entry_id, "name": entry_id.title(), "description": f"{entry_id} chip", "path": f"{entry_id}.md"}
    data.update(extra)
    return data


class TestBuiltinRegistries:
    def test_framework_registries_are_bundled(self) -> None:
        registries = load_builtin_registries()

        assert set(registries) == {"role", "permissions", "behaviors"}
        assert all(reg.managed_by == FRAMEWORK for reg in registries.values())

    def test_role_ids_keep_definition_order(self) -> None:
        role = load_builtin_registries()["role"]

        assert role.ids() == ("analyst", "architect", "implementer", "reviewer", "guide", "orchestrator")

    def test_permission_and_behavior_ids(self) -> None:
        registries = load_builtin_registries()

        assert registries["permissions"].ids() == ("read-only", "documentation", "controlled", "full")
        assert "detailed" in registries["behaviors"]
        assert "concise" in registries["behaviors"]


class TestBuildRegistry:
    def test_list_definitions(self) -> None:
        registry = build_registry("frontend", [_entry("architecture"), _entry("constitution")])

        assert registry.ids() == ("architecture", "constitution")
        assert registry["architecture"].content_ref == "architecture.md"
        assert registry.managed_by == PROJECT

    def test_mapping_definitions_take_id_from_key(self) -> None:
        registry = build_registry(
            "backend",
            {"api": {"name": "API", "description": "API rules", "path": "api.md"}},
        )

        assert registry["api"].id == "api"

    def test_mapping_key_must_match_entry_id(self) -> None:
        with pytest.raises(RegistryDefinitionError):
            build_registry("backend", {"api": _entry("other")})

    def test_empty_registry_is_rejected(self) -> None:
        with pytest.raises(RegistryDefinitionError):
            build_registry("empty", [])

    def test_duplicate_ids_are_rejected(self) -> None:
        with pytest.raises(RegistryDefinitionError):
            build_registry("dupes", [_entry("a"), _entry("a")])

    def test_missing_path_fails_schema(self) -> None:
        bad = _entry("a")
        del bad["path"]

        with pytest.raises(RegistryDefinitionError, match="path"):
            build_registry("frontend", [bad])

    def test_tags_and_category_filters(self) -> None:
        registry = build_registry(
            "frontend",
            [
                _entry("a", tags=["docs"], category="design"),
                _entry("b", tags=["docs", "testing"], category="quality"),
                _entry("c"),
            ],
        )

        assert [e.id for e in registry.by_tag("docs")] == ["a", "b"]
        assert [e.id for e in registry.by_category("quality")] == ["b"]
        assert registry["b"].to_dict()["tags"] == ["docs", "testing"]


class TestRegistryFiles:
    def test_name_comes_from_file_then_stem(self, tmp_path: Path) -> None:
        named = tmp_path / "whatever.yaml"
        named.write_text(yaml.safe_dump({"name": "frontend", "entries": [_entry("a")]}), encoding="utf-8")
        unnamed = tmp_path / "backend.registry.yaml"
        unnamed.write_text(yaml.safe_dump({"entries": [_entry("a")]}), encoding="utf-8")

        assert load_registry_file(named).name == "frontend"
        assert load_registry_file(unnamed).name == "backend"
        assert load_registry_file(named, name="override").name == "override"

    def test_malformed_yaml_is_a_definition_error(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("entries: [unclosed", encoding="utf-8")

        with pytest.raises(RegistryDefinitionError):
            load_registry_file(path)

    def test_discovery_of_missing_directory_is_empty(self, tmp_path: Path) -> None:
        assert discover_project_registries(tmp_path / "nope") == {}

    def test_discovery_loads_yaml_and_yml(self, tmp_path: Path) -> None:
        (tmp_path / "frontend.yaml").write_text(yaml.safe_dump({"entries": [_entry("a")]}), encoding="utf-8")
        (tmp_path / "backend.yml").write_text(yaml.safe_dump({"entries": [_entry("b")]}), encoding="utf-8")

        registries = discover_project_registries(tmp_path)

        assert sorted(registries) == ["backend", "frontend"]
        assert all(reg.managed_by == PROJECT for reg in registries.values())

    def test_discovery_rejects_duplicate_names(self, tmp_path: Path) -> None:
        for filename in ("one.yaml", "two.yaml"):
            (tmp_path / filename).write_text(
                yaml.safe_dump({"name": "frontend", "entries": [_entry("a")]}), encoding="utf-8"
            )

        with pytest.raises(RegistryDefinitionError, match="more than one file"):
            discover_project_registries(tmp_path)

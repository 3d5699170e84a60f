"""Tests for layered configuration and project root resolution."""
from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from chipforge.core.config import ConfigManager, resolve_project_root
from chipforge.core.exceptions import ConfigError
from chipforge.core.validation import SelectionPolicy


def _write_project_config(root: Path, data: dict) -> None:
    path = root / ".chipforge" / "config.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data), encoding="utf-8")


class TestLayers:
    def test_bundled_defaults(self, tmp_path: Path) -> None:
        manager = ConfigManager(tmp_path)

        assert manager.output_dir == tmp_path / ".github" / "chatmodes"
        assert manager.registries_dir == tmp_path / ".chipforge" / "registries"
        assert manager.max_workers == 4
        assert manager.overwrite is False
        assert manager.logging_level == "WARNING"
        assert manager.context_policies() == {}

    def test_project_file_overrides_defaults(self, tmp_path: Path) -> None:
        _write_project_config(tmp_path, {"output": {"chatmodes_dir": "docs/modes"}, "chips": {"max_workers": 2}})

        manager = ConfigManager(tmp_path)

        assert manager.output_dir == tmp_path / "docs" / "modes"
        assert manager.max_workers == 2
        assert manager.get("output.overwrite") is False

    def test_environment_overrides_everything(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_project_config(tmp_path, {"chips": {"max_workers": 2}})
        monkeypatch.setenv("CHIPFORGE_chips__max_workers", "8")
        monkeypatch.setenv("CHIPFORGE_OUTPUT__OVERWRITE", "true")
        monkeypatch.setenv("CHIPFORGE_logging__level", "debug")

        manager = ConfigManager(tmp_path)

        assert manager.max_workers == 8
        assert manager.overwrite is True
        assert manager.logging_level == "DEBUG"

    def test_json_env_values(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHIPFORGE_policies__context", '{"frontend": {"required": true}}')

        assert ConfigManager(tmp_path).context_policies() == {"frontend": SelectionPolicy(required=True)}

    def test_project_config_dir_follows_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHIPFORGE_paths__project_config_dir", "config/chipforge")

        manager = ConfigManager(tmp_path)

        assert manager.registries_dir == tmp_path / "config" / "chipforge" / "registries"

    def test_project_config_dir_is_read_once(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        manager = ConfigManager(tmp_path)
        first = manager.project_config_dir
        calls = []
        monkeypatch.setattr(manager, "load_yaml", lambda path: calls.append(path) or {})

        assert manager.project_config_dir == first == tmp_path / ".chipforge"
        assert calls == []

    def test_get_missing_key(self, tmp_path: Path) -> None:
        assert ConfigManager(tmp_path).get("no.such.key", "fallback") == "fallback"


class TestFailures:
    def test_malformed_yaml_fails_closed(self, tmp_path: Path) -> None:
        path = tmp_path / ".chipforge" / "config.yaml"
        path.parent.mkdir()
        path.write_text("output: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigError):
            ConfigManager(tmp_path).load_config()

    def test_non_mapping_config(self, tmp_path: Path) -> None:
        path = tmp_path / ".chipforge" / "config.yaml"
        path.parent.mkdir()
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            ConfigManager(tmp_path).load_config()

    def test_invalid_policy(self, tmp_path: Path) -> None:
        _write_project_config(tmp_path, {"policies": {"context": {"frontend": {"min_count": 3, "max_count": 1}}}})

        with pytest.raises(ConfigError, match="frontend"):
            ConfigManager(tmp_path).context_policies()

    def test_invalid_max_workers(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHIPFORGE_chips__max_workers", "0")

        with pytest.raises(ConfigError):
            _ = ConfigManager(tmp_path).max_workers


class TestStore:
    def test_build_store_discovers_project_registries(self, project_root: Path) -> None:
        store = ConfigManager(project_root).build_store()

        assert store.project_names() == ("frontend",)

    def test_build_validator_applies_policies(self, project_root: Path, agent_config) -> None:
        _write_project_config(project_root, {"policies": {"context": {"frontend": {"required": True}}}})

        validator = ConfigManager(project_root).build_validator()

        assert not validator.validate(agent_config()).ok
        assert validator.validate(agent_config(context={"frontend": ["testing"]})).ok

    def test_require_context_from_config(self, project_root: Path, agent_config) -> None:
        _write_project_config(project_root, {"policies": {"require_context": True}})

        validator = ConfigManager(project_root).build_validator()

        [issue] = validator.validate(agent_config()).issues
        assert (issue.code, issue.path) == ("missing_selection", "context")
        assert validator.validate(agent_config(context={"frontend": "testing"})).ok

    def test_require_context_env_must_be_boolean(self, project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHIPFORGE_policies__require_context", "sometimes")

        with pytest.raises(ConfigError, match="require_context"):
            ConfigManager(project_root).build_validator()


class TestProjectRoot:
    def test_explicit_root_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHIPFORGE_PROJECT_ROOT", "/definitely/not/here")

        assert resolve_project_root(tmp_path) == tmp_path.resolve()

    def test_env_root(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHIPFORGE_PROJECT_ROOT", str(tmp_path))

        assert resolve_project_root() == tmp_path.resolve()

    def test_missing_env_root(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHIPFORGE_PROJECT_ROOT", str(tmp_path / "missing"))

        with pytest.raises(ConfigError):
            resolve_project_root()

    def test_config_dir_is_not_a_root(self, tmp_path: Path) -> None:
        (tmp_path / ".chipforge").mkdir()

        with pytest.raises(ConfigError):
            resolve_project_root(tmp_path / ".chipforge")

    def test_walks_up_to_marker(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        root = tmp_path / "project"
        nested = root / "a" / "b"
        nested.mkdir(parents=True)
        (root / ".chipforge").mkdir()
        monkeypatch.chdir(nested)

        assert resolve_project_root() == root.resolve()

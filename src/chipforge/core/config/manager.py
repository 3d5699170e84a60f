"""
chipforge configuration management (YAML layers + environment overrides).
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

import yaml

from chipforge.core.exceptions import ConfigError
from chipforge.core.registries import (
    RegistryStore,
    build_registry_store,
    discover_project_registries,
)
from chipforge.core.utils.io import read_yaml
from chipforge.core.utils.merge import deep_merge
from chipforge.core.validation.agent import AgentConfigValidator
from chipforge.core.validation.selection import SelectionPolicy
from chipforge.data import get_data_path

from .paths import resolve_project_root

logger = logging.getLogger(__name__)

ENV_PREFIX = "CHIPFORGE_"
CONFIG_FILENAME = "config.yaml"
# Environment variables with the prefix that are not configuration keys.
_RESERVED_ENV = {"CHIPFORGE_PROJECT_ROOT"}


class ConfigManager:
    """Load and merge chipforge configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: CHIPFORGE_* (``__`` separates key segments)
    2. Project config: <project>/.chipforge/config.yaml
    3. Bundled defaults: chipforge.data/config/defaults.yaml

    Example:
        CHIPFORGE_output__chatmodes_dir=docs/modes  ->  output.chatmodes_dir
        CHIPFORGE_chips__max_workers=8              ->  chips.max_workers (int)
    """

    def __init__(self, repo_root: Optional[Path] = None) -> None:
        self.repo_root = Path(repo_root) if repo_root is not None else resolve_project_root()
        self.defaults_path = get_data_path("config", "defaults.yaml")
        self._config: Optional[Dict[str, Any]] = None
        self._project_config_dir: Optional[Path] = None

    @property
    def project_root(self) -> Path:
        return self.repo_root

    # ---------------------------------------------------------------- loading

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        # Fail closed: configuration must never silently ignore invalid YAML.
        try:
            data = read_yaml(path, default={}, raise_on_error=True)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Cannot load configuration {path}: {exc}", context={"path": str(path)}) from exc
        if not isinstance(data, dict):
            raise ConfigError(
                f"Configuration {path} must contain a mapping, got {type(data).__name__}",
                context={"path": str(path)},
            )
        return data

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value.strip()

    def _parse_env_key(self, raw: str) -> List[str]:
        segments = raw.split("__")
        if any(seg == "" for seg in segments):
            raise ConfigError(f"Malformed {ENV_PREFIX}* key: empty segment in '{raw}'", context={"key": raw})
        return [seg.lower() for seg in segments]

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ):
            if not key.startswith(ENV_PREFIX) or key in _RESERVED_ENV:
                continue
            raw = key[len(ENV_PREFIX):]
            if not raw:
                continue
            yield self._parse_env_key(raw), self._coerce_type(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        current = root
        for part in path[:-1]:
            lower_map = {k.lower(): k for k in current if isinstance(k, str)}
            key = lower_map.get(part, part)
            nxt = current.get(key)
            if not isinstance(nxt, dict):
                nxt = {}
                current[key] = nxt
            current = nxt
        lower_map = {k.lower(): k for k in current if isinstance(k, str)}
        current[lower_map.get(path[-1], path[-1])] = value

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> None:
        for path, typed_value in self._iter_env_overrides():
            logger.debug("Config override from environment: %s", ".".join(path))
            self._set_nested(cfg, path, typed_value)

    @property
    def project_config_dir(self) -> Path:
        # Located from defaults and environment overrides only (cached per manager).
        if self._project_config_dir is None:
            bootstrap = self.load_yaml(self.defaults_path)
            self.apply_env_overrides(bootstrap)
            self._project_config_dir = self._resolve(str(bootstrap["paths"]["project_config_dir"]))
        return self._project_config_dir

    def load_config(self) -> Dict[str, Any]:
        """Merge every layer (cached per manager)."""
        if self._config is None:
            cfg = self.load_yaml(self.defaults_path)
            project_file = self.project_config_dir / CONFIG_FILENAME
            if project_file.exists():
                logger.debug("Loading project config %s", project_file)
                cfg = deep_merge(cfg, self.load_yaml(project_file))
            self.apply_env_overrides(cfg)
            self._config = cfg
        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dot-notation key.

        Example:
            >>> manager.get('output.chatmodes_dir')
            '.github/chatmodes'
        """
        current: Any = self.load_config()
        for part in key.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current

    # ------------------------------------------------------------- accessors

    def _resolve(self, value: Union[str, Path]) -> Path:
        path = Path(value).expanduser()
        return path if path.is_absolute() else self.repo_root / path

    @property
    def output_dir(self) -> Path:
        return self._resolve(self.get("output.chatmodes_dir", ".github/chatmodes"))

    @property
    def overwrite(self) -> bool:
        return bool(self.get("output.overwrite", False))

    @property
    def registries_dir(self) -> Path:
        value = Path(str(self.get("paths.registries_dir", "registries"))).expanduser()
        return value if value.is_absolute() else self.project_config_dir / value

    @property
    def max_workers(self) -> int:
        value = self.get("chips.max_workers", 4)
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ConfigError(f"chips.max_workers must be a positive integer, got {value!r}")
        return value

    @property
    def logging_level(self) -> str:
        return str(self.get("logging.level", "WARNING")).upper()

    @property
    def require_context(self) -> bool:
        value = self.get("policies.require_context", False)
        if not isinstance(value, bool):
            raise ConfigError(f"policies.require_context must be true or false, got {value!r}")
        return value

    def context_policies(self) -> Dict[str, SelectionPolicy]:
        """Per-registry selection policies from ``policies.context``."""
        raw = self.get("policies.context") or {}
        if not isinstance(raw, Mapping):
            raise ConfigError("policies.context must be a mapping of registry name to policy")
        policies: Dict[str, SelectionPolicy] = {}
        for registry_name, data in raw.items():
            if not isinstance(data, Mapping):
                raise ConfigError(f"Policy for registry '{registry_name}' must be a mapping")
            try:
                policies[str(registry_name)] = SelectionPolicy.from_dict(data)
            except ValueError as exc:
                raise ConfigError(
                    f"Invalid policy for registry '{registry_name}': {exc}",
                    context={"registry": registry_name},
                ) from exc
        return policies

    def build_store(self) -> RegistryStore:
        """Built-in registries plus the project registries directory."""
        return build_registry_store(discover_project_registries(self.registries_dir))

    def build_validator(self, store: Optional[RegistryStore] = None) -> AgentConfigValidator:
        """Validator over ``store`` (or the project store) with the configured context rules."""
        return AgentConfigValidator(
            store if store is not None else self.build_store(),
            context_policies=self.context_policies(),
            require_context=self.require_context,
        )


__all__ = ["ConfigManager", "ENV_PREFIX"]

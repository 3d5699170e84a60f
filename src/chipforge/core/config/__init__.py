"""Layered configuration and project root resolution."""
from .manager import ConfigManager
from .paths import PROJECT_ROOT_ENV, resolve_project_root

__all__ = ["ConfigManager", "PROJECT_ROOT_ENV", "resolve_project_root"]

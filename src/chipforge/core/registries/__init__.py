"""Registries of named options (roles, permissions, behaviors, context chips)."""
from .loader import (
    build_registry,
    discover_project_registries,
    load_builtin_registries,
    load_registry_file,
)
from .models import FRAMEWORK, PROJECT, Registry, RegistryEntry
from .store import RegistryStore, build_registry_store, default_registry_store

__all__ = [
    "FRAMEWORK",
    "PROJECT",
    "Registry",
    "RegistryEntry",
    "RegistryStore",
    "build_registry",
    "build_registry_store",
    "default_registry_store",
    "discover_project_registries",
    "load_builtin_registries",
    "load_registry_file",
]

"""Core validation, registry and rendering modules for chipforge."""

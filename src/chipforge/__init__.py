"""
chipforge - registry-driven chatmode generator

Validates agent descriptors against registries of roles, permissions,
behaviors and project context chips, then renders them into chatmode
Markdown files.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]

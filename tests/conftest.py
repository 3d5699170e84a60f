import logging
import os
import sys
from pathlib import Path
from typing import Callable, Dict, Optional

import pytest
import yaml

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'chipforge' and shared fixtures data importable from tests
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from chipforge.core.logging import reset_stdlib_logging_for_tests  # noqa: E402
from chipforge.core.registries import (  # noqa: E402
    RegistryStore,
    build_registry_store,
    discover_project_registries,
)

FRONTEND_CHIPS: Dict[str, str] = {
    "architecture": "# Frontend Architecture\n\nComponents live under src/components.\n",
    "constitution": "# Frontend Constitution\n\nAccessibility is not optional.\n",
    "testing": "# Frontend Testing\n\nEvery component has a story and a test.\n",
}


def write_yaml(path: Path, data: object) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch):
    """Drop CHIPFORGE_* overrides and chipforge log handlers around each test."""
    root_level = logging.getLogger().level
    for key in list(os.environ):
        if key.startswith("CHIPFORGE_"):
            monkeypatch.delenv(key, raising=False)
    yield
    reset_stdlib_logging_for_tests()
    logging.getLogger().setLevel(root_level)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """A project with a ``frontend`` context registry and its chip files."""
    root = tmp_path / "project"
    (root / ".git").mkdir(parents=True)

    entries = []
    for chip_id, content in FRONTEND_CHIPS.items():
        rel = f"contexts/frontend/{chip_id}.md"
        (root / rel).parent.mkdir(parents=True, exist_ok=True)
        (root / rel).write_text(content, encoding="utf-8")
        entries.append(
            {
                "id": chip_id,
                "name": chip_id.title(),
                "description": f"Frontend {chip_id}",
                "path": rel,
                "tags": ["frontend", "testing" if chip_id == "testing" else "docs"],
                "category": "quality" if chip_id == "testing" else "design",
            }
        )

    write_yaml(
        root / ".chipforge" / "registries" / "frontend.yaml",
        {"name": "frontend", "description": "Frontend project context", "entries": entries},
    )
    return root


@pytest.fixture
def store(project_root: Path) -> RegistryStore:
    return build_registry_store(discover_project_registries(project_root / ".chipforge" / "registries"))


@pytest.fixture
def agent_config() -> Callable[..., dict]:
    """Factory for a valid Code Reviewer configuration, with overrides."""

    def _make(character: Optional[dict] = None, **overrides: object) -> dict:
        data: dict = {
            "name": "Code Reviewer",
            "version": "1.0.0",
            "description": "Reviews code for quality, best practices, and potential issues",
            "character": character
            or {"role": "reviewer", "permissions": "read-only", "behaviors": ["detailed"]},
        }
        data.update(overrides)
        return data

    return _make

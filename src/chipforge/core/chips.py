"""Chip content loading.

Resolves chip references to files under the project root and reads them in
parallel. A chip that is missing or cannot be read (not a file, not UTF-8,
no permission) is not fatal: it is logged, recorded and skipped, and the
chatmode renders without it.
"""
from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from chipforge.core.exceptions import MissingContentFileError
from chipforge.core.registries.store import RegistryStore
from chipforge.core.utils.io import read_text
from chipforge.core.validation.references import ByRegistryId, ChipReference

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


@dataclass(frozen=True)
class LoadedChip:
    """Content of one chip, as read from disk."""

    reference: ChipReference
    path: Path
    content: str


@dataclass
class ChipLoadResult:
    """Chips that loaded (in supplied order) and the ones that could not be read."""

    chips: List[LoadedChip] = field(default_factory=list)
    missing: List[MissingContentFileError] = field(default_factory=list)

    @property
    def contents(self) -> List[str]:
        return [chip.content for chip in self.chips]


class ChipContentLoader:
    """Read chip contents for a configuration.

    Args:
        store: Registry store used to resolve registry references
        project_root: Directory content paths are relative to
        max_workers: Thread pool size for concurrent reads
    """

    def __init__(
        self,
        store: RegistryStore,
        project_root: Path,
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self.store = store
        self.project_root = Path(project_root)
        self.max_workers = max(1, int(max_workers))

    def resolve(self, reference: ChipReference) -> Optional[Path]:
        """Absolute path for ``reference``; None if the registry entry is unknown."""
        if isinstance(reference, ByRegistryId):
            content_ref = self.store.resolve_content_path(reference.registry, reference.id)
            if content_ref is None:
                return None
        else:
            content_ref = reference.path
        path = Path(content_ref)
        return path if path.is_absolute() else self.project_root / path

    def _read(self, reference: ChipReference) -> Tuple[Optional[LoadedChip], Optional[MissingContentFileError]]:
        path = self.resolve(reference)
        if path is None:
            return None, MissingContentFileError(
                f"Chip '{reference}' is not defined in its registry",
                context={"chip": str(reference)},
            )
        try:
            return LoadedChip(reference=reference, path=path, content=read_text(path)), None
        except FileNotFoundError:
            return None, MissingContentFileError(
                f"Chip content file not found for '{reference}': {path}",
                context={"chip": str(reference), "path": str(path)},
            )
        except (OSError, UnicodeDecodeError) as exc:
            return None, MissingContentFileError(
                f"Cannot read chip content for '{reference}': {path} ({exc})",
                context={"chip": str(reference), "path": str(path), "reason": type(exc).__name__},
            )

    def load(self, references: Sequence[ChipReference]) -> ChipLoadResult:
        """Load every reference; order of the result follows ``references``."""
        result = ChipLoadResult()
        if not references:
            return result

        workers = min(self.max_workers, len(references))
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            outcomes = list(executor.map(self._read, references))

        for chip, missing in outcomes:
            if chip is not None:
                result.chips.append(chip)
            elif missing is not None:
                logger.warning("%s; skipping chip", missing)
                result.missing.append(missing)
        return result


__all__ = ["ChipContentLoader", "ChipLoadResult", "LoadedChip", "DEFAULT_MAX_WORKERS"]

"""Chatmode document rendering and writing.

A chatmode is a Markdown file with YAML frontmatter (description, tools,
optional model and handoffs) followed by the agent heading, the injected
role/behavior/permission prompts and the chip contents, in that order.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import yaml

from chipforge.core.agents import load_agent_config_file
from chipforge.core.chips import DEFAULT_MAX_WORKERS, ChipContentLoader
from chipforge.core.exceptions import ChipforgeError, OutputConflictError
from chipforge.core.prompts import PromptResolver
from chipforge.core.registries.store import RegistryStore, default_registry_store
from chipforge.core.utils.io import write_text
from chipforge.core.utils.templates import render_template_text
from chipforge.core.validation.agent import AgentConfigValidator, AgentConfiguration
from chipforge.data import read_text as read_data_text

logger = logging.getLogger(__name__)

TEMPLATE_NAME = "chatmode.md.j2"
DEFAULT_OUTPUT_DIR = Path(".github") / "chatmodes"

FRONTMATTER_PATTERN = re.compile(r"^---\s*\n(.*?)\n---\s*\n?", re.DOTALL)

Source = Union[str, Path, Mapping[str, Any]]


def yaml_scalar(value: Any) -> str:
    """Render ``value`` as a single-line YAML scalar, quoted only when needed."""
    dumped = yaml.safe_dump(
        value,
        default_flow_style=True,
        width=float("inf"),
        allow_unicode=True,
    )
    if dumped.endswith("\n...\n"):
        dumped = dumped[: -len("\n...\n")]
    return dumped.strip()


def split_frontmatter(document: str) -> Tuple[Dict[str, Any], str]:
    """Split a rendered chatmode into ``(frontmatter_dict, body)``."""
    match = FRONTMATTER_PATTERN.match(document)
    if not match:
        return {}, document
    return yaml.safe_load(match.group(1)) or {}, document[match.end():]


@dataclass(frozen=True)
class RenderResult:
    """Rendered document plus non-fatal problems met while rendering."""

    content: str
    warnings: Tuple[str, ...] = ()


@dataclass
class GenerationResult:
    """Outcome of generating one chatmode file."""

    source: str
    success: bool
    output_path: Optional[Path] = None
    error: Optional[Exception] = None
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "source": self.source,
            "success": self.success,
            "output_path": str(self.output_path) if self.output_path else None,
            "warnings": list(self.warnings),
        }
        if self.error is not None:
            if isinstance(self.error, ChipforgeError):
                data["error"] = self.error.to_json_error()
            else:
                data["error"] = {"message": str(self.error), "code": type(self.error).__name__}
        return data


class ChatmodeGenerator:
    """Render validated agent configurations into chatmode files.

    Args:
        store: Registry store configurations are validated against
        prompts: Prompt tables (bundled defaults when omitted)
        project_root: Root that chip paths and the default output dir are relative to
        validator: Validator to use (built from ``store`` when omitted)
        output_dir: Default output directory for :meth:`generate`
        max_workers: Thread pool size for chip loading
    """

    def __init__(
        self,
        store: Optional[RegistryStore] = None,
        prompts: Optional[PromptResolver] = None,
        project_root: Optional[Path] = None,
        *,
        validator: Optional[AgentConfigValidator] = None,
        output_dir: Optional[Path] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self.store = store if store is not None else default_registry_store()
        self.prompts = prompts if prompts is not None else PromptResolver.default()
        self.project_root = Path(project_root) if project_root is not None else Path.cwd()
        self.validator = validator if validator is not None else AgentConfigValidator(self.store)
        self.output_dir = Path(output_dir) if output_dir is not None else self.project_root / DEFAULT_OUTPUT_DIR
        self.chip_loader = ChipContentLoader(self.store, self.project_root, max_workers=max_workers)
        self._template = read_data_text("templates", TEMPLATE_NAME)

    def _template_context(self, config: AgentConfiguration, chips: List[str]) -> Dict[str, Any]:
        tools = self.prompts.tools_for_permission(config.permission_level)
        handoffs = [
            {
                "label": yaml_scalar(handoff.label),
                "agent": yaml_scalar(handoff.agent),
                "prompt": yaml_scalar(handoff.prompt) if handoff.prompt is not None else None,
                "send": yaml_scalar(handoff.send) if handoff.send is not None else None,
            }
            for handoff in config.handoffs
        ]
        return {
            "description_yaml": yaml_scalar(config.description),
            "tools_inline": ", ".join(f"'{tool}'" for tool in tools),
            "model": yaml_scalar(config.model) if config.model else None,
            "handoffs": handoffs,
            "name": config.name,
            "description": config.description,
            "role_prompt": self.prompts.role_prompt(config.role),
            "behavior_prompts": [self.prompts.behavior_prompt(b) for b in config.behaviors],
            "permission_prompt": self.prompts.permission_prompt(config.permission_level),
            "chips": chips,
            "version": config.version,
        }

    def render(self, config: AgentConfiguration) -> RenderResult:
        """Render ``config`` to a chatmode document.

        Chip content is inserted as read. Chips that are missing or cannot be
        read are skipped and reported as warnings.
        """
        loaded = self.chip_loader.load(config.chip_references())
        chips = loaded.contents
        content = render_template_text(self._template, self._template_context(config, chips))
        return RenderResult(content=content, warnings=tuple(str(m) for m in loaded.missing))

    def output_path(self, config: AgentConfiguration, output_dir: Optional[Path] = None) -> Path:
        return Path(output_dir if output_dir is not None else self.output_dir) / config.output_filename

    def write(
        self,
        config: AgentConfiguration,
        output_dir: Optional[Path] = None,
        overwrite: bool = False,
    ) -> Path:
        """Render and write ``config``; returns the written path.

        Raises:
            OutputConflictError: If the target exists and ``overwrite`` is False.
        """
        return self._write(config, output_dir, overwrite)[0]

    def _write(
        self, config: AgentConfiguration, output_dir: Optional[Path], overwrite: bool
    ) -> Tuple[Path, RenderResult]:
        target = self.output_path(config, output_dir)
        if target.exists() and not overwrite:
            raise OutputConflictError(
                f"Output file already exists: {target} (use --overwrite to replace it)",
                context={"path": str(target)},
            )
        rendered = self.render(config)
        write_text(target, rendered.content)
        logger.info("Generated chatmode %s", target)
        return target, rendered

    def generate(
        self,
        source: Source,
        output_dir: Optional[Path] = None,
        overwrite: bool = False,
    ) -> GenerationResult:
        """Load, validate, render and write one configuration.

        ``source`` is a configuration file path or a raw mapping. Failures
        are returned on the result rather than raised.
        """
        label = str(source) if isinstance(source, (str, Path)) else str(source.get("name", "<mapping>"))
        try:
            raw = load_agent_config_file(source) if isinstance(source, (str, Path)) else source
            config = self.validator.parse(raw)
            path, rendered = self._write(config, output_dir, overwrite)
        except (ChipforgeError, OSError) as exc:
            logger.error("Failed to generate chatmode from %s: %s", label, exc)
            return GenerationResult(source=label, success=False, error=exc)
        return GenerationResult(
            source=label,
            success=True,
            output_path=path,
            warnings=list(rendered.warnings),
        )

    def generate_many(
        self,
        sources: Iterable[Source],
        output_dir: Optional[Path] = None,
        overwrite: bool = False,
    ) -> List[GenerationResult]:
        """Generate every source; one failure does not stop the rest."""
        return [self.generate(source, output_dir, overwrite) for source in sources]


__all__ = [
    "ChatmodeGenerator",
    "GenerationResult",
    "RenderResult",
    "split_frontmatter",
    "yaml_scalar",
]

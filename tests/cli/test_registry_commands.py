"""Tests for `chipforge registry ...` and the dispatcher itself."""
from __future__ import annotations

import argparse
import json
from pathlib import Path

import pytest

from chipforge import __version__
from chipforge.cli._dispatcher import build_parser, discover_commands, discover_domains
from chipforge.cli._dispatcher import main as cli_main


def test_domains_are_discovered() -> None:
    assert set(discover_domains()) == {"chatmode", "registry"}
    assert set(discover_commands("chatmode")) == {"generate", "validate"}
    assert set(discover_commands("registry")) == {"list", "show"}


def test_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main(["--version"]) == 0
    assert __version__ in capsys.readouterr().out


def test_usage_error_exits_one(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main(["chatmode", "generate"]) == 1
    assert "usage" in capsys.readouterr().err


def test_no_domain_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main([]) == 0
    assert "chatmode" in capsys.readouterr().out


def test_registry_list(project_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main(["registry", "list", "--repo-root", str(project_root)]) == 0
    out = capsys.readouterr().out

    assert "role (framework): analyst, architect, implementer, reviewer, guide, orchestrator" in out
    assert "frontend (project): architecture, constitution, testing" in out


def test_registry_list_json(project_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main(["registry", "list", "--repo-root", str(project_root), "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)

    by_name = {reg["name"]: reg for reg in payload["registries"]}
    assert by_name["permissions"]["ids"] == ["read-only", "documentation", "controlled", "full"]
    assert by_name["frontend"]["managed_by"] == "project"


def test_registry_show_filters(project_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main(["registry", "show", "frontend", "--tag", "testing", "--repo-root", str(project_root), "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert [e["id"] for e in payload["entries"]] == ["testing"]

    assert cli_main(["registry", "show", "frontend", "--category", "design", "--repo-root", str(project_root)]) == 0
    out = capsys.readouterr().out
    assert "architecture: Architecture" in out
    assert "testing: Testing" not in out


def test_registry_show_combined_filters(project_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    argv = ["registry", "show", "frontend", "--tag", "docs", "--category", "design", "--repo-root", str(project_root), "--json"]
    assert cli_main(argv) == 0
    payload = json.loads(capsys.readouterr().out)
    assert [e["id"] for e in payload["entries"]] == ["architecture", "constitution"]

    argv[argv.index("design")] = "quality"
    assert cli_main(argv) == 0
    assert json.loads(capsys.readouterr().out)["entries"] == []


def test_registry_show_unknown(project_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main(["registry", "show", "backend", "--repo-root", str(project_root)]) == 1
    assert "Unknown registry 'backend'" in capsys.readouterr().err


def test_command_module_can_run_directly(project_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    from chipforge.cli.registry.show import main, register_args

    parser = argparse.ArgumentParser()
    register_args(parser)
    args = parser.parse_args(["role", "--repo-root", str(project_root)])

    assert main(args) == 0
    assert "reviewer: Reviewer" in capsys.readouterr().out


def test_parser_has_verbose_flag() -> None:
    args = build_parser().parse_args(["-v", "registry", "list"])

    assert args.verbose is True

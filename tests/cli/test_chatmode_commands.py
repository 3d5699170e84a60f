"""End-to-end tests for `chipforge chatmode ...` through the dispatcher."""
from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from chipforge.cli._dispatcher import main as cli_main


def _write_agent(root: Path, filename: str, data: dict) -> Path:
    path = root / "agents" / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def test_generate_writes_chatmode(project_root: Path, agent_config, capsys: pytest.CaptureFixture[str]) -> None:
    source = _write_agent(project_root, "reviewer.yaml", agent_config(context={"frontend": ["architecture"]}))

    code = cli_main(["chatmode", "generate", str(source), "--repo-root", str(project_root)])
    captured = capsys.readouterr()

    target = project_root / ".github" / "chatmodes" / "code-reviewer.chatmode.md"
    assert code == 0
    assert target.exists()
    assert "Frontend Architecture" in target.read_text(encoding="utf-8")
    assert "1 generated, 0 failed" in captured.out


def test_generate_reports_invalid_config_on_stderr(
    project_root: Path, agent_config, capsys: pytest.CaptureFixture[str]
) -> None:
    good = _write_agent(project_root, "good.yaml", agent_config(name="Good Agent"))
    bad = _write_agent(
        project_root, "bad.yaml", agent_config(name="Bad Agent", character={"role": "designer", "permissions": "full"})
    )
    out_dir = project_root / "out"

    code = cli_main(
        ["chatmode", "generate", str(bad), str(good), "--output-dir", str(out_dir), "--repo-root", str(project_root)]
    )
    captured = capsys.readouterr()

    assert code == 1
    assert (out_dir / "good-agent.chatmode.md").exists()
    assert not (out_dir / "bad-agent.chatmode.md").exists()
    assert "character.role" in captured.err
    assert "designer" in captured.err


def test_generate_refuses_to_overwrite(project_root: Path, agent_config, capsys: pytest.CaptureFixture[str]) -> None:
    source = _write_agent(project_root, "reviewer.yaml", agent_config())
    argv = ["chatmode", "generate", str(source), "--repo-root", str(project_root)]

    assert cli_main(argv) == 0
    assert cli_main(argv) == 1
    assert "already exists" in capsys.readouterr().err
    assert cli_main(argv + ["--overwrite"]) == 0


def test_generate_json_output(project_root: Path, agent_config, capsys: pytest.CaptureFixture[str]) -> None:
    source = _write_agent(project_root, "reviewer.yaml", agent_config())

    code = cli_main(["chatmode", "generate", str(source), "--repo-root", str(project_root), "--json"])
    payload = json.loads(capsys.readouterr().out)

    assert code == 0
    assert payload["status"] == "success"
    assert payload["generated"] == 1
    assert payload["results"][0]["output_path"].endswith("code-reviewer.chatmode.md")


def test_validate_command(project_root: Path, agent_config, capsys: pytest.CaptureFixture[str]) -> None:
    good = _write_agent(project_root, "good.yaml", agent_config())
    bad = _write_agent(project_root, "bad.yaml", agent_config(version="1.0"))

    assert cli_main(["chatmode", "validate", str(good), "--repo-root", str(project_root)]) == 0
    assert "valid (Code Reviewer)" in capsys.readouterr().out

    assert cli_main(["chatmode", "validate", str(good), str(bad), "--repo-root", str(project_root), "--json"]) == 1
    payload = json.loads(capsys.readouterr().out)
    assert [r["valid"] for r in payload["results"]] == [True, False]
    assert payload["results"][1]["issues"][0]["path"] == "version"
    assert not (project_root / ".github").exists()


def test_validate_malformed_file(project_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = project_root / "broken.yaml"
    path.write_text("name: [unclosed", encoding="utf-8")

    assert cli_main(["chatmode", "validate", str(path), "--repo-root", str(project_root)]) == 1
    assert "broken.yaml" in capsys.readouterr().err


def test_generate_warns_about_unreadable_chip(
    project_root: Path, agent_config, capsys: pytest.CaptureFixture[str]
) -> None:
    (project_root / "contexts/frontend/architecture.md").write_bytes(b"\xff\xfe not utf-8")
    first = _write_agent(project_root, "reviewer.yaml", agent_config(context={"frontend": ["architecture", "testing"]}))
    second = _write_agent(project_root, "docs.yaml", agent_config(name="Docs Writer"))

    code = cli_main(["chatmode", "generate", str(first), str(second), "--repo-root", str(project_root)])
    captured = capsys.readouterr()

    assert code == 0
    assert "2 generated, 0 failed" in captured.out
    assert f"Warning: {first}:" in captured.err
    assert "architecture" in captured.err
    assert "Traceback" not in captured.err

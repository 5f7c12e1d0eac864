from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from cognitive_resolution.cli import app


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_resolve_math(runner: CliRunner) -> None:
    result = runner.invoke(app, ["resolve", "What is 2+3*4?"])
    assert result.exit_code == 0, result.output
    assert "the answer is 14" in result.output
    assert "confidence: 0.95 (mathematical)" in result.output


def test_resolve_personal_lists_suggestions(runner: CliRunner) -> None:
    result = runner.invoke(app, ["resolve", "My name is Ron and I have 1 wife and 2 cats"])
    assert result.exit_code == 0, result.output
    assert "2 people in your household" in result.output
    assert "remember: name = Ron" in result.output


def test_resolve_with_facts_file(tmp_path: Path, runner: CliRunner) -> None:
    facts = tmp_path / "facts.json"
    facts.write_text(json.dumps({"name": "Ada"}), encoding="utf8")
    result = runner.invoke(app, ["resolve", "Do you remember my details", "--facts", str(facts)])
    assert result.exit_code == 0, result.output
    assert "Hello Ada!" in result.output


def test_resolve_json_and_trace(runner: CliRunner) -> None:
    result = runner.invoke(app, ["resolve", "3×3+3", "--json"])
    assert result.exit_code == 0, result.output
    start = result.output.index("{")
    payload = json.loads(result.output[start : result.output.rindex("}") + 1])
    assert payload["answer"] == 12

    traced = runner.invoke(app, ["resolve", "3×3+3", "--trace"])
    assert "[system] Cognitive flow initiated" in traced.output


def test_resolve_blank_utterance_fails(runner: CliRunner) -> None:
    result = runner.invoke(app, ["resolve", "   "])
    assert result.exit_code == 2


def test_knowledge_command(tmp_path: Path, runner: CliRunner) -> None:
    path = tmp_path / "kb.json"
    path.write_text(
        json.dumps([{"key": "tide", "concept": "tide", "description": "Rise and fall of the sea."}]),
        encoding="utf8",
    )
    result = runner.invoke(app, ["knowledge", "what is a tide", "--knowledge", str(path)])
    assert result.exit_code == 0, result.output
    assert "tide\tRise and fall of the sea." in result.output

    missing = runner.invoke(app, ["knowledge", "volcano", "--knowledge", str(path)])
    assert "No matching knowledge." in missing.output


def test_diagnostics_command_writes_report(tmp_path: Path, runner: CliRunner) -> None:
    output = tmp_path / "diagnostics.json"
    result = runner.invoke(app, ["diagnostics", "--output", str(output)])
    assert result.exit_code == 0, result.output
    report = json.loads(output.read_text(encoding="utf8"))
    assert report["total"] == 7
    assert report["passed"] == report["total"]


def _reject_constant(token: str) -> None:
    raise ValueError(f"non-standard JSON constant {token}")


def test_resolve_json_is_strict_for_division_by_zero(runner: CliRunner) -> None:
    result = runner.invoke(app, ["resolve", "10/0", "--json"])
    assert result.exit_code == 0, result.output
    start = result.output.index("{")
    payload = json.loads(result.output[start : result.output.rindex("}") + 1], parse_constant=_reject_constant)
    assert payload["answer"] == "NaN"
    assert payload["steps"] == ["Cannot divide by zero"]


def test_diagnostics_report_is_strict_json(tmp_path: Path, runner: CliRunner) -> None:
    output = tmp_path / "diagnostics.json"
    result = runner.invoke(app, ["diagnostics", "--output", str(output)])
    assert result.exit_code == 0, result.output
    report = json.loads(output.read_text(encoding="utf8"), parse_constant=_reject_constant)
    division = next(probe for probe in report["probes"] if probe["utterance"] == "10/0")
    assert division["answer"] == "NaN"
    assert division["expected_answer"] == "NaN"
    assert division["matches"] is True


def test_resolve_rejects_non_mapping_facts(tmp_path: Path, runner: CliRunner) -> None:
    facts = tmp_path / "facts.json"
    facts.write_text(json.dumps(["Ron", "Ada"]), encoding="utf8")
    result = runner.invoke(app, ["resolve", "Do you remember me?", "--facts", str(facts)])
    assert result.exit_code == 2
    assert "Expected a mapping of personal facts" in result.output

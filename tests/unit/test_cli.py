"""Unit tests for the CLI entrypoint."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from university_agent.cli import main
from university_agent.integrations.datastore import LocalDataStore


@pytest.fixture
def cli_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, data_store: LocalDataStore) -> LocalDataStore:
    """Point the CLI at the seeded local store with no hosted services."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "UNIAGENT_LLM_OPENAI_API_KEY",
        "UNIAGENT_TWILIO_ACCOUNT_SID",
        "UNIAGENT_TWILIO_AUTH_TOKEN",
        "UNIAGENT_TWILIO_WHATSAPP_FROM",
        "UNIAGENT_DATA_BACKEND",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("UNIAGENT_DATA_LOCAL_PATH", str(data_store.root))
    return data_store


def test_run_prints_result_json(cli_env: LocalDataStore, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["run", "Notify students under 75% attendance", "--no-llm"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == "success"
    assert payload["workflow_id"] == "attendance_low_75"
    assert payload["summary"]["affected_count"] == 3
    assert "execution" not in payload
    assert len(cli_env.list_logs()) == 4


def test_run_with_trace(cli_env: LocalDataStore, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["run", "Run a performance review", "--no-llm", "--show-trace"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["execution"]["status"] == "COMPLETED"
    assert [s["status"] for s in payload["timeline"]] == ["COMPLETED"] * 6


def test_run_unrecognized_command(cli_env: LocalDataStore, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["run", "Order pizza", "--no-llm"])

    assert exit_code == 5
    assert json.loads(capsys.readouterr().out)["message"] == "Command not recognized"


def test_parse_command(cli_env: LocalDataStore, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["parse", "Remind students about incomplete assignments", "--no-llm"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["workflow_id"] == "assignment_tracking"
    assert payload["source"] == "regex"


def test_data_listings(cli_env: LocalDataStore, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["students"]) == 0
    students = json.loads(capsys.readouterr().out)
    assert [s["name"] for s in students][0] == "Alice Smith"

    assert main(["assignments"]) == 0
    assert len(json.loads(capsys.readouterr().out)) == 4

    assert main(["logs"]) == 0
    assert json.loads(capsys.readouterr().out) == []


def test_workflows_and_diagram(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["workflows"]) == 0
    assert len(json.loads(capsys.readouterr().out)) == 4

    assert main(["diagram", "assignment_tracking"]) == 0
    assert capsys.readouterr().out.startswith("graph TD\n")

    assert main(["diagram", "nope"]) == 2
    assert "Unknown workflow" in capsys.readouterr().err


def test_incomplete_supabase_config_exits_2(
    cli_env: LocalDataStore, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("UNIAGENT_DATA_BACKEND", "supabase")
    monkeypatch.delenv("UNIAGENT_DATA_SUPABASE_URL", raising=False)

    assert main(["students"]) == 2
    assert "Configuration error" in capsys.readouterr().err


def test_invalid_settings_exit_2(
    cli_env: LocalDataStore, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("UNIAGENT_TRACKER_MAX_HISTORY", "0")

    assert main(["students"]) == 2
    assert "Configuration error" in capsys.readouterr().err


@pytest.mark.parametrize("command", ["run", "parse"])
def test_blank_command_is_rejected(command: str, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([command, "   ", "--no-llm"]) == 2

    captured = capsys.readouterr()
    assert "Command is required" in captured.err
    assert captured.out == ""

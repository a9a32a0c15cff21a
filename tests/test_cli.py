# tests/test_cli.py
from __future__ import annotations
import json
import httpx
import pytest

from jira_outline.config import OPTION_ENV, Settings
from jira_outline.main import main

ISSUES = [
    {"key": "AB-1", "fields": {"summary": "Fix bug", "priority": {"name": "High"}, "issuetype": {"name": "Bug"}}},
    {"key": "AB-2", "fields": {"summary": "Write docs", "duedate": "2024-10-01"}},
]


@pytest.fixture
def jira_env(monkeypatch, tmp_path):
    for name in list(OPTION_ENV.values()) + ["JIRA_OUTLINE_CONFIG", "LOG_FILE", "LOG_JSON"]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    # Root-Logger bleibt unangetastet, siehe test_logging_setup.py
    monkeypatch.setattr("jira_outline.main.setup_logging", lambda *args, **kwargs: "test-run")
    monkeypatch.setenv("JIRA_BASE_URL", "https://x.test")
    monkeypatch.setenv("JIRA_USERNAME", "u")
    monkeypatch.setenv("JIRA_PASSWORD", "p")
    monkeypatch.setenv("JIRA_OUTPUT_FILE", str(tmp_path / "jira.org"))
    monkeypatch.setenv("JIRA_ISSUE_FORMAT", "* TODO {SUMMARY}")
    return tmp_path


@pytest.fixture
def mock_jira(monkeypatch):
    def install(handler):
        mock_transport = httpx.MockTransport(handler)
        original_build_client = Settings.build_client

        def build_client(self, transport: httpx.BaseTransport | None = None) -> httpx.Client:
            return original_build_client(self, transport=transport or mock_transport)

        monkeypatch.setattr(Settings, "build_client", build_client)

    return install


def test_export_command_writes_file(jira_env, mock_jira):
    mock_jira(lambda request: httpx.Response(200, json={"issues": ISSUES}))
    assert main(["export"]) == 0
    assert (jira_env / "jira.org").read_text(encoding="utf-8") == "* TODO Fix bug\n\n* TODO Write docs\n"


def test_export_output_override(jira_env, mock_jira):
    mock_jira(lambda request: httpx.Response(200, json={"issues": ISSUES[:1]}))
    target = jira_env / "other.org"
    assert main(["export", "--output", str(target)]) == 0
    assert target.read_text(encoding="utf-8") == "* TODO Fix bug\n"
    assert not (jira_env / "jira.org").exists()


def test_export_stdout(jira_env, mock_jira, capsys):
    mock_jira(lambda request: httpx.Response(200, json={"issues": ISSUES}))
    assert main(["export", "--stdout"]) == 0
    assert capsys.readouterr().out == "* TODO Fix bug\n\n* TODO Write docs\n"
    assert not (jira_env / "jira.org").exists()


def test_export_network_failure_exit_code(jira_env, mock_jira, capsys):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    mock_jira(handler)
    assert main(["export"]) == 1
    assert "error:" in capsys.readouterr().err
    assert not (jira_env / "jira.org").exists()


def test_missing_config_exit_code(jira_env, monkeypatch, capsys):
    monkeypatch.delenv("JIRA_PASSWORD")
    assert main(["export"]) == 1
    assert "JIRA_PASSWORD" in capsys.readouterr().err


def test_preview_prints_table(jira_env, mock_jira, capsys):
    mock_jira(lambda request: httpx.Response(200, json={"issues": ISSUES}))
    assert main(["preview"]) == 0
    out = capsys.readouterr().out
    lines = out.splitlines()
    assert lines[0].split() == ["Key", "Type", "Priority", "Summary", "Due"]
    assert "AB-1" in lines[2] and "Bug" in lines[2] and "High" in lines[2]
    assert "2024-10-01" in lines[3]
    assert lines[-1] == "2 issue(s)"


def test_dump_prints_raw_json(jira_env, mock_jira, capsys):
    payload = {"total": 2, "issues": ISSUES}
    mock_jira(lambda request: httpx.Response(200, json=payload))
    assert main(["dump"]) == 0
    assert json.loads(capsys.readouterr().out) == payload


def test_failure_is_logged_as_error(jira_env, mock_jira, caplog):
    mock_jira(lambda request: httpx.Response(200, text="<html>login</html>"))
    assert main(["export"]) == 1
    errors = [rec for rec in caplog.records if rec.levelname == "ERROR"]
    assert errors and "export failed" in errors[0].getMessage()


def test_non_object_issue_entries_are_skipped(jira_env, mock_jira):
    mock_jira(lambda request: httpx.Response(200, json={"issues": [None, "AB-0"] + ISSUES[:1]}))
    assert main(["export"]) == 0
    assert (jira_env / "jira.org").read_text(encoding="utf-8") == "* TODO Fix bug\n"

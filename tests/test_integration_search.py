from __future__ import annotations

import json
import shutil
import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
FIXTURES = ROOT / "tests" / "fixtures"


def _run_cli(args: list[str], env: dict[str, str] | None = None) -> subprocess.CompletedProcess[str]:
    base_env = {"PYTHONPATH": str(ROOT / "src"), "NO_COLOR": "1"}
    return subprocess.run(
        [sys.executable, "-m", "agent_recall", *args],
        cwd=str(ROOT),
        env={**base_env, **(env or {})},
        text=True,
        capture_output=True,
        check=False,
    )


def _search(*args: str, env: dict[str, str] | None = None) -> list[dict]:
    run = _run_cli(["search", *args], env=env)
    assert run.returncode == 0, run.stderr
    return json.loads(run.stdout)


@pytest.fixture()
def claude_dir(tmp_path: Path) -> Path:
    target = tmp_path / "claude"
    shutil.copytree(FIXTURES / "claude_projects", target)
    return target


@pytest.fixture()
def pi_dir(tmp_path: Path) -> Path:
    target = tmp_path / "pi"
    shutil.copytree(FIXTURES / "pi_sessions", target)
    return target


def test_query_matches_user_messages(claude_dir: Path) -> None:
    sessions = _search("--query", "overseer", "--dir", str(claude_dir))
    assert len(sessions) == 1
    assert "overseer system" in sessions[0]["userMessages"][0]
    assert sessions[0]["matchedOn"] == ["userMessages"]
    assert sessions[0]["relevance"] == 10


def test_query_matches_tools_and_paths(claude_dir: Path) -> None:
    by_tool = _search("--query", "Bash", "--dir", str(claude_dir))
    assert len(by_tool) == 1
    assert "Bash" in by_tool[0]["toolsUsed"]

    by_path = _search("--query", "config/", "--dir", str(claude_dir))
    assert len(by_path) == 1
    assert by_path[0]["filesFromToolCalls"] == ["src/config/monitoring.ts"]


def test_non_matching_query_returns_nothing(claude_dir: Path) -> None:
    assert _search("--query", "nonexistent", "--dir", str(claude_dir)) == []


def test_tool_filters(claude_dir: Path) -> None:
    assert len(_search("--tools", "Edit", "--dir", str(claude_dir))) == 1
    assert len(_search("--tools", "Edit,Bash", "--dir", str(claude_dir))) == 1
    assert _search("--tools", "WebFetch", "--dir", str(claude_dir)) == []


def test_file_pattern_filters(claude_dir: Path) -> None:
    assert len(_search("--file-pattern", "config/", "--dir", str(claude_dir))) == 1
    assert _search("--file-pattern", "database/", "--dir", str(claude_dir)) == []


def test_date_filters(claude_dir: Path) -> None:
    assert _search("--days", "1", "--dir", str(claude_dir)) == []
    assert len(_search("--since", "2024-02-19", "--dir", str(claude_dir))) == 1
    assert _search("--until", "2024-02-19", "--dir", str(claude_dir)) == []


def test_pi_sessions(pi_dir: Path) -> None:
    sessions = _search("--query", "overseer", "--dir", str(pi_dir))
    assert len(sessions) == 1
    assert sessions[0]["source"] == "pi"
    assert "bash" in sessions[0]["toolsUsed"]
    assert "write" in sessions[0]["toolsUsed"]
    assert sessions[0]["inputTokens"] == 300
    assert sessions[0]["outputTokens"] == 180
    assert sessions[0]["modelsUsed"] == ["claude-sonnet-4-20250514"]


def test_output_shape_and_limit(claude_dir: Path, pi_dir: Path) -> None:
    sessions = _search("--dir", str(claude_dir), "--dir", str(pi_dir))
    assert len(sessions) == 2
    expected = {
        "id", "source", "startedAt", "endedAt", "gitBranch", "cwd", "messageCount",
        "inputTokens", "outputTokens", "cacheCreationTokens", "cacheReadTokens",
        "toolsUsed", "filesFromToolCalls", "userMessages", "modelsUsed",
        "relevance", "matchedOn", "transcriptPath",
    }
    assert set(sessions[0]) == expected
    # Pi session ended later on the same day
    assert sessions[0]["endedAt"] == "2024-02-20T11:02:00.000Z"
    assert all(s["relevance"] == 1 for s in sessions)

    assert len(_search("--limit", "1", "--dir", str(claude_dir), "--dir", str(pi_dir))) == 1


def test_source_selects_default_directories(claude_dir: Path, pi_dir: Path) -> None:
    env = {"CLAUDE_SESSIONS_DIR": str(claude_dir), "PI_SESSIONS_DIR": str(pi_dir)}
    assert [s["source"] for s in _search("--source", "claude", env=env)] == ["claude"]
    assert [s["source"] for s in _search("--source", "pi", env=env)] == ["pi"]
    assert len(_search(env=env)) == 2


def test_secrets_are_redacted_unless_disabled(tmp_path: Path) -> None:
    secret = "sk-proj-redact-test-abc123xyz"
    transcript = tmp_path / "proj" / "session.jsonl"
    transcript.parent.mkdir(parents=True)
    transcript.write_text(
        json.dumps(
            {
                "type": "user",
                "sessionId": "s",
                "message": {"role": "user", "content": f"deploy with key {secret}"},
                "timestamp": "2024-02-20T10:00:00.000Z",
            }
        )
        + "\n",
        encoding="utf-8",
    )
    redacted = _search("--query", "deploy", "--dir", str(tmp_path))
    assert secret not in json.dumps(redacted)
    assert "[REDACTED]" in redacted[0]["userMessages"][0]

    raw = _search("--query", "deploy", "--no-redact", "--dir", str(tmp_path))
    assert secret in raw[0]["userMessages"][0]


def test_table_output(claude_dir: Path) -> None:
    run = _run_cli(["search", "--format", "table", "--dir", str(claude_dir)])
    assert run.returncode == 0, run.stderr
    assert "claude" in run.stdout
    assert "1 session(s)" in run.stdout


def test_parse_command() -> None:
    claude = next((FIXTURES / "claude_projects").rglob("*.jsonl"))
    run = _run_cli(["parse", str(claude)])
    assert run.returncode == 0, run.stderr
    data = json.loads(run.stdout)
    assert data["id"] == "123e4567-e89b-12d3-a456-426614174000"
    assert data["modelTokens"]["claude-3-5-sonnet-20241022"]["input"] == 250

    empty = _run_cli(["parse", str(FIXTURES / "empty-session.jsonl")])
    assert empty.returncode == 1
    assert "No session" in empty.stderr


def test_invalid_arguments_fail() -> None:
    assert _run_cli(["search", "--source", "invalid"]).returncode != 0
    assert _run_cli(["search", "--since", "not-a-date"]).returncode != 0
    assert _run_cli(["search", "--limit", "0"]).returncode != 0


def test_nonexistent_directory_yields_empty_list() -> None:
    assert _search("--dir", "/nonexistent/path") == []


def test_help_lists_options() -> None:
    run = _run_cli(["search", "--help"])
    assert run.returncode == 0
    assert "--source" in run.stdout
    assert "--file-pattern" in run.stdout

from __future__ import annotations

import json

from rich.table import Table

from agent_recall.models import ParsedSession, SearchResult
from agent_recall.redact import redact_all, redact_secrets
from agent_recall.utils import format_iso, repair_text


def format_session(session: ParsedSession, *, redact: bool = True) -> dict:
    return {
        "id": session.id,
        "source": session.source,
        "startedAt": format_iso(session.started_at),
        "endedAt": format_iso(session.ended_at),
        "gitBranch": session.git_branch,
        "cwd": session.cwd,
        "version": session.version,
        "messageCount": session.message_count,
        "inputTokens": session.input_tokens,
        "outputTokens": session.output_tokens,
        "cacheCreationTokens": session.cache_creation_tokens,
        "cacheReadTokens": session.cache_read_tokens,
        "toolsUsed": list(session.tools_used),
        "filesFromToolCalls": redact_all(session.files_from_tool_calls, redact=redact),
        "userMessages": redact_all(session.user_messages, redact=redact),
        "modelsUsed": list(session.models_used),
    }


def format_result(result: SearchResult, *, redact: bool = True) -> dict:
    data = format_session(result, redact=redact)
    data.pop("version")
    data["relevance"] = result.relevance
    data["matchedOn"] = list(result.matched_on)
    data["transcriptPath"] = result.transcript_path
    return data


def render_results_json(results: list[SearchResult], *, redact: bool = True) -> str:
    payload = [format_result(r, redact=redact) for r in results]
    return repair_text(json.dumps(payload, indent=2, ensure_ascii=False))


def render_session_json(session: ParsedSession, *, redact: bool = True) -> str:
    data = format_session(session, redact=redact)
    data["modelTokens"] = {
        model: {
            "input": counts.input,
            "output": counts.output,
            "cacheCreation": counts.cache_creation,
            "cacheRead": counts.cache_read,
        }
        for model, counts in session.model_tokens.items()
    }
    return repair_text(json.dumps(data, indent=2, ensure_ascii=False))


def _first_line(text: str, width: int = 60) -> str:
    line = text.strip().splitlines()[0] if text.strip() else ""
    return line if len(line) <= width else line[: width - 3] + "..."


def render_results_table(results: list[SearchResult], *, redact: bool = True) -> Table:
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("Ended", style="dim")
    table.add_column("Source", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Msgs", justify="right")
    table.add_column("Tools")
    table.add_column("First prompt")
    for r in results:
        prompt = redact_secrets(r.user_messages[0], redact=redact) if r.user_messages else ""
        table.add_row(
            format_iso(r.ended_at)[:16].replace("T", " "),
            r.source,
            str(r.relevance),
            str(r.message_count),
            repair_text(", ".join(sorted(r.tools_used)[:4])),
            _first_line(repair_text(prompt)),
        )
    return table

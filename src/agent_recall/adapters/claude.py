from __future__ import annotations

from pathlib import Path

from agent_recall.adapters.common import SessionAccumulator
from agent_recall.models import ParsedSession, TokenCounts
from agent_recall.utils import as_int, iter_records, session_id_from_path

CONVERSATION_TYPES = ("user", "assistant")


def _user_text(content) -> str | None:
    """Human-typed text of a user turn; tool results carried by user turns are not."""
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return None
    parts: list[str] = []
    for item in content:
        if not isinstance(item, dict):
            continue
        ct = item.get("type")
        if ct == "tool_result":
            return None
        if ct == "text":
            t = item.get("text")
            if isinstance(t, str) and t.strip():
                parts.append(t)
    return "\n\n".join(parts) if parts else None


def _usage_counts(usage: dict) -> TokenCounts:
    return TokenCounts(
        input=as_int(usage.get("input_tokens")),
        output=as_int(usage.get("output_tokens")),
        cache_creation=as_int(usage.get("cache_creation_input_tokens")),
        cache_read=as_int(usage.get("cache_read_input_tokens")),
    )


class ClaudeAdapter:
    source = "claude"

    def normalize(self, lines: list[str], source_path: Path | str | None = None) -> ParsedSession | None:
        acc = SessionAccumulator()
        first: dict | None = None

        for obj in iter_records(lines):
            obj_type = obj.get("type")
            # summary, system, file-history-snapshot, ... carry nothing we need
            if obj_type not in CONVERSATION_TYPES:
                continue
            if first is None:
                first = obj
            acc.add_turn(obj.get("timestamp"))

            msg = obj.get("message")
            if not isinstance(msg, dict):
                continue

            if obj_type == "user":
                acc.add_user_text(_user_text(msg.get("content")))
                continue

            model = acc.add_model(msg.get("model"))
            usage = msg.get("usage")
            if isinstance(usage, dict):
                acc.add_usage(model, _usage_counts(usage))
            content = msg.get("content")
            if isinstance(content, list):
                acc.scan_blocks(content, block_type="tool_use", arguments_key="input")

        if first is None:
            return None

        session_id = session_id_from_path(source_path) or first.get("sessionId") or "unknown"
        return acc.build(
            session_id=str(session_id),
            git_branch=str(first.get("gitBranch") or "unknown"),
            cwd=str(first.get("cwd") or ""),
            version=str(first.get("version") or ""),
            source=self.source,
        )

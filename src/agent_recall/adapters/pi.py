from __future__ import annotations

from pathlib import Path

from agent_recall.adapters.common import SessionAccumulator
from agent_recall.models import ParsedSession, TokenCounts
from agent_recall.utils import as_int, iter_records, session_id_from_path

# Session header versions this adapter understands.
SESSION_VERSIONS = frozenset({3})

CONVERSATION_ROLES = ("user", "assistant")


def _usage_counts(usage: dict) -> TokenCounts:
    return TokenCounts(
        input=as_int(usage.get("input")),
        output=as_int(usage.get("output")),
        cache_creation=as_int(usage.get("cacheWrite")),
        cache_read=as_int(usage.get("cacheRead")),
    )


def _is_tool_result(obj: dict, msg: dict | None) -> bool:
    if obj.get("type") == "toolResult":
        return True
    return obj.get("type") == "message" and msg is not None and msg.get("role") == "toolResult"


class PiAdapter:
    source = "pi"

    def normalize(self, lines: list[str], source_path: Path | str | None = None) -> ParsedSession | None:
        acc = SessionAccumulator()
        header: dict | None = None

        for obj in iter_records(lines):
            obj_type = obj.get("type")
            msg = obj.get("message")
            if not isinstance(msg, dict):
                msg = None

            if obj_type == "session":
                if header is None:
                    header = obj
                continue
            if obj_type == "model_change":
                acc.add_model(obj.get("modelId"), with_bucket=False)
                continue
            if _is_tool_result(obj, msg):
                acc.add_tool(obj.get("toolName") or (msg or {}).get("toolName"))
                continue
            if obj_type != "message" or msg is None or msg.get("role") not in CONVERSATION_ROLES:
                continue

            acc.add_turn(obj.get("timestamp"))
            content = msg.get("content")

            if msg.get("role") == "user":
                if isinstance(content, str):
                    acc.add_user_text(content)
                elif isinstance(content, list):
                    for block in content:
                        if isinstance(block, dict) and block.get("type") == "text":
                            acc.add_user_text(block.get("text"))
                continue

            # model and usage live on the record or on the nested message
            model = acc.add_model(obj.get("model") or msg.get("model"))
            usage = obj.get("usage") or msg.get("usage")
            if isinstance(usage, dict):
                acc.add_usage(model, _usage_counts(usage))
            if isinstance(content, list):
                acc.scan_blocks(content, block_type="toolCall", arguments_key="arguments")

        if header is None or acc.turns == 0:
            return None

        session_id = session_id_from_path(source_path) or header.get("id") or "unknown"
        version = header.get("version")
        return acc.build(
            session_id=str(session_id),
            git_branch="unknown",
            cwd=str(header.get("cwd") or ""),
            version="" if version is None else str(version),
            source=self.source,
        )

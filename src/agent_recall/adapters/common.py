from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable

from agent_recall.extract import extract_tool_calls
from agent_recall.models import ParsedSession, TokenCounts
from agent_recall.utils import EPOCH, parse_timestamp

# Bucket for usage reported on a turn that names no model.
UNKNOWN_MODEL = "unknown"


@dataclass
class SessionAccumulator:
    user_messages: list[str] = field(default_factory=list)
    tools: dict[str, None] = field(default_factory=dict)
    files: dict[str, None] = field(default_factory=dict)
    models: dict[str, None] = field(default_factory=dict)
    totals: TokenCounts = field(default_factory=TokenCounts)
    model_tokens: dict[str, TokenCounts] = field(default_factory=dict)
    timestamps: list[datetime] = field(default_factory=list)
    turns: int = 0

    def add_turn(self, timestamp: Any) -> None:
        self.turns += 1
        parsed = parse_timestamp(timestamp)
        if parsed is not None:
            self.timestamps.append(parsed)

    def add_user_text(self, text: Any) -> None:
        if isinstance(text, str) and text.strip():
            self.user_messages.append(text)

    def add_model(self, model: Any, *, with_bucket: bool = True) -> str | None:
        if not isinstance(model, str) or not model:
            return None
        self.models[model] = None
        if with_bucket:
            self.model_tokens.setdefault(model, TokenCounts())
        return model

    def add_usage(self, model: str | None, counts: TokenCounts) -> None:
        self.totals.add(counts)
        self.model_tokens.setdefault(model or UNKNOWN_MODEL, TokenCounts()).add(counts)

    def add_tool(self, name: Any) -> None:
        if isinstance(name, str) and name:
            self.tools[name] = None

    def scan_blocks(self, blocks: Iterable[Any], *, block_type: str, arguments_key: str) -> None:
        extract_tool_calls(
            blocks, self.tools, self.files, block_type=block_type, arguments_key=arguments_key
        )

    def bounds(self) -> tuple[datetime, datetime]:
        if not self.timestamps:
            return EPOCH, EPOCH
        started = self.timestamps[0]
        ended = self.timestamps[-1]
        return started, max(started, ended)

    def build(
        self,
        *,
        session_id: str,
        git_branch: str,
        cwd: str,
        version: str,
        source: str,
    ) -> ParsedSession:
        started_at, ended_at = self.bounds()
        return ParsedSession(
            id=session_id,
            started_at=started_at,
            ended_at=ended_at,
            git_branch=git_branch,
            cwd=cwd,
            version=version,
            source=source,
            message_count=self.turns,
            input_tokens=self.totals.input,
            output_tokens=self.totals.output,
            cache_creation_tokens=self.totals.cache_creation,
            cache_read_tokens=self.totals.cache_read,
            user_messages=list(self.user_messages),
            tools_used=list(self.tools),
            files_from_tool_calls=list(self.files),
            models_used=list(self.models),
            model_tokens=dict(self.model_tokens),
        )

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

SessionSource = Literal["claude", "pi", "all"]

DEFAULT_LIMIT = 20


@dataclass
class TokenCounts:
    input: int = 0
    output: int = 0
    cache_creation: int = 0
    cache_read: int = 0

    def add(self, other: "TokenCounts") -> None:
        self.input += other.input
        self.output += other.output
        self.cache_creation += other.cache_creation
        self.cache_read += other.cache_read


@dataclass
class ParsedSession:
    """Dialect-independent summary of one transcript."""

    id: str
    started_at: datetime
    ended_at: datetime
    git_branch: str
    cwd: str
    version: str
    source: str
    message_count: int
    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_tokens: int = 0
    cache_read_tokens: int = 0
    user_messages: list[str] = field(default_factory=list)
    tools_used: list[str] = field(default_factory=list)
    files_from_tool_calls: list[str] = field(default_factory=list)
    models_used: list[str] = field(default_factory=list)
    # A model seen only through a model-change record has no bucket here.
    model_tokens: dict[str, TokenCounts] = field(default_factory=dict)

    def searchable_text(self) -> str:
        return " ".join([*self.user_messages, *self.tools_used, *self.files_from_tool_calls])


@dataclass
class SearchResult(ParsedSession):
    relevance: int = 1
    matched_on: list[str] = field(default_factory=list)
    transcript_path: str = ""


@dataclass(frozen=True)
class SearchOptions:
    query: str | None = None
    days: int | None = None
    since: datetime | None = None
    until: datetime | None = None
    tools: tuple[str, ...] | None = None
    file_pattern: str | None = None
    limit: int = DEFAULT_LIMIT
    source: SessionSource = "all"

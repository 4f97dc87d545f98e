from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from agent_recall.models import ParsedSession

from .claude import CONVERSATION_TYPES, ClaudeAdapter
from .pi import SESSION_VERSIONS, PiAdapter

TranscriptFormat = Literal["claude", "pi", "unknown"]


def detect_format(first_line: str) -> TranscriptFormat:
    try:
        parsed = json.loads(first_line)
    except (json.JSONDecodeError, RecursionError):
        return "unknown"
    if not isinstance(parsed, dict):
        return "unknown"
    record_type = parsed.get("type")
    version = parsed.get("version")
    if record_type == "session" and isinstance(version, int) and version in SESSION_VERSIONS:
        return "pi"
    if record_type in CONVERSATION_TYPES:
        return "claude"
    return "unknown"


def get_adapter(source_system: str):
    normalized = source_system.strip().lower()
    if normalized == "claude":
        return ClaudeAdapter()
    if normalized == "pi":
        return PiAdapter()
    raise ValueError(f"Unsupported source system: {source_system}")


def parse_session_content(content: str, source_path: Path | str | None = None) -> ParsedSession | None:
    """Normalize one transcript's text, or return None when it yields no session.

    The dialect is decided by the first non-blank line alone.
    """
    lines = [line for line in content.splitlines() if line.strip()]
    if not lines:
        return None
    fmt = detect_format(lines[0])
    if fmt == "unknown":
        return None
    return get_adapter(fmt).normalize(lines, source_path)


def parse_session_file(source_path: Path) -> ParsedSession | None:
    try:
        content = Path(source_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    return parse_session_content(content, source_path)

"""Default transcript locations, resolved from the environment."""
from __future__ import annotations

import os
from pathlib import Path

SOURCES = ("claude", "pi", "all")


def _env_path(name: str, default: str) -> Path:
    value = os.getenv(name)
    if value:
        return Path(value).expanduser()
    return Path(default).expanduser()


def claude_sessions_dir() -> Path:
    return _env_path("CLAUDE_SESSIONS_DIR", "~/.claude/projects")


def pi_sessions_dir() -> Path:
    return _env_path("PI_SESSIONS_DIR", "~/.pi/agent/sessions")


def default_input_paths(source_system: str) -> list[Path]:
    normalized = source_system.strip().lower()
    if normalized == "claude":
        return [claude_sessions_dir()]
    if normalized == "pi":
        return [pi_sessions_dir()]
    if normalized == "all":
        return [claude_sessions_dir(), pi_sessions_dir()]
    raise ValueError(f"No default input path for source system: {source_system}")

"""Tool-call and file-path extraction shared by the dialect adapters."""

from __future__ import annotations

from typing import Any, Iterable

# Argument names that conventionally hold a path.
FILE_PATH_KEYS = frozenset({"file_path", "path", "file", "filename", "filePath"})

MAX_DEPTH = 32


def _looks_like_path(value: Any) -> bool:
    return isinstance(value, str) and ("/" in value or "\\" in value)


def _walk_list(items: list, files: dict[str, None], depth: int) -> None:
    if depth > MAX_DEPTH:
        return
    for item in items:
        if isinstance(item, dict):
            _walk(item, files, depth + 1)
        elif isinstance(item, list):
            _walk_list(item, files, depth + 1)


def _walk(arguments: dict, files: dict[str, None], depth: int) -> None:
    if depth > MAX_DEPTH:
        return
    for key, value in arguments.items():
        if key in FILE_PATH_KEYS and _looks_like_path(value):
            files[value] = None
        if isinstance(value, dict):
            _walk(value, files, depth + 1)
        elif isinstance(value, list):
            _walk_list(value, files, depth)


def extract_file_paths(arguments: dict, files: dict[str, None]) -> None:
    """Collect path-valued arguments into ``files`` (an insertion-ordered set).

    Nested mappings are searched at any depth. Lists are only walked to reach
    mappings inside them; their primitive elements are never treated as paths.
    """
    _walk(arguments, files, 0)


def extract_tool_calls(
    blocks: Iterable[Any],
    tools: dict[str, None],
    files: dict[str, None],
    *,
    block_type: str,
    arguments_key: str,
) -> None:
    for block in blocks:
        if not isinstance(block, dict) or block.get("type") != block_type:
            continue
        name = block.get("name")
        if not isinstance(name, str) or not name:
            continue
        tools[name] = None
        arguments = block.get(arguments_key)
        if isinstance(arguments, dict):
            extract_file_paths(arguments, files)

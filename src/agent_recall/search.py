from __future__ import annotations

import logging
from dataclasses import fields
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable

from agent_recall.adapters import parse_session_file
from agent_recall.models import DEFAULT_LIMIT, ParsedSession, SearchOptions, SearchResult
from agent_recall.utils import ensure_utc, now_utc

logger = logging.getLogger(__name__)

USER_MESSAGE_WEIGHT = 10
TOOL_WEIGHT = 3
FILE_WEIGHT = 3


def find_session_dirs(base_dir: Path) -> list[Path]:
    try:
        return sorted(p for p in base_dir.iterdir() if p.is_dir())
    except OSError:
        return []


def find_session_files(directory: Path) -> list[Path]:
    try:
        return sorted(p for p in directory.glob("*.jsonl") if p.is_file())
    except OSError:
        return []


def discover_files(base_dir: Path) -> list[Path]:
    """Transcripts one level down (per project or cwd) followed by those in ``base_dir`` itself."""
    paths: list[Path] = []
    for session_dir in find_session_dirs(base_dir):
        paths.extend(find_session_files(session_dir))
    paths.extend(find_session_files(base_dir))
    return paths


def _score_field(values: Iterable[str], terms: list[str], weight: int) -> int:
    score = 0
    for value in values:
        lowered = value.lower()
        for term in terms:
            if term in lowered:
                score += weight
    return score


def score_relevance(session: ParsedSession, query: str | None) -> tuple[int, list[str]]:
    """Weighted substring overlap between ``query`` and a session.

    Each (term, user message) hit is worth 10, each (term, tool name) and
    (term, file path) hit 3. An empty query scores 1 so it never excludes.
    """
    terms = (query or "").lower().split()
    if not terms:
        return 1, []

    score = 0
    matched_on: list[str] = []
    for category, values, weight in (
        ("userMessages", session.user_messages, USER_MESSAGE_WEIGHT),
        ("toolsUsed", session.tools_used, TOOL_WEIGHT),
        ("filesFromToolCalls", session.files_from_tool_calls, FILE_WEIGHT),
    ):
        field_score = _score_field(values, terms, weight)
        if field_score:
            score += field_score
            matched_on.append(category)
    return score, matched_on


def _lower_bound(options: SearchOptions, now: datetime) -> datetime | None:
    if options.since is not None:
        return ensure_utc(options.since)
    # days=0 bounds at now, it does not disable the filter
    if options.days is not None:
        return ensure_utc(now) - timedelta(days=options.days)
    return None


def matches_date_range(session: ParsedSession, options: SearchOptions, *, now: datetime | None = None) -> bool:
    since = _lower_bound(options, now or now_utc())
    if since is not None and session.ended_at < since:
        return False
    if options.until is not None and session.ended_at > ensure_utc(options.until):
        return False
    return True


def matches_tools(session: ParsedSession, options: SearchOptions) -> bool:
    if not options.tools:
        return True
    session_tools = [t.lower() for t in session.tools_used]
    return any(tool.lower() in t for tool in options.tools for t in session_tools)


def matches_file_pattern(session: ParsedSession, options: SearchOptions) -> bool:
    if not options.file_pattern:
        return True
    pattern = options.file_pattern.lower()
    return any(pattern in f.lower() for f in session.files_from_tool_calls)


def matches_filters(session: ParsedSession, options: SearchOptions, *, now: datetime | None = None) -> bool:
    return (
        matches_date_range(session, options, now=now)
        and matches_tools(session, options)
        and matches_file_pattern(session, options)
    )


def _to_result(session: ParsedSession, relevance: int, matched_on: list[str], source_path: Path) -> SearchResult:
    values = {f.name: getattr(session, f.name) for f in fields(ParsedSession)}
    return SearchResult(
        **values,
        relevance=relevance,
        matched_on=matched_on,
        transcript_path=str(source_path),
    )


def _evaluate(source_path: Path, options: SearchOptions, now: datetime) -> SearchResult | None:
    session = parse_session_file(source_path)
    if session is None or not session.user_messages:
        return None
    if options.source != "all" and session.source != options.source:
        return None
    if not matches_filters(session, options, now=now):
        return None
    relevance, matched_on = score_relevance(session, options.query)
    if options.query and relevance == 0:
        return None
    return _to_result(session, relevance, matched_on, source_path)


def process_session_files(
    paths: Iterable[Path], options: SearchOptions, *, now: datetime | None = None
) -> list[SearchResult]:
    now = now or now_utc()
    results: list[SearchResult] = []
    for source_path in paths:
        try:
            result = _evaluate(source_path, options, now)
        except Exception:
            logger.debug("Skipping unprocessable transcript %s", source_path, exc_info=True)
            continue
        if result is None:
            logger.debug("No match in %s", source_path)
            continue
        results.append(result)
    return results


def rank_results(results: list[SearchResult], limit: int | None = None) -> list[SearchResult]:
    # reverse=True keeps equal keys in their original order
    ordered = sorted(results, key=lambda r: (r.relevance, r.ended_at), reverse=True)
    return ordered[: limit if limit and limit > 0 else DEFAULT_LIMIT]


def search_sessions(directories: Iterable[Path], options: SearchOptions) -> list[SearchResult]:
    now = now_utc()
    results: list[SearchResult] = []
    for base_dir in directories:
        paths = discover_files(Path(base_dir))
        found = process_session_files(paths, options, now=now)
        logger.debug("%s: %d transcripts, %d candidates", base_dir, len(paths), len(found))
        results.extend(found)
    return rank_results(results, options.limit)

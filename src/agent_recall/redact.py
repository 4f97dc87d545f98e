from __future__ import annotations

import hyperscan

from agent_recall.redact_patterns import PATTERNS
from agent_recall.utils import repair_text

REDACTED = "[REDACTED]"

_db: hyperscan.Database | None = None


def _get_db() -> hyperscan.Database:
    global _db
    if _db is None:
        db = hyperscan.Database()
        db.compile(
            expressions=[pattern for _, pattern in PATTERNS],
            ids=list(range(len(PATTERNS))),
            elements=len(PATTERNS),
            flags=[hyperscan.HS_FLAG_UTF8 | hyperscan.HS_FLAG_SOM_LEFTMOST] * len(PATTERNS),
        )
        _db = db
    return _db


def _merge_spans(spans: list[tuple[int, int]]) -> list[tuple[int, int]]:
    merged: list[tuple[int, int]] = []
    for start, end in sorted(spans):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def redact_secrets(text: str, *, redact: bool = True) -> str:
    if not redact or not text:
        return text
    text = repair_text(text)
    data = text.encode("utf-8")
    spans: list[tuple[int, int]] = []

    def on_match(id: int, from_: int, to: int, flags: int, context: list) -> None:
        context.append((from_, to))

    _get_db().scan(data, match_event_handler=on_match, context=spans)
    if not spans:
        return text

    # Rebuild from byte offsets so multi-byte characters keep their positions.
    pieces: list[bytes] = []
    cursor = 0
    for start, end in _merge_spans(spans):
        pieces.append(data[cursor:start])
        pieces.append(REDACTED.encode("utf-8"))
        cursor = end
    pieces.append(data[cursor:])
    return b"".join(pieces).decode("utf-8")


def redact_all(values: list[str], *, redact: bool = True) -> list[str]:
    return [redact_secrets(value, redact=redact) for value in values]

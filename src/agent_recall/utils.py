from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

SESSION_ID_PATTERN = re.compile(r"([a-f0-9-]{36})\.jsonl$")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_FRACTION_PATTERN = re.compile(r"(\d{2}:\d{2}:\d{2})[.,](\d+)")


def ensure_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _six_digit_fraction(match: re.Match) -> str:
    return f"{match.group(1)}.{match.group(2)[:6].ljust(6, '0')}"


def parse_iso_datetime(value: str) -> datetime:
    # fromisoformat on 3.10 only takes 3 or 6 fractional digits
    normalized = _FRACTION_PATTERN.sub(_six_digit_fraction, value.replace("Z", "+00:00"), count=1)
    return ensure_utc(datetime.fromisoformat(normalized))


def repair_text(text: str) -> str:
    """Replace lone surrogates (legal in JSON escapes, not in UTF-8) with '?'."""
    return text.encode("utf-8", "replace").decode("utf-8")


def parse_timestamp(value: Any) -> datetime | None:
    """Best-effort parse of a record timestamp (ISO string or epoch millis)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            return None
    if isinstance(value, str) and value.strip():
        try:
            return parse_iso_datetime(value.strip())
        except ValueError:
            return None
    return None


def format_iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_utc() -> datetime:
    return datetime.now(tz=timezone.utc)


def session_id_from_path(source_path: Path | str | None) -> str | None:
    if source_path is None:
        return None
    match = SESSION_ID_PATTERN.search(str(source_path))
    return match.group(1) if match else None


def iter_records(lines: list[str]) -> Iterator[dict]:
    """Yield every line that decodes to a JSON object; everything else is skipped."""
    for line in lines:
        line = line.strip()
        if not line:
            continue
        try:
            obj = json.loads(line)
        except (json.JSONDecodeError, RecursionError):
            continue
        if isinstance(obj, dict):
            yield obj


def as_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    return 0

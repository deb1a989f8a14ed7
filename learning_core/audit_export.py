"""Export the audit trail of a submitted attempt as JSON or CSV.

Each attempt records one event per command (start, answer, advance, submit).
Events only carry the keys relevant to their kind, so the exports flatten
them onto a fixed column set and number them in the order they happened.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional
import csv
import io

from .types import AttemptResult

_TEXT_COLUMNS = ("t", "event", "assessment_id", "question_id", "direction", "reason")
_INT_COLUMNS = (
    "index",
    "time_remaining",
    "questions",
    "option_index",
    "previous",
    "index_before",
    "correct",
    "total",
    "score",
)

COLUMNS: tuple[str, ...] = (
    "seq",
    "t",
    "event",
    "assessment_id",
    "index",
    "time_remaining",
    "questions",
    "question_id",
    "option_index",
    "previous",
    "direction",
    "index_before",
    "correct",
    "total",
    "score",
    "reason",
)


def _as_int(value: object) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def event_rows(result: AttemptResult) -> List[Dict[str, Any]]:
    """Flatten the attempt's events; keys an event kind does not use are None."""

    rows: List[Dict[str, Any]] = []
    for seq, event in enumerate(result.audit_events, start=1):
        row: Dict[str, Any] = {"seq": seq}
        for key in _TEXT_COLUMNS:
            val = event.get(key)
            row[key] = None if val is None else str(val)
        for key in _INT_COLUMNS:
            row[key] = _as_int(event.get(key))
        rows.append(row)
    return rows


def to_json(result: AttemptResult) -> Dict[str, Any]:
    return {
        "assessment_id": result.assessment_id,
        "reason": result.reason,
        "score": result.score,
        "events": event_rows(result),
    }


def to_csv(result: AttemptResult) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=COLUMNS)
    writer.writeheader()
    writer.writerows(event_rows(result))
    return buf.getvalue()


__all__ = ["COLUMNS", "event_rows", "to_json", "to_csv"]

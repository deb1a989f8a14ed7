from __future__ import annotations
from typing import Dict, Iterable, Optional

from .types import Assessment, Attempt, UploadedDocument, DOCUMENT_STATUSES


def progress_summary(
    assessments: Iterable[Assessment],
    documents: Iterable[UploadedDocument],
    active: Optional[Attempt] = None,
) -> Dict[str, object]:
    """Dashboard numbers computed from live catalog and upload state."""

    items = list(assessments)
    docs = list(documents)
    scores = [a.score for a in items if a.status == "completed" and a.score is not None]
    by_status: Dict[str, int] = {s: 0 for s in DOCUMENT_STATUSES}
    for d in docs:
        by_status[d.status] = by_status.get(d.status, 0) + 1
    return {
        "assessments_total": len(items),
        "assessments_completed": len(scores),
        "average_score": round(sum(scores) / len(scores), 1) if scores else None,
        "best_score": max(scores) if scores else None,
        "documents_total": len(docs),
        "documents_by_status": by_status,
        "questions_generated": sum(d.questions_generated or 0 for d in docs),
        "attempt_active": active is not None,
        "active_assessment_id": active.assessment_id if active is not None else None,
    }

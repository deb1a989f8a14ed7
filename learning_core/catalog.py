"""Assessment catalog: the ordered, newest-first collection of assessments.

Status changes go through ``begin``/``complete``/``restore`` so the
single-active-attempt and score-iff-completed invariants hold at every step.
"""
from __future__ import annotations

import json
import logging
import random
import uuid
import importlib.resources as ir
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .config import DEFAULT_TIME_LIMIT_MINUTES, GENERATION_TOPICS, make_rng
from .errors import ConflictError, NotFoundError, ValidationError
from .types import Assessment, Question, UploadedDocument


log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusSnapshot:
    status: str
    score: Optional[int]
    completed_at: Optional[datetime]


def _parse_question(raw: Dict[str, Any]) -> Question:
    return Question(
        id=str(raw["id"]),
        question=raw["question"],
        options=list(raw["options"]),
        correct_answer=raw["correctAnswer"],
        explanation=raw.get("explanation", ""),
        difficulty=raw.get("difficulty", "medium"),
        topic=raw.get("topic", ""),
    )


def parse_assessment(raw: Dict[str, Any]) -> Assessment:
    completed = raw.get("completedAt")
    return Assessment(
        id=str(raw["id"]),
        title=raw["title"],
        description=raw.get("description", ""),
        questions=[_parse_question(q) for q in raw.get("questions") or []],
        time_limit=raw.get("timeLimit", DEFAULT_TIME_LIMIT_MINUTES),
        difficulty=raw.get("difficulty", "mixed"),
        status=raw.get("status", "available"),
        score=raw.get("score"),
        completed_at=datetime.fromisoformat(completed) if completed else None,
    )


def load_assessments(path: Optional[Path] = None) -> List[Assessment]:
    if path is None:
        data = ir.files(__package__).joinpath("data/catalog.json").read_text(encoding="utf-8")
    else:
        data = Path(path).read_text(encoding="utf-8")
    return [parse_assessment(r) for r in json.loads(data)]


class Catalog:
    def __init__(self, assessments: Iterable[Assessment] = (), rng: Optional[random.Random] = None):
        self._items: List[Assessment] = list(assessments)
        ids = [a.id for a in self._items]
        if len(ids) != len(set(ids)):
            raise ValidationError("catalog has duplicate assessment ids")
        if sum(1 for a in self._items if a.status == "in-progress") > 1:
            raise ConflictError("catalog has more than one assessment in progress")
        self.rng = rng or make_rng()

    @property
    def assessments(self) -> List[Assessment]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get(self, assessment_id: str) -> Assessment:
        for a in self._items:
            if a.id == assessment_id:
                return a
        raise NotFoundError(f"assessment {assessment_id} not found")

    def active(self) -> Optional[Assessment]:
        return next((a for a in self._items if a.status == "in-progress"), None)

    # ---- status writes (attempt engine) ----
    def begin(self, assessment_id: str) -> StatusSnapshot:
        a = self.get(assessment_id)
        current = self.active()
        if current is not None:
            raise ConflictError(f"assessment {current.id} is already in progress")
        snap = StatusSnapshot(a.status, a.score, a.completed_at)
        a.status = "in-progress"
        a.score = None
        a.completed_at = None
        return snap

    def complete(self, assessment_id: str, score: int, completed_at: datetime) -> Assessment:
        if not 0 <= int(score) <= 100:
            raise ValidationError("score must be within 0..100")
        a = self.get(assessment_id)
        a.status = "completed"
        a.score = int(score)
        a.completed_at = completed_at
        return a

    def restore(self, assessment_id: str, snapshot: StatusSnapshot) -> Assessment:
        a = self.get(assessment_id)
        a.status = snapshot.status  # type: ignore[assignment]
        a.score = snapshot.score
        a.completed_at = snapshot.completed_at
        return a

    # ---- generation (catalog mutator) ----
    def generate(
        self,
        topic: Optional[str] = None,
        *,
        time_limit: Optional[int] = None,
        difficulty: str = "mixed",
        source_document_id: Optional[str] = None,
        planned_questions: Optional[int] = None,
    ) -> Assessment:
        """Prepend an empty "not yet generated" assessment for ``topic``."""

        if topic is None:
            topic = self.rng.choice(GENERATION_TOPICS)
        topic = str(topic).strip()
        if not topic:
            raise ValidationError("topic must be non-empty")
        a = Assessment(
            id=uuid.uuid4().hex,
            title=f"{topic} Assessment",
            description=f"Auto-generated assessment covering key concepts in {topic}.",
            questions=[],
            time_limit=DEFAULT_TIME_LIMIT_MINUTES if time_limit is None else time_limit,
            difficulty=difficulty,  # type: ignore[arg-type]
            status="available",
            source_document_id=source_document_id,
            planned_questions=planned_questions,
        )
        self._items.insert(0, a)
        log.info("generated assessment id=%s title=%r", a.id, a.title)
        return a

    def generate_from_document(self, document: UploadedDocument) -> Assessment:
        if document.status != "completed":
            raise ConflictError(f"document {document.id} has not finished processing")
        topic = Path(document.name).stem.replace("_", " ").replace("-", " ").strip() or document.name
        return self.generate(
            topic,
            source_document_id=document.id,
            planned_questions=document.questions_generated,
        )


def load_catalog(path: Optional[Path] = None, rng: Optional[random.Random] = None) -> Catalog:
    return Catalog(load_assessments(path), rng=rng)

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from .errors import ValidationError

QuestionDifficulty = Literal["easy", "medium", "hard"]
AssessmentDifficulty = Literal["mixed", "easy", "medium", "hard"]
AssessmentStatus = Literal["available", "in-progress", "completed"]
DocumentStatus = Literal["uploading", "processing", "completed", "error"]

QUESTION_DIFFICULTIES = ("easy", "medium", "hard")
ASSESSMENT_DIFFICULTIES = ("mixed", "easy", "medium", "hard")
ASSESSMENT_STATUSES = ("available", "in-progress", "completed")
DOCUMENT_STATUSES = ("uploading", "processing", "completed", "error")


class Direction(str, Enum):
    NEXT = "next"
    PREVIOUS = "previous"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _is_index(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class Question:
    id: str
    question: str
    options: List[str]
    correct_answer: int
    explanation: str = ""
    difficulty: QuestionDifficulty = "medium"
    topic: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValidationError("question id must be non-empty")
        if len(self.options) < 2:
            raise ValidationError(f"question {self.id} needs at least two options")
        if not _is_index(self.correct_answer) or not 0 <= self.correct_answer < len(self.options):
            raise ValidationError(f"question {self.id} has an invalid correct answer index")
        if self.difficulty not in QUESTION_DIFFICULTIES:
            raise ValidationError(f"question {self.id} has unknown difficulty {self.difficulty!r}")

    def is_valid_option(self, index: object) -> bool:
        return _is_index(index) and 0 <= index < len(self.options)  # type: ignore[operator]

    def to_dict(self, include_answer: bool = False) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "question": self.question,
            "options": list(self.options),
            "difficulty": self.difficulty,
            "topic": self.topic,
        }
        if include_answer:
            out["correctAnswer"] = self.correct_answer
            out["explanation"] = self.explanation
        return out


@dataclass
class Assessment:
    id: str
    title: str
    description: str = ""
    questions: List[Question] = field(default_factory=list)
    time_limit: int = 20  # minutes
    difficulty: AssessmentDifficulty = "mixed"
    status: AssessmentStatus = "available"
    score: Optional[int] = None
    completed_at: Optional[datetime] = None
    source_document_id: Optional[str] = None
    planned_questions: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValidationError("assessment id must be non-empty")
        if not _is_index(self.time_limit) or self.time_limit <= 0:
            raise ValidationError(f"assessment {self.id} needs a positive time limit")
        if self.difficulty not in ASSESSMENT_DIFFICULTIES:
            raise ValidationError(f"assessment {self.id} has unknown difficulty {self.difficulty!r}")
        if self.status not in ASSESSMENT_STATUSES:
            raise ValidationError(f"assessment {self.id} has unknown status {self.status!r}")
        ids = [q.id for q in self.questions]
        if len(ids) != len(set(ids)):
            raise ValidationError(f"assessment {self.id} has duplicate question ids")
        completed = self.status == "completed"
        if completed != (self.score is not None) or completed != (self.completed_at is not None):
            raise ValidationError(
                f"assessment {self.id}: score and completedAt must be set exactly when completed"
            )
        if self.score is not None and not 0 <= self.score <= 100:
            raise ValidationError(f"assessment {self.id} score out of range")

    def question(self, question_id: str) -> Optional[Question]:
        return next((q for q in self.questions if q.id == question_id), None)

    def to_dict(self, include_answers: bool = False) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "questions": [q.to_dict(include_answer=include_answers) for q in self.questions],
            "questionCount": len(self.questions),
            "timeLimit": self.time_limit,
            "difficulty": self.difficulty,
            "status": self.status,
            "score": self.score,
            "completedAt": _iso(self.completed_at),
            "sourceDocumentId": self.source_document_id,
            "plannedQuestions": self.planned_questions,
        }


@dataclass
class Attempt:
    assessment_id: str
    time_remaining_seconds: int
    current_question_index: int = 0
    answers: Dict[str, int] = field(default_factory=dict)
    submitted: bool = False
    started_at: Optional[datetime] = None
    events: List[Dict[str, object]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assessmentId": self.assessment_id,
            "currentQuestionIndex": self.current_question_index,
            "answers": dict(self.answers),
            "timeRemainingSeconds": self.time_remaining_seconds,
            "submitted": self.submitted,
            "startedAt": _iso(self.started_at),
        }


@dataclass
class AttemptResult:
    assessment_id: str
    score: int
    correct_count: int
    total_questions: int
    completed_at: datetime
    reason: Literal["manual", "timeout"] = "manual"
    answers: Dict[str, int] = field(default_factory=dict)
    review: List[Dict[str, object]] = field(default_factory=list)
    audit_events: List[Dict[str, object]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assessmentId": self.assessment_id,
            "score": self.score,
            "correctCount": self.correct_count,
            "totalQuestions": self.total_questions,
            "completedAt": _iso(self.completed_at),
            "reason": self.reason,
            "answers": dict(self.answers),
            "review": [dict(r) for r in self.review],
        }


@dataclass(frozen=True)
class FileMetadata:
    name: str
    size: int
    type: str


@dataclass
class UploadedDocument:
    id: str
    name: str
    size: int
    type: str
    status: DocumentStatus = "uploading"
    progress: float = 0.0
    questions_generated: Optional[int] = None

    def __post_init__(self) -> None:
        if not _is_index(self.size) or self.size < 0:
            raise ValidationError(f"document {self.name!r} has an invalid size")
        if self.status not in DOCUMENT_STATUSES:
            raise ValidationError(f"document {self.name!r} has unknown status {self.status!r}")
        if not 0.0 <= self.progress <= 100.0:
            raise ValidationError(f"document {self.name!r} progress out of range")
        if (self.status == "completed") != (self.questions_generated is not None):
            raise ValidationError(f"document {self.name!r}: questions_generated is set iff completed")
        if self.questions_generated is not None and (
            not _is_index(self.questions_generated) or self.questions_generated < 0
        ):
            raise ValidationError(f"document {self.name!r} has an invalid question count")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "size": self.size,
            "type": self.type,
            "status": self.status,
            "progress": round(self.progress, 2),
            "questionsGenerated": self.questions_generated,
        }


@dataclass
class Notification:
    kind: Literal["attempt_submitted", "document_completed", "validation_rejected", "assessment_generated"]
    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"
    data: Dict[str, object] = field(default_factory=dict)
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "title": self.title,
            "description": self.description,
            "variant": self.variant,
            "data": dict(self.data),
            "createdAt": _iso(self.created_at),
        }

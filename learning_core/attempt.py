# learning_core/attempt.py
from __future__ import annotations
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union
import logging

from .catalog import Catalog, StatusSnapshot
from .config import ATTEMPT_TICK_SECONDS
from .errors import ConflictError, NotFoundError, ValidationError
from .notifications import Notifier
from .scheduler import Scheduler, TimerHandle
from .types import Assessment, Attempt, AttemptResult, Direction, Question


log = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def percent_score(correct: int, total: int) -> int:
    """Rounded percentage, halves rounded up; an empty assessment scores 0."""

    if total <= 0:
        return 0
    return (200 * correct + total) // (2 * total)


def score_answers(questions: Iterable[Question], answers: Dict[str, int]) -> Tuple[int, int, int]:
    """Return (score, correct_count, total). Unanswered questions count as wrong."""

    qs = list(questions)
    correct = sum(1 for q in qs if answers.get(q.id) == q.correct_answer)
    return percent_score(correct, len(qs)), correct, len(qs)


def _review_rows(questions: Iterable[Question], answers: Dict[str, int]) -> List[Dict[str, object]]:
    rows: List[Dict[str, object]] = []
    for q in questions:
        chosen = answers.get(q.id)
        rows.append(
            {
                "questionId": q.id,
                "chosen": chosen,
                "correctAnswer": q.correct_answer,
                "correct": chosen == q.correct_answer,
                "explanation": q.explanation,
                "topic": q.topic,
                "difficulty": q.difficulty,
            }
        )
    return rows


def _parse_direction(direction: Union[Direction, str]) -> Direction:
    try:
        return Direction(direction)
    except ValueError:
        raise ValidationError(f"unknown direction {direction!r}; expected 'next' or 'previous'") from None


class AttemptEngine:
    """Owns the single active attempt: navigation, answers, countdown and scoring."""

    def __init__(
        self,
        catalog: Catalog,
        scheduler: Scheduler,
        notifier: Optional[Notifier] = None,
        *,
        tick_seconds: float = ATTEMPT_TICK_SECONDS,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.catalog = catalog
        self.scheduler = scheduler
        self.notifier = notifier or Notifier()
        self.tick_seconds = tick_seconds
        self.clock = clock
        self._active: Optional[Attempt] = None
        self._assessment: Optional[Assessment] = None
        self._snapshot: Optional[StatusSnapshot] = None
        self._timer: Optional[TimerHandle] = None
        self._results: Dict[str, AttemptResult] = {}

    @property
    def active(self) -> Optional[Attempt]:
        return self._active

    def _require_active(self) -> Attempt:
        if self._active is None or self._active.submitted:
            raise NotFoundError("no active attempt")
        return self._active

    def _event(self, kind: str, **values: object) -> None:
        at = self._active
        if at is None:
            return
        row: Dict[str, object] = {
            "t": self.clock().isoformat(),
            "event": kind,
            "assessment_id": at.assessment_id,
            "index": at.current_question_index,
            "time_remaining": at.time_remaining_seconds,
        }
        row.update(values)
        at.events.append(row)

    def start(self, assessment_id: str) -> Attempt:
        if self._active is not None:
            raise ConflictError(
                f"an attempt for assessment {self._active.assessment_id} is already active"
            )
        assessment = self.catalog.get(assessment_id)
        snapshot = self.catalog.begin(assessment.id)

        attempt = Attempt(
            assessment_id=assessment.id,
            time_remaining_seconds=assessment.time_limit * 60,
            started_at=self.clock(),
        )
        self._active = attempt
        self._assessment = assessment
        self._snapshot = snapshot
        self._timer = self.scheduler.call_every(self.tick_seconds, self._on_tick)
        self._event("start", questions=len(assessment.questions))
        log.info(
            "attempt started assessment=%s questions=%d time_limit=%dmin",
            assessment.id, len(assessment.questions), assessment.time_limit,
        )
        return attempt

    def current_question(self) -> Optional[Question]:
        at = self._active
        if at is None or self._assessment is None or not self._assessment.questions:
            return None
        return self._assessment.questions[at.current_question_index]

    def record_answer(self, question_id: str, option_index: int) -> Attempt:
        at = self._require_active()
        assert self._assessment is not None
        question = self._assessment.question(question_id)
        if question is None:
            raise NotFoundError(f"question {question_id} is not part of assessment {at.assessment_id}")
        if not question.is_valid_option(option_index):
            raise ValidationError(
                f"option {option_index!r} is out of range for question {question_id} "
                f"({len(question.options)} options)"
            )
        previous = at.answers.get(question_id)
        at.answers[question_id] = int(option_index)
        self._event("answer", question_id=question_id, option_index=int(option_index), previous=previous)
        return at

    def advance(self, direction: Union[Direction, str]) -> int:
        at = self._require_active()
        assert self._assessment is not None
        step = _parse_direction(direction)
        before = at.current_question_index
        last = max(len(self._assessment.questions) - 1, 0)
        if step is Direction.NEXT:
            at.current_question_index = min(before + 1, last)
        else:
            at.current_question_index = max(before - 1, 0)
        if at.current_question_index != before:
            self._event("advance", direction=step.value, index_before=before)
        return at.current_question_index

    def submit(self, reason: str = "manual") -> Optional[AttemptResult]:
        """Score and close the active attempt. A repeat call (or a late timer) is a no-op."""

        at = self._active
        if at is None or at.submitted:
            log.debug("submit ignored: no active attempt (reason=%s)", reason)
            return None
        assessment = self._assessment
        assert assessment is not None

        self._cancel_timer()
        score, correct, total = score_answers(assessment.questions, at.answers)
        completed_at = self.clock()
        at.submitted = True
        self._event("submit", reason=reason, score=score, correct=correct, total=total)

        self.catalog.complete(assessment.id, score, completed_at)
        result = AttemptResult(
            assessment_id=assessment.id,
            score=score,
            correct_count=correct,
            total_questions=total,
            completed_at=completed_at,
            reason="timeout" if reason == "timeout" else "manual",
            answers=dict(at.answers),
            review=_review_rows(assessment.questions, at.answers),
            audit_events=list(at.events),
        )
        self._results[assessment.id] = result
        self._discard()
        log.info(
            "attempt submitted assessment=%s score=%d correct=%d/%d reason=%s",
            assessment.id, score, correct, total, reason,
        )
        self.notifier.emit(
            "attempt_submitted",
            "Assessment completed!",
            f"You scored {score}% ({correct}/{total} correct)",
            assessment_id=assessment.id,
            score=score,
            correct=correct,
            total=total,
            reason=result.reason,
        )
        return result

    def abandon(self) -> bool:
        """Leave the attempt without scoring; the assessment gets its prior status back."""

        at = self._active
        if at is None:
            return False
        self._cancel_timer()
        if self._snapshot is not None:
            self.catalog.restore(at.assessment_id, self._snapshot)
        log.info("attempt abandoned assessment=%s", at.assessment_id)
        self._discard()
        return True

    def result(self, assessment_id: str) -> AttemptResult:
        res = self._results.get(assessment_id)
        if res is None:
            raise NotFoundError(f"no result recorded for assessment {assessment_id}")
        return res

    def _on_tick(self) -> None:
        at = self._active
        if at is None or at.submitted:
            log.debug("stale attempt tick ignored")
            return
        at.time_remaining_seconds = max(0, at.time_remaining_seconds - 1)
        if at.time_remaining_seconds == 0:
            log.info("time expired for assessment=%s; auto-submitting", at.assessment_id)
            self.submit(reason="timeout")

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _discard(self) -> None:
        self._active = None
        self._assessment = None
        self._snapshot = None

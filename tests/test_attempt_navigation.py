from __future__ import annotations

import pytest

from learning_core import audit_export
from learning_core.errors import ConflictError, NotFoundError, ValidationError
from learning_core.types import Direction


def test_advance_is_clamped_at_both_ends(platform):
    platform.start_attempt("a2")
    assert platform.advance("previous") == 0, "previous at the first question is a no-op"

    for _ in range(10):
        platform.advance(Direction.NEXT)
    assert platform.active_attempt.current_question_index == 3
    assert platform.advance("next") == 3, "next at the last question is a no-op"

    assert platform.advance("previous") == 2


def test_advance_on_empty_assessment_stays_at_zero(platform):
    platform.start_attempt("empty")
    assert platform.advance("next") == 0
    assert platform.advance("previous") == 0
    assert platform.attempts.current_question() is None


def test_unknown_direction_rejected(platform):
    platform.start_attempt("a1")
    with pytest.raises(ValidationError):
        platform.advance("sideways")


def test_last_answer_wins(platform):
    platform.start_attempt("a1")
    platform.record_answer("a1_q0", 2)
    platform.record_answer("a1_q0", 1)

    attempt = platform.active_attempt
    assert attempt.answers == {"a1_q0": 1}
    assert attempt.current_question_index == 0, "answering must not move the cursor"


@pytest.mark.parametrize("bad", [-1, 4, 99, True])
def test_invalid_option_index_rejected(platform, bad):
    platform.start_attempt("a1")
    with pytest.raises(ValidationError):
        platform.record_answer("a1_q0", bad)
    assert platform.active_attempt.answers == {}


def test_question_from_another_assessment_rejected(platform):
    platform.start_attempt("a1")
    with pytest.raises(NotFoundError):
        platform.record_answer("a2_q0", 0)


def test_commands_without_attempt_raise_not_found(platform):
    with pytest.raises(NotFoundError):
        platform.record_answer("a1_q0", 1)
    with pytest.raises(NotFoundError):
        platform.advance("next")
    assert platform.submit_attempt() is None


def test_unknown_assessment_cannot_start(platform):
    with pytest.raises(NotFoundError):
        platform.start_attempt("nope")
    assert platform.active_attempt is None


def test_second_start_conflicts_and_keeps_original(platform):
    platform.start_attempt("a1")
    platform.record_answer("a1_q0", 1)
    platform.advance("next")

    with pytest.raises(ConflictError):
        platform.start_attempt("a2")

    attempt = platform.active_attempt
    assert attempt.assessment_id == "a1"
    assert attempt.answers == {"a1_q0": 1}
    assert attempt.current_question_index == 1
    assert platform.catalog.get("a2").status == "available"
    assert platform.catalog.get("a1").status == "in-progress"


def test_only_one_assessment_in_progress(platform):
    platform.start_attempt("a1")
    statuses = [a.status for a in platform.assessments]
    assert statuses.count("in-progress") == 1


def test_abandon_restores_previous_status(platform):
    platform.start_attempt("a1")
    platform.submit_attempt()
    assert platform.catalog.get("a1").score == 0

    platform.start_attempt("a1")
    retake = platform.catalog.get("a1")
    assert retake.status == "in-progress" and retake.score is None and retake.completed_at is None

    assert platform.abandon_attempt() is True
    restored = platform.catalog.get("a1")
    assert restored.status == "completed" and restored.score == 0
    assert platform.active_attempt is None
    assert platform.abandon_attempt() is False


def test_retake_replaces_score(platform):
    platform.start_attempt("a1")
    platform.submit_attempt()
    platform.start_attempt("a1")
    platform.record_answer("a1_q0", 1)
    platform.record_answer("a1_q1", 3)
    platform.submit_attempt()
    assert platform.catalog.get("a1").score == 100
    assert platform.attempt_result("a1").score == 100


def test_audit_events_recorded(platform):
    platform.start_attempt("a1")
    platform.record_answer("a1_q0", 2)
    platform.advance("next")
    platform.record_answer("a1_q1", 3)
    result = platform.submit_attempt()

    kinds = [evt["event"] for evt in result.audit_events]
    assert kinds == ["start", "answer", "advance", "answer", "submit"]
    assert result.audit_events[-1]["score"] == 50


def test_audit_export_flattens_events(platform):
    platform.start_attempt("a1")
    platform.record_answer("a1_q0", 2)
    platform.record_answer("a1_q0", 1)
    platform.advance("next")
    result = platform.submit_attempt()

    payload = audit_export.to_json(result)
    assert payload["assessment_id"] == "a1" and payload["reason"] == "manual"
    rows = payload["events"]
    assert [r["seq"] for r in rows] == [1, 2, 3, 4, 5]
    assert rows[0]["questions"] == 2 and rows[0]["question_id"] is None
    assert rows[2]["option_index"] == 1 and rows[2]["previous"] == 2
    assert rows[3]["direction"] == "next" and rows[3]["index_before"] == 0
    assert rows[4]["correct"] == 1 and rows[4]["total"] == 2 and rows[4]["score"] == 50

    lines = audit_export.to_csv(result).strip().splitlines()
    assert lines[0].split(",") == list(audit_export.COLUMNS)
    assert len(lines) == 6

from __future__ import annotations


def test_countdown_starts_from_time_limit(platform, scheduler):
    attempt = platform.start_attempt("a1")
    assert attempt.time_remaining_seconds == 10 * 60

    scheduler.advance(3)
    assert platform.active_attempt.time_remaining_seconds == 597


def test_expiry_auto_submits_recorded_answers(platform, scheduler):
    seen = []
    platform.subscribe(seen.append)
    platform.start_attempt("empty")  # 5 minutes
    scheduler.advance(299)
    assert platform.active_attempt is not None
    assert platform.active_attempt.time_remaining_seconds == 1

    scheduler.advance(1)
    assert platform.active_attempt is None
    result = platform.attempt_result("empty")
    assert result.reason == "timeout"
    assert platform.catalog.get("empty").status == "completed"
    assert [n.kind for n in seen] == ["attempt_submitted"]


def test_timeout_scores_partial_answers(platform, scheduler):
    platform.start_attempt("a1")
    platform.record_answer("a1_q0", 1)
    scheduler.advance(600)
    assert platform.catalog.get("a1").score == 50


def test_submit_racing_timer_is_idempotent(platform, scheduler):
    seen = []
    platform.subscribe(seen.append)
    platform.start_attempt("a1")
    platform.record_answer("a1_q0", 1)

    first = platform.submit_attempt()
    second = platform.submit_attempt()
    scheduler.advance(1200)

    assert first is not None and second is None
    assert platform.catalog.get("a1").score == 50
    assert len([n for n in seen if n.kind == "attempt_submitted"]) == 1
    assert scheduler.pending() == 0, "countdown must be cancelled once submitted"


def test_abandon_cancels_countdown(platform, scheduler):
    platform.start_attempt("a1")
    platform.abandon_attempt()
    assert scheduler.pending() == 0
    scheduler.advance(1200)
    assert platform.catalog.get("a1").status == "available"

from __future__ import annotations

from learning_core.smoke import run_smoke_session


def test_smoke_session_runs_end_to_end():
    summary = run_smoke_session(seed=11)

    assert summary["attempt_active"] is False
    assert summary["documents_total"] == 2
    assert summary["documents_by_status"]["completed"] == 2
    assert summary["best_score"] == 100
    # bundled catalog (2) plus one assessment generated from a document
    assert summary["assessments_total"] == 3

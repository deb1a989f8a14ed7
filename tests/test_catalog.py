from __future__ import annotations

import random
from datetime import datetime, timezone

import pytest

from learning_core.catalog import Catalog, load_catalog
from learning_core.config import DEFAULT_TIME_LIMIT_MINUTES, GENERATION_TOPICS
from learning_core.errors import ConflictError, ValidationError
from learning_core.types import Assessment, Question, UploadedDocument

from tests.conftest import build_assessment


def test_bundled_catalog_loads():
    catalog = load_catalog()
    ml = catalog.get("1")
    assert ml.title == "Machine Learning Fundamentals"
    assert [q.correct_answer for q in ml.questions] == [1, 3]
    assert ml.time_limit == 30 and ml.status == "available"

    stats = catalog.get("2")
    assert stats.status == "completed" and stats.score == 85
    assert stats.completed_at is not None and stats.questions == []


def test_generate_prepends_empty_assessment():
    catalog = Catalog([build_assessment()], rng=random.Random(0))
    a = catalog.generate("Graph Theory")

    assert catalog.assessments[0] is a
    assert a.title == "Graph Theory Assessment"
    assert a.description == "Auto-generated assessment covering key concepts in Graph Theory."
    assert a.questions == [] and a.status == "available"
    assert a.time_limit == DEFAULT_TIME_LIMIT_MINUTES and a.difficulty == "mixed"


def test_generate_without_topic_uses_fixed_list():
    catalog = Catalog(rng=random.Random(42))
    titles = [catalog.generate().title for _ in range(12)]
    assert all(t[: -len(" Assessment")] in GENERATION_TOPICS for t in titles)
    assert len({a.id for a in catalog.assessments}) == 12
    assert [a.title for a in catalog.assessments] == list(reversed(titles))


def test_generate_rejects_blank_topic():
    with pytest.raises(ValidationError):
        Catalog().generate("   ")


def test_generate_from_document_requires_completion():
    catalog = Catalog()
    doc = UploadedDocument(id="d1", name="linear_algebra-notes.pdf", size=10, type="application/pdf")
    with pytest.raises(ConflictError):
        catalog.generate_from_document(doc)

    doc.status = "completed"
    doc.questions_generated = 12
    a = catalog.generate_from_document(doc)
    assert a.title == "linear algebra notes Assessment"
    assert a.source_document_id == "d1" and a.planned_questions == 12


def test_platform_announces_generation(platform):
    a = platform.generate_assessment("Optimization")
    notes = platform.notifications("assessment_generated")
    assert len(notes) == 1
    assert notes[0].title == "New assessment generated!"
    assert notes[0].description == 'Created "Optimization Assessment" based on your uploaded documents.'
    assert notes[0].data == {"assessment_id": a.id, "assessment_title": "Optimization Assessment"}
    assert platform.assessments[0].id == a.id


def test_question_invariants():
    with pytest.raises(ValidationError):
        Question(id="q", question="?", options=["only"], correct_answer=0)
    with pytest.raises(ValidationError):
        Question(id="q", question="?", options=["a", "b"], correct_answer=2)
    with pytest.raises(ValidationError):
        Question(id="q", question="?", options=["a", "b"], correct_answer=0, difficulty="brutal")


def test_assessment_score_present_iff_completed():
    with pytest.raises(ValidationError):
        Assessment(id="x", title="x", status="completed")
    with pytest.raises(ValidationError):
        Assessment(id="x", title="x", score=50)
    with pytest.raises(ValidationError):
        Assessment(id="x", title="x", time_limit=0)
    ok = Assessment(
        id="x", title="x", status="completed", score=70, completed_at=datetime.now(timezone.utc)
    )
    assert ok.to_dict()["score"] == 70


def test_document_question_count_present_iff_completed():
    base = dict(id="d", name="n.pdf", size=1, type="application/pdf")
    with pytest.raises(ValidationError):
        UploadedDocument(**base, status="completed", progress=100.0)
    with pytest.raises(ValidationError):
        UploadedDocument(**base, status="processing", progress=100.0, questions_generated=7)
    with pytest.raises(ValidationError):
        UploadedDocument(**base, status="completed", progress=100.0, questions_generated=-1)
    done = UploadedDocument(**base, status="completed", progress=100.0, questions_generated=7)
    assert done.to_dict()["questionsGenerated"] == 7


def test_catalog_rejects_two_in_progress():
    with pytest.raises(ConflictError):
        Catalog(
            [
                build_assessment(assessment_id="a", status="in-progress"),
                build_assessment(assessment_id="b", status="in-progress"),
            ]
        )


def test_wire_shape_hides_answers_by_default():
    a = build_assessment()
    public = a.to_dict()
    assert "correctAnswer" not in public["questions"][0]
    assert public["timeLimit"] == 10 and public["questionCount"] == 2
    full = a.to_dict(include_answers=True)
    assert full["questions"][1]["correctAnswer"] == 3

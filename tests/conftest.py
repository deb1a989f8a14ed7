from __future__ import annotations

import random

import pytest

from learning_core.catalog import Catalog
from learning_core.scheduler import ManualScheduler
from learning_core.store import LearningPlatform
from learning_core.types import Assessment, FileMetadata, Question


def build_assessment(
    *,
    assessment_id: str = "a1",
    correct: list[int] | None = None,
    options: int = 4,
    time_limit: int = 10,
    status: str = "available",
) -> Assessment:
    """Create a deterministic assessment whose question i has correct answer ``correct[i]``."""

    keys = [1, 3] if correct is None else correct
    questions = [
        Question(
            id=f"{assessment_id}_q{idx}",
            question=f"Question {idx}?",
            options=[f"opt {n}" for n in range(options)],
            correct_answer=key,
            explanation=f"Because {key}.",
            difficulty="easy" if idx % 2 == 0 else "medium",
            topic="Testing",
        )
        for idx, key in enumerate(keys)
    ]
    return Assessment(
        id=assessment_id,
        title=f"Assessment {assessment_id}",
        description="synthetic",
        questions=questions,
        time_limit=time_limit,
        difficulty="mixed",
        status=status,  # type: ignore[arg-type]
    )


def pdf(name: str = "notes.pdf", size: int = 2048) -> FileMetadata:
    return FileMetadata(name=name, size=size, type="application/pdf")


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def platform(scheduler) -> LearningPlatform:
    catalog = Catalog(
        [
            build_assessment(assessment_id="a1", correct=[1, 3]),
            build_assessment(assessment_id="a2", correct=[0, 2, 1, 3]),
            build_assessment(assessment_id="empty", correct=[], time_limit=5),
        ],
        rng=random.Random(7),
    )
    return LearningPlatform(scheduler=scheduler, catalog=catalog, rng=random.Random(7))

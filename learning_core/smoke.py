from __future__ import annotations

import json
import logging
import random

from .config import DEBUG_SEED
from .scheduler import ManualScheduler
from .store import LearningPlatform
from .types import FileMetadata, Notification


def _configure_logging() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


def _log_notification(note: Notification) -> None:
    logging.info("notify %s: %s", note.kind, note.description)


def run_smoke_session(seed: int | None = None) -> dict:
    """Drive uploads and one full attempt on a virtual clock; returns the summary."""

    _configure_logging()
    seed = DEBUG_SEED if seed is None else seed
    scheduler = ManualScheduler()
    platform = LearningPlatform(scheduler=scheduler, rng=random.Random(seed))
    platform.subscribe(_log_notification)
    logging.info("Starting smoke run with DEBUG_SEED=%s", seed)

    accepted, rejected = platform.submit_documents(
        [
            FileMetadata("lecture-notes.pdf", 254_000, "application/pdf"),
            FileMetadata("summary.txt", 4_200, "text/plain"),
            FileMetadata("diagram.png", 88_000, "image/png"),
        ]
    )
    logging.info("Accepted %d document(s), rejected %d", len(accepted), len(rejected))
    scheduler.run_until_idle()

    doc = platform.documents[0]
    generated = platform.generate_from_document(doc.id)
    logging.info("Generated %r (%s planned questions)", generated.title, generated.planned_questions)

    target = next(a for a in platform.assessments if a.questions)
    platform.start_attempt(target.id)
    for question in target.questions:
        platform.record_answer(question.id, question.correct_answer)
        platform.advance("next")
    scheduler.advance(5)
    result = platform.submit_attempt()
    if result is not None:
        logging.info("Attempt score %d%% (%d/%d)", result.score, result.correct_count, result.total_questions)

    summary = platform.progress_summary()
    logging.info("Summary %s", json.dumps(summary, sort_keys=True))
    return summary


if __name__ == "__main__":
    run_smoke_session()

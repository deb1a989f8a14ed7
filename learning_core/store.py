"""Process-scoped store that owns all learning-platform state.

The presentation layer (HTTP API, terminal front ends) talks only to this
facade: read the catalog, the active attempt and the documents, issue the
commands, and subscribe to notifications.
"""
from __future__ import annotations

import random
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from .attempt import AttemptEngine
from .catalog import Catalog, load_catalog
from .config import make_rng
from .ingestion import IngestionPipeline
from .notifications import Notifier
from .reporting import progress_summary
from .scheduler import ManualScheduler, Scheduler
from .types import (
    Assessment,
    Attempt,
    AttemptResult,
    Direction,
    FileMetadata,
    Notification,
    UploadedDocument,
)


class LearningPlatform:
    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        catalog: Optional[Catalog] = None,
        rng: Optional[random.Random] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.rng = rng or make_rng()
        self.scheduler = scheduler if scheduler is not None else ManualScheduler()
        self.notifier = notifier or Notifier()
        self.catalog = catalog if catalog is not None else load_catalog(rng=self.rng)
        self.attempts = AttemptEngine(self.catalog, self.scheduler, self.notifier)
        self.ingestion = IngestionPipeline(self.scheduler, self.notifier, rng=self.rng)

    # ---- reads ----
    @property
    def assessments(self) -> List[Assessment]:
        return self.catalog.assessments

    @property
    def active_attempt(self) -> Optional[Attempt]:
        return self.attempts.active

    @property
    def documents(self) -> List[UploadedDocument]:
        return self.ingestion.documents

    def notifications(self, kind: Optional[str] = None) -> List[Notification]:
        return self.notifier.recent(kind)

    def subscribe(self, callback: Callable[[Notification], None]) -> Callable[[], None]:
        return self.notifier.subscribe(callback)

    def attempt_result(self, assessment_id: str) -> AttemptResult:
        return self.attempts.result(assessment_id)

    def progress_summary(self) -> Dict[str, object]:
        return progress_summary(self.catalog.assessments, self.ingestion.documents, self.attempts.active)

    # ---- attempt commands ----
    def start_attempt(self, assessment_id: str) -> Attempt:
        return self.attempts.start(assessment_id)

    def record_answer(self, question_id: str, option_index: int) -> Attempt:
        return self.attempts.record_answer(question_id, option_index)

    def advance(self, direction: Union[Direction, str]) -> int:
        return self.attempts.advance(direction)

    def submit_attempt(self) -> Optional[AttemptResult]:
        return self.attempts.submit()

    def abandon_attempt(self) -> bool:
        return self.attempts.abandon()

    # ---- catalog commands ----
    def generate_assessment(self, topic: Optional[str] = None) -> Assessment:
        a = self.catalog.generate(topic)
        self._announce(a)
        return a

    def generate_from_document(self, doc_id: str) -> Assessment:
        a = self.catalog.generate_from_document(self.ingestion.get(doc_id))
        self._announce(a)
        return a

    def _announce(self, a: Assessment) -> None:
        self.notifier.emit(
            "assessment_generated",
            "New assessment generated!",
            f'Created "{a.title}" based on your uploaded documents.',
            assessment_id=a.id,
            assessment_title=a.title,
        )

    # ---- document commands ----
    def submit_document(self, file: FileMetadata) -> UploadedDocument:
        return self.ingestion.submit(file)

    def submit_documents(self, files: Iterable[FileMetadata]) -> Tuple[List[UploadedDocument], List[str]]:
        return self.ingestion.submit_many(files)

    def remove_document(self, doc_id: str) -> UploadedDocument:
        return self.ingestion.remove(doc_id)

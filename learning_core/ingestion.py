"""Simulated document ingestion: uploading -> processing -> completed.

Every document runs on its own timers keyed by id; removing a document
cancels them, and any callback that still arrives for an unknown id is
dropped.
"""
from __future__ import annotations

import logging
import random
import uuid
from typing import Dict, Iterable, List, Optional, Tuple

from .config import (
    ALLOWED_MIME_TYPES,
    PROCESSING_DELAY_SECONDS,
    PROGRESS_STEP_MAX,
    QUESTIONS_GENERATED_MAX,
    QUESTIONS_GENERATED_MIN,
    UPLOAD_TICK_SECONDS,
    make_rng,
)
from .errors import NotFoundError, ValidationError
from .notifications import Notifier
from .scheduler import Scheduler, TimerHandle
from .types import FileMetadata, UploadedDocument


log = logging.getLogger(__name__)


def unsupported_reason(name: str) -> str:
    return f"{name} is not supported. Please upload PDF, TXT, or DOC files."


class IngestionPipeline:
    def __init__(
        self,
        scheduler: Scheduler,
        notifier: Optional[Notifier] = None,
        *,
        rng: Optional[random.Random] = None,
        tick_seconds: float = UPLOAD_TICK_SECONDS,
        processing_delay: float = PROCESSING_DELAY_SECONDS,
        allowed_types: Iterable[str] = ALLOWED_MIME_TYPES,
    ):
        self.scheduler = scheduler
        self.notifier = notifier or Notifier()
        self.rng = rng or make_rng()
        self.tick_seconds = tick_seconds
        self.processing_delay = processing_delay
        self.allowed_types = frozenset(allowed_types)
        self._docs: Dict[str, UploadedDocument] = {}
        self._timers: Dict[str, List[TimerHandle]] = {}

    @property
    def documents(self) -> List[UploadedDocument]:
        return list(self._docs.values())

    def get(self, doc_id: str) -> UploadedDocument:
        doc = self._docs.get(doc_id)
        if doc is None:
            raise NotFoundError(f"document {doc_id} not found")
        return doc

    def _reject(self, name: str, reason: str, title: str = "Invalid file") -> ValidationError:
        log.warning("upload rejected name=%r: %s", name, reason)
        self.notifier.emit(
            "validation_rejected",
            title,
            reason,
            variant="destructive",
            name=name,
            reason=reason,
        )
        return ValidationError(reason)

    def submit(self, file: FileMetadata) -> UploadedDocument:
        if not isinstance(file.name, str):
            raise self._reject(repr(file.name), "file name must be a string")
        name = file.name.strip()
        if not name:
            raise self._reject(file.name, "file name must be non-empty")
        if isinstance(file.size, bool) or not isinstance(file.size, int) or file.size < 0:
            raise self._reject(name, f"{name} has an invalid size")
        if not isinstance(file.type, str) or file.type not in self.allowed_types:
            raise self._reject(name, unsupported_reason(name), "Unsupported file type")

        doc = UploadedDocument(
            id=uuid.uuid4().hex,
            name=name,
            size=file.size,
            type=file.type,
            status="uploading",
            progress=0.0,
        )
        self._docs[doc.id] = doc
        self._track(doc.id, self.scheduler.call_every(self.tick_seconds, self._on_progress_tick, doc.id))
        log.info("document accepted id=%s name=%r size=%d", doc.id, doc.name, doc.size)
        return doc

    def submit_many(self, files: Iterable[FileMetadata]) -> Tuple[List[UploadedDocument], List[str]]:
        """Submit each file independently; returns (accepted, rejection reasons)."""

        accepted: List[UploadedDocument] = []
        rejected: List[str] = []
        for f in files:
            try:
                accepted.append(self.submit(f))
            except ValidationError as exc:
                rejected.append(exc.message)
        return accepted, rejected

    def remove(self, doc_id: str) -> UploadedDocument:
        doc = self._docs.pop(doc_id, None)
        if doc is None:
            raise NotFoundError(f"document {doc_id} not found")
        for handle in self._timers.pop(doc_id, []):
            handle.cancel()
        log.info("document removed id=%s status=%s", doc_id, doc.status)
        return doc

    def _track(self, doc_id: str, handle: TimerHandle) -> None:
        self._timers.setdefault(doc_id, []).append(handle)

    def _step(self) -> float:
        # uniform over (0, PROGRESS_STEP_MAX]
        return PROGRESS_STEP_MAX - self.rng.random() * PROGRESS_STEP_MAX

    def _on_progress_tick(self, doc_id: str) -> None:
        doc = self._docs.get(doc_id)
        if doc is None or doc.status != "uploading":
            log.debug("stale progress tick ignored id=%s", doc_id)
            return
        progress = doc.progress + self._step()
        if progress < 100.0:
            doc.progress = progress
            log.debug("upload progress id=%s %.1f%%", doc_id, progress)
            return

        doc.progress = 100.0
        doc.status = "processing"
        for handle in self._timers.pop(doc_id, []):
            handle.cancel()
        self._track(doc_id, self.scheduler.call_later(self.processing_delay, self._on_processed, doc_id))
        log.info("document uploaded id=%s; processing", doc_id)

    def _on_processed(self, doc_id: str) -> None:
        doc = self._docs.get(doc_id)
        if doc is None or doc.status != "processing":
            log.debug("stale processing callback ignored id=%s", doc_id)
            return
        count = self.rng.randrange(QUESTIONS_GENERATED_MIN, QUESTIONS_GENERATED_MAX)
        doc.status = "completed"
        doc.questions_generated = count
        self._timers.pop(doc_id, None)
        log.info("document completed id=%s questions=%d", doc_id, count)
        self.notifier.emit(
            "document_completed",
            "Document processed successfully",
            f"Generated {count} questions from the document.",
            document_id=doc_id,
            name=doc.name,
            questions_generated=count,
        )

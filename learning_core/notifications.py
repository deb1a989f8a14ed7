from __future__ import annotations

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Callable, Deque, List, Optional

from .config import NOTIFICATION_BUFFER
from .types import Notification


log = logging.getLogger(__name__)

Subscriber = Callable[[Notification], None]


class Notifier:
    """Fan-out hook for toast-style messages, with a small replay buffer."""

    def __init__(self, buffer_size: Optional[int] = None):
        self._subscribers: List[Subscriber] = []
        self._recent: Deque[Notification] = deque(maxlen=max(1, buffer_size or NOTIFICATION_BUFFER))

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def emit(
        self,
        kind: str,
        title: str,
        description: str,
        *,
        variant: str = "default",
        **data: object,
    ) -> Notification:
        note = Notification(
            kind=kind,  # type: ignore[arg-type]
            title=title,
            description=description,
            variant=variant,  # type: ignore[arg-type]
            data=dict(data),
            created_at=datetime.now(timezone.utc),
        )
        self._recent.append(note)
        for callback in list(self._subscribers):
            # a broken listener must not abort the state change that triggered it
            try:
                callback(note)
            except Exception:
                log.warning("notification subscriber %r failed on %s", callback, kind, exc_info=True)
        return note

    def recent(self, kind: Optional[str] = None) -> List[Notification]:
        if kind is None:
            return list(self._recent)
        return [n for n in self._recent if n.kind == kind]

    def clear(self) -> None:
        self._recent.clear()

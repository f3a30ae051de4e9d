"""Module: events.

A small publish/subscribe feed that tells views their data went stale. It is
a cache-invalidation hint only: delivery order and exactly-once delivery are
not guaranteed across concurrent writers.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeEvent:
    kind: str
    patient_id: uuid.UUID | None = None


Subscriber = Callable[[ChangeEvent], None]


class ChangeFeed:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: list[Subscriber] = []
        self._revision = 0
        self._patient_revisions: dict[uuid.UUID, int] = defaultdict(int)

    @property
    def revision(self) -> int:
        return self._revision

    def revision_for(self, patient_id: uuid.UUID | None) -> int:
        if patient_id is None:
            return 0
        with self._lock:
            return self._patient_revisions.get(patient_id, 0)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            self._revision += 1
            if event.patient_id is not None:
                self._patient_revisions[event.patient_id] = self._revision
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                # A broken listener must not undo a write that already committed.
                logger.exception("Change subscriber failed for %s", event.kind)


# Process-wide feed used by the API; tests build their own.
change_feed = ChangeFeed()

"""
Repository: in-memory storage for `Event` records.

This file contains only storage code. Keep business rules (timestamp
checks, merge semantics, media cleanup) out of this module; they live in
`service_events.py`.

Important notes:
- Records are kept in creation order in a plain list. Nothing survives a
  process restart.
- FastAPI runs sync routes in a thread pool, so every operation takes a
  re-entrant lock. Callers that need a read-modify-write sequence to be a
  single step wrap it in `with repo.transaction():`.
"""

import threading
from contextlib import contextmanager
from typing import Iterator, List
from uuid import UUID

from errors import NotFoundError
from models import Event


class EventRepo:
    """In-memory event store. No business logic here.

    Responsibilities:
    - Hold the collection of `Event` records, in insertion order
    - Find / replace / remove records by id, raising `NotFoundError`
    - Serialize access through one lock
    """

    def __init__(self):
        self._events: List[Event] = []
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator["EventRepo"]:
        """Hold the store lock for the duration of the block."""

        with self._lock:
            yield self

    def insert(self, event: Event) -> Event:
        with self._lock:
            self._events.append(event)
            return event

    def find_by_id(self, event_id: UUID) -> Event:
        with self._lock:
            return self._events[self._index(event_id)]

    def list(self) -> List[Event]:
        """Return a snapshot of all records in insertion order."""

        with self._lock:
            return list(self._events)

    def replace(self, event_id: UUID, merged: Event) -> Event:
        """Swap the record for `event_id` with `merged`, keeping its position."""

        with self._lock:
            self._events[self._index(event_id)] = merged
            return merged

    def remove(self, event_id: UUID) -> Event:
        """Delete the record and return it so callers can release its media."""

        with self._lock:
            return self._events.pop(self._index(event_id))

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def count(self) -> int:
        with self._lock:
            return len(self._events)

    def _index(self, event_id: UUID) -> int:
        for i, e in enumerate(self._events):
            if e.id == event_id:
                return i
        raise NotFoundError(event_id)

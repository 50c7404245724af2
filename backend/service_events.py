"""
Service / facade layer.

This module implements business rules before any store interaction. It
calls `EventRepo` for storage, `query_events.query` for listing and
`MediaTracker` for media cleanup. All write paths go through this service
so the same checks apply everywhere.

Key responsibilities:
- enforce timestamp rules (start strictly before end, on create and on the
  merged result of an update)
- stamp server-owned fields (`id`, `created_at`, `updated_at`)
- apply partial updates atomically with respect to other requests
- trigger best-effort media cleanup after successful updates/deletes
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from errors import ValidationError
from media_tracker import MediaTracker
from models import Event, EventIn, EventPatch, EventsQuery
from query_events import query
from repo_events import EventRepo

logger = logging.getLogger(__name__)


def _check_window(start: datetime, end: datetime) -> None:
    if start >= end:
        raise ValidationError("Start time must be before end time")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class EventService:
    """Business rules + validation + orchestration.

    Example usage:
        repo = EventRepo()
        svc = EventService(repo, MediaTracker(UploadHandler(settings)))
        svc.create(EventIn(title="Standup", startTime=..., endTime=...))
    """

    def __init__(self, repo: EventRepo, tracker: MediaTracker, clock=_now):
        self.repo = repo
        self.tracker = tracker
        self.clock = clock

    def create(self, data: EventIn) -> Event:
        """Validate and store a new event.

        Raises:
        - `ValidationError` if `start_time` is not before `end_time`
        """

        _check_window(data.start_time, data.end_time)
        now = self.clock()
        event = Event(
            id=uuid.uuid4(),
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        self.repo.insert(event)
        logger.info("Created event %s", event.id)
        return event

    def list(self, params: Optional[EventsQuery] = None) -> List[Event]:
        return query(self.repo.list(), params)

    def get(self, event_id: uuid.UUID) -> Event:
        return self.repo.find_by_id(event_id)

    def update(self, event_id: uuid.UUID, patch: EventPatch) -> Event:
        """Merge the supplied fields into an existing event.

        Steps:
        1. Under the store lock, load the current record and merge.
        2. Reject the merge if start is not before end. Nothing changes.
        3. Refresh `updated_at` (always strictly later than before) and
           replace the record.
        4. Outside the lock, release media the update detached.

        Raises `NotFoundError` or `ValidationError`.
        """

        changes = patch.changes()
        with self.repo.transaction():
            before = self.repo.find_by_id(event_id)
            merged = before.model_copy(update=changes)
            _check_window(merged.start_time, merged.end_time)
            merged.updated_at = max(self.clock(), before.updated_at + timedelta(microseconds=1))
            self.repo.replace(event_id, merged)

        logger.info("Updated event %s (%s)", event_id, ", ".join(sorted(changes)) or "no fields")
        self.tracker.on_update(before, changes)
        return merged

    def delete(self, event_id: uuid.UUID) -> Event:
        removed = self.repo.remove(event_id)
        logger.info("Deleted event %s", event_id)
        self.tracker.on_delete(removed)
        return removed

    def count(self) -> int:
        return self.repo.count()

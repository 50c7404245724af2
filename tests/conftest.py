"""Shared fixtures for the backend tests."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from main import create_app
from media_tracker import MediaTracker
from models import Event
from repo_events import EventRepo
from service_events import EventService
from settings import Settings
from uploads import UploadHandler

T0 = datetime(2025, 4, 10, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def cfg(tmp_path):
    """Settings pointing at a throwaway uploads directory."""
    return Settings(
        uploads_dir=str(tmp_path / "uploads"),
        public_base_url="http://testserver",
        cors_origin="http://localhost:3001",
    )


@pytest.fixture
def client(cfg):
    """TestClient with the lifespan running (uploads dir is reset)."""
    with TestClient(create_app(cfg)) as c:
        yield c


@pytest.fixture
def uploads(cfg):
    handler = UploadHandler(cfg)
    handler.reset()
    return handler


@pytest.fixture
def svc(uploads):
    return EventService(EventRepo(), MediaTracker(uploads))


@pytest.fixture
def make_event():
    """Factory for stored `Event` records."""

    def _make(title="Team Meeting", start=T0, hours=1, description=None,
              image_url=None, video_url=None, created=None):
        created = created or T0 - timedelta(days=1)
        return Event(
            id=uuid.uuid4(),
            title=title,
            description=description,
            start_time=start,
            end_time=start + timedelta(hours=hours),
            image_url=image_url,
            video_url=video_url,
            created_at=created,
            updated_at=created,
        )

    return _make


class FakeHandle:
    def __init__(self, when, callback, args):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.done = False

    def cancel(self):
        self.cancelled = True


class FakeLoop:
    """Manually advanced stand-in for `loop.call_later`."""

    def __init__(self):
        self.time = 0.0
        self.handles = []

    def call_later(self, delay, callback, *args):
        handle = FakeHandle(self.time + delay, callback, args)
        self.handles.append(handle)
        return handle

    def now(self):
        return T0 + timedelta(seconds=self.time)

    def advance(self, seconds):
        target = self.time + seconds
        while True:
            due = [h for h in self.handles if not h.cancelled and not h.done and h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self.time = handle.when
            handle.done = True
            handle.callback(*handle.args)
        self.time = target

"""
Media cleanup for event updates and deletions.

The tracker decides which previously attached files are no longer
referenced and asks the `UploadHandler` to remove them. It only acts on
references the handler resolves as locally owned; anything else (for
example a video hosted on a streaming site) is left alone.

Deletion is best-effort: I/O errors are logged and swallowed. By the time
the tracker runs the event mutation has already been committed.
"""

import logging
from typing import List, Optional

from models import Event
from uploads import LocalMedia, UploadHandler

logger = logging.getLogger(__name__)

MEDIA_FIELDS = ("image_url", "video_url")


class MediaTracker:
    def __init__(self, uploads: UploadHandler):
        self.uploads = uploads

    def on_update(self, before: Event, changes: dict) -> List[LocalMedia]:
        """Release media replaced or cleared by `changes`."""

        released = []
        for field in MEDIA_FIELDS:
            if field not in changes:
                continue
            old = getattr(before, field)
            if old == changes[field]:
                continue
            media = self._release(old)
            if media is not None:
                released.append(media)
        return released

    def on_delete(self, removed: Event) -> List[LocalMedia]:
        """Release every local file the removed event referenced."""

        released = []
        for field in MEDIA_FIELDS:
            media = self._release(getattr(removed, field))
            if media is not None:
                released.append(media)
        return released

    def _release(self, reference: Optional[str]) -> Optional[LocalMedia]:
        media = self.uploads.resolve(reference)
        if media is None:
            return None
        try:
            if self.uploads.delete(media):
                logger.info("Deleted media %s", media.filename)
            else:
                logger.info("Media %s already gone", media.filename)
        except OSError as e:
            logger.warning("Failed to delete media %s: %s", media.filename, e)
        return media

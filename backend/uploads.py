"""
Upload handler: validation and disk storage for event media.

Rules:
- images: JPEG, PNG, GIF, WebP up to `settings.max_image_bytes` (5 MB)
- videos: MP4, WebM, OGG up to `settings.max_video_bytes` (20 MB)

The MIME type is checked before any byte is read and the size limit is
enforced while reading, so a rejected upload never reaches the disk.

Every stored file is registered under the URL handed back to the client.
`resolve()` turns such a URL back into a `LocalMedia` handle; URLs that were
not issued here (external video links, stale references) resolve to None
and are never deleted.
"""

import logging
import os
import shutil
import threading
import uuid
from dataclasses import dataclass
from typing import BinaryIO, Dict, Optional

from errors import PayloadTooLarge, UnsupportedMediaType, ValidationError
from models import UploadedFile
from settings import Settings

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

IMAGE_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
VIDEO_TYPES = ("video/mp4", "video/webm", "video/ogg")


@dataclass(frozen=True)
class MediaKind:
    name: str
    mimetypes: tuple
    max_bytes: int
    label: str


@dataclass(frozen=True)
class LocalMedia:
    """A file stored by this handler, addressed by its public URL."""

    filename: str
    url: str
    path: str


class UploadHandler:
    """Owns the uploads directory and the registry of issued references."""

    def __init__(self, cfg: Settings):
        self.root = os.path.abspath(cfg.uploads_dir)
        self.base_url = cfg.public_base_url.rstrip("/")
        self.kinds = {
            "image": MediaKind("image", IMAGE_TYPES, cfg.max_image_bytes, "JPEG, PNG, GIF, and WebP"),
            "video": MediaKind("video", VIDEO_TYPES, cfg.max_video_bytes, "MP4, WebM, and OGG"),
        }
        self._owned: Dict[str, LocalMedia] = {}
        self._lock = threading.Lock()

    def reset(self) -> None:
        """Start from an empty uploads directory (called at boot)."""

        if os.path.isdir(self.root):
            shutil.rmtree(self.root)
            logger.info("Cleaned uploads directory %s", self.root)
        else:
            logger.info("Created uploads directory %s", self.root)
        os.makedirs(self.root, exist_ok=True)
        with self._lock:
            self._owned.clear()

    def file_url(self, filename: str) -> str:
        return f"{self.base_url}/uploads/{filename}"

    def check_type(self, kind: str, mimetype: Optional[str]) -> MediaKind:
        rule = self.kinds[kind]
        if mimetype not in rule.mimetypes:
            raise UnsupportedMediaType(
                f"Invalid file type. Only {rule.label} are allowed."
            )
        return rule

    def save(
        self,
        kind: str,
        stream: BinaryIO,
        mimetype: Optional[str],
        original_name: Optional[str],
        declared_size: Optional[int] = None,
    ) -> UploadedFile:
        """Validate and persist one upload, returning its public reference.

        Raises `UnsupportedMediaType` / `PayloadTooLarge` before writing
        anything to disk.
        """

        if stream is None:
            raise ValidationError("No file uploaded")
        rule = self.check_type(kind, mimetype)
        too_large = PayloadTooLarge(
            f"File too large. Maximum size for {kind}s is {rule.max_bytes // (1024 * 1024)}MB."
        )
        if declared_size is not None and declared_size > rule.max_bytes:
            logger.info("Rejected %s upload of %d bytes", kind, declared_size)
            raise too_large

        chunks = []
        size = 0
        while True:
            chunk = stream.read(CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > rule.max_bytes:
                logger.info("Rejected %s upload exceeding %d bytes", kind, rule.max_bytes)
                raise too_large
            chunks.append(chunk)

        _, ext = os.path.splitext(original_name or "")
        filename = f"{uuid.uuid4()}{ext}"
        path = os.path.join(self.root, filename)
        os.makedirs(self.root, exist_ok=True)
        with open(path, "wb") as fh:
            for chunk in chunks:
                fh.write(chunk)

        url = self.file_url(filename)
        with self._lock:
            self._owned[url] = LocalMedia(filename=filename, url=url, path=path)
        logger.info("Stored %s %s (%s, %d bytes)", kind, filename, mimetype, size)
        return UploadedFile(filename=filename, url=url, mimetype=mimetype, size=size)

    def resolve(self, reference: Optional[str]) -> Optional[LocalMedia]:
        """Return the handle for a URL this handler issued, else None."""

        if not reference:
            return None
        with self._lock:
            return self._owned.get(reference)

    def delete(self, media: LocalMedia) -> bool:
        """Remove a stored file. Missing files return False.

        Other `OSError`s propagate; callers decide whether they matter.
        """

        with self._lock:
            self._owned.pop(media.url, None)
        try:
            os.remove(media.path)
        except FileNotFoundError:
            return False
        return True

    def path_for(self, filename: str) -> Optional[str]:
        """Path of an existing stored file, or None."""

        if not filename or os.path.basename(filename) != filename or filename in (".", ".."):
            return None
        path = os.path.join(self.root, filename)
        return path if os.path.isfile(path) else None

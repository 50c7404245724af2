"""
Centralized runtime configuration for the backend and the client tools.

This module uses `python-dotenv` to read a local `.env` file during
development and exposes a Pydantic `Settings` model named `settings`.

Environment variables used:
- `UPLOADS_DIR` — directory holding uploaded media. Wiped at startup.
- `PUBLIC_BASE_URL` — origin used to build the URLs of uploaded files.
- `CORS_ORIGIN` — the single frontend origin allowed to call the API.
- `MAX_IMAGE_BYTES` / `MAX_VIDEO_BYTES` — upload size limits.
- `LOG_LEVEL` — root log level for the API server and the watcher.
- `API_URL` — backend base URL used by `api_client.CalendarClient`.
- `NOTIFY_FOLLOW_UP_SECONDS` / `NOTIFY_SNOOZE_SECONDS` — notification timing.
- `HOST` / `PORT` — bind address when running `main.py` directly.

Example `.env`:
UPLOADS_DIR=./uploads
PUBLIC_BASE_URL=http://localhost:3000
CORS_ORIGIN=http://localhost:3001
"""

from pydantic import BaseModel
import os
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseModel):
    """Typed settings container.

    All downstream code should import `settings` from this module. Use
    these attributes (not os.getenv) so tests can build their own
    `Settings(...)` and hand it to `main.create_app()`.
    """

    uploads_dir: str = os.getenv("UPLOADS_DIR", "./uploads")
    public_base_url: str = os.getenv("PUBLIC_BASE_URL", "http://localhost:3000")
    cors_origin: str = os.getenv("CORS_ORIGIN", "http://localhost:3001")
    max_image_bytes: int = int(os.getenv("MAX_IMAGE_BYTES", str(5 * 1024 * 1024)))
    max_video_bytes: int = int(os.getenv("MAX_VIDEO_BYTES", str(20 * 1024 * 1024)))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    api_url: str = os.getenv("API_URL", "http://localhost:3000")
    notify_follow_up_seconds: float = float(os.getenv("NOTIFY_FOLLOW_UP_SECONDS", "10"))
    notify_snooze_seconds: float = float(os.getenv("NOTIFY_SNOOZE_SECONDS", "300"))
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3000"))


settings = Settings()

"""Client for the Calendrix REST API."""
from __future__ import annotations

import logging
from typing import Any, BinaryIO, Optional

import requests

from settings import settings

logger = logging.getLogger(__name__)

QUERY_PARAMS = ("search", "startDate", "endDate", "sortBy", "sortOrder")


class ApiError(Exception):
    """A request failed; `message` is what the server said, if anything."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return f"HTTP error! status: {response.status_code}"


class CalendarClient:
    """Thin wrapper over the events and uploads endpoints.

    Every call clears `error` first; a failure stores its message there,
    replacing any previous one, and raises `ApiError` (except `get_events`,
    which returns an empty list so a calendar view can still render).
    """

    def __init__(self, base_url: str | None = None, timeout: float = 30, session: requests.Session | None = None):
        self.base_url = (base_url or settings.api_url).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.error: str | None = None

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self.base_url}{path}"
        self.error = None
        logger.debug("%s %s", method.upper(), url)
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            self.error = str(e)
            logger.error("%s %s failed: %s", method.upper(), url, e)
            raise ApiError(str(e)) from e
        if not response.ok:
            message = _error_message(response)
            self.error = message
            logger.error("%s %s -> %s: %s", method.upper(), url, response.status_code, message)
            raise ApiError(message, response.status_code)
        return response

    def get_events(self, **params: Any) -> list[dict[str, Any]]:
        """Fetch events, optionally filtered (`search`, `startDate`, ...)."""
        query = {k: params[k] for k in QUERY_PARAMS if params.get(k)}
        try:
            return self._request("get", "/events", params=query).json()
        except ApiError:
            return []

    def get_event(self, event_id: str) -> dict[str, Any]:
        return self._request("get", f"/events/{event_id}").json()

    def create_event(self, event: dict[str, Any]) -> dict[str, Any]:
        return self._request("post", "/events", json=event).json()

    def update_event(self, event_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        return self._request("patch", f"/events/{event_id}", json=changes).json()

    def delete_event(self, event_id: str) -> None:
        self._request("delete", f"/events/{event_id}")

    def upload_image(self, fh: BinaryIO, filename: str, mimetype: str) -> dict[str, Any]:
        return self._upload("image", fh, filename, mimetype)

    def upload_video(self, fh: BinaryIO, filename: str, mimetype: str) -> dict[str, Any]:
        return self._upload("video", fh, filename, mimetype)

    def _upload(self, kind: str, fh: BinaryIO, filename: str, mimetype: str) -> dict[str, Any]:
        files = {"file": (filename, fh, mimetype)}
        return self._request("post", f"/uploads/{kind}", files=files).json()

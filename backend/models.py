"""
Pydantic models used across the backend.

Input shapes (`EventIn`, `EventPatch`, `EventsQuery`) provide validation at
the FastAPI route boundary and are reused in the service layer. `Event` is
the stored record: it adds the server-assigned fields (`id`, `created_at`,
`updated_at`) rather than re-using `EventIn`.

Guidelines:
- Python attributes are snake_case; the JSON wire format is camelCase
    (`startTime`, `imageURL`, ...) through field aliases. Both spellings are
    accepted on input.
- Timestamps are normalized to UTC. Naive values are taken as UTC.
"""

from datetime import datetime, timezone
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


SortField = Literal["title", "startTime", "endTime", "createdAt"]
SortOrder = Literal["asc", "desc"]


def to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class EventIn(BaseModel):
        """Input shape for creating an event.

        Fields:
        - `title`: at least 3 characters.
        - `description`: optional free text.
        - `start_time` / `end_time`: ISO-8601 timestamps. The service checks
          that start is strictly before end.
        - `image_url` / `video_url`: optional media references, usually the
          `url` returned by `/uploads/image` or `/uploads/video`, or an
          external link for videos.
        """

        model_config = ConfigDict(populate_by_name=True, extra="forbid")

        title: str = Field(min_length=3)
        description: Optional[str] = None
        start_time: datetime = Field(alias="startTime")
        end_time: datetime = Field(alias="endTime")
        image_url: Optional[str] = Field(default=None, alias="imageURL")
        video_url: Optional[str] = Field(default=None, alias="videoURL")

        @field_validator("start_time", "end_time")
        @classmethod
        def _normalize_ts(cls, v: datetime) -> datetime:
                return to_utc(v)


class EventPatch(BaseModel):
        """Partial update. Only the fields actually sent are applied.

        `title`, `start_time` and `end_time` may be omitted but not set to
        null; the media fields may be null to detach the media.
        """

        model_config = ConfigDict(populate_by_name=True, extra="forbid")

        title: Optional[str] = Field(default=None, min_length=3)
        description: Optional[str] = None
        start_time: Optional[datetime] = Field(default=None, alias="startTime")
        end_time: Optional[datetime] = Field(default=None, alias="endTime")
        image_url: Optional[str] = Field(default=None, alias="imageURL")
        video_url: Optional[str] = Field(default=None, alias="videoURL")

        @field_validator("title", "start_time", "end_time", mode="before")
        @classmethod
        def _not_null(cls, v):
                if v is None:
                        raise ValueError("field may be omitted but not null")
                return v

        @field_validator("start_time", "end_time")
        @classmethod
        def _normalize_ts(cls, v: datetime) -> datetime:
                return to_utc(v)

        def changes(self) -> dict:
                """Fields the caller supplied, keyed by attribute name."""
                return self.model_dump(exclude_unset=True)


class Event(BaseModel):
        """A stored event as returned by the API."""

        model_config = ConfigDict(populate_by_name=True)

        id: UUID
        title: str
        description: Optional[str] = None
        start_time: datetime = Field(alias="startTime")
        end_time: datetime = Field(alias="endTime")
        image_url: Optional[str] = Field(default=None, alias="imageURL")
        video_url: Optional[str] = Field(default=None, alias="videoURL")
        created_at: datetime = Field(alias="createdAt")
        updated_at: datetime = Field(alias="updatedAt")


class EventsQuery(BaseModel):
        """Filter and sort parameters of `GET /events`."""

        model_config = ConfigDict(populate_by_name=True)

        search: Optional[str] = None
        start_date: Optional[datetime] = Field(default=None, alias="startDate")
        end_date: Optional[datetime] = Field(default=None, alias="endDate")
        sort_by: Optional[SortField] = Field(default=None, alias="sortBy")
        sort_order: SortOrder = Field(default="asc", alias="sortOrder")

        @field_validator("start_date", "end_date")
        @classmethod
        def _normalize_ts(cls, v: Optional[datetime]) -> Optional[datetime]:
                return to_utc(v) if v is not None else None


class UploadedFile(BaseModel):
        """Response body of the upload endpoints."""

        filename: str
        url: str
        mimetype: str
        size: int

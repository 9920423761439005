"""Pydantic models for HTTP and WebSocket payloads."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ActivityPayload(BaseModel):
    """Client-submitted meeting activity snapshot."""

    model_config = ConfigDict(populate_by_name=True)

    meeting_name: str | None = Field(default=None, alias="meetingName")
    meeting_id: str | None = Field(default=None, alias="meetingId")
    status: str | None = None
    duration: int | None = None
    participant_count: int | None = Field(default=None, alias="participantCount")
    start_time: datetime | None = Field(default=None, alias="startTime")
    end_time: datetime | None = Field(default=None, alias="endTime")

    @field_validator("start_time", "end_time")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class RealtimeMessage(BaseModel):
    """A WebSocket frame: an event name and its payload."""

    event: str
    data: Any = None

"""Domain models for meeting activity records."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class ActivityStatus(StrEnum):
    """Outcome of a meeting occurrence."""

    COMPLETED = "completed"
    SCHEDULED = "scheduled"
    MISSED = "missed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class OwnerProfile:
    """Display fields of the user owning an activity."""

    id: UUID
    first_name: str | None
    last_name: str | None
    email: str | None
    profile_picture: str | None


@dataclass(frozen=True)
class NewActivity:
    """Unsaved activity submitted to the store."""

    owner_id: UUID | None
    meeting_name: str | None
    meeting_id: str | None
    start_time: datetime | None
    status: ActivityStatus = ActivityStatus.COMPLETED
    duration: int | None = None
    participant_count: int = 1
    end_time: datetime | None = None


@dataclass(frozen=True)
class ActivityRecord:
    """Persisted, write-once meeting activity."""

    id: UUID
    owner_id: UUID
    meeting_name: str
    meeting_id: str
    status: ActivityStatus
    duration: int | None
    participant_count: int
    start_time: datetime
    end_time: datetime | None
    created_at: datetime
    owner: OwnerProfile | None = None


@dataclass(frozen=True)
class ActivityStats:
    """Aggregate totals over a user's activities."""

    total_meetings: int
    total_minutes: int
    average_duration: float

"""Append-only store of meeting activities."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from meeting_activity.domain.activities import (
    ActivityRecord,
    ActivityStats,
    ActivityStatus,
    NewActivity,
)
from meeting_activity.domain.errors import PersistenceError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 10


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class ActivityRepository(Protocol):
    """Persistence interface for meeting activities."""

    def insert_activity(
        self, activity: NewActivity, created_at: datetime
    ) -> ActivityRecord:
        """Insert an activity row and return it with its generated id."""

    def list_recent_activities(
        self, owner_id: UUID, limit: int
    ) -> list[ActivityRecord]:
        """Return the newest activities for an owner with the owner expanded."""

    def list_durations(self, owner_id: UUID) -> list[int | None]:
        """Return the duration of every activity recorded for an owner."""


@dataclass
class ActivityService:
    """Application service for recording and querying activities."""

    repository: ActivityRepository
    clock: Callable[[], datetime] = _utcnow

    def append(self, activity: NewActivity) -> ActivityRecord:
        """Validate and persist a new activity."""
        validate_activity(activity)
        created_at = self.clock()
        try:
            record = self.repository.insert_activity(activity, created_at)
        except PersistenceError:
            raise
        except Exception as exc:
            raise PersistenceError("Failed to save meeting activity") from exc
        logger.info(
            "Meeting activity saved: %s (%s minutes)",
            record.meeting_name,
            record.duration,
            extra={
                "activity_id": str(record.id),
                "meeting_id": record.meeting_id,
                "owner_id": str(record.owner_id),
            },
        )
        return record

    def recent_for_user(
        self, owner_id: UUID, limit: int = DEFAULT_RECENT_LIMIT
    ) -> list[ActivityRecord]:
        """Return the owner's most recent activities, newest first."""
        try:
            records = self.repository.list_recent_activities(owner_id, limit)
        except PersistenceError:
            raise
        except Exception as exc:
            raise PersistenceError("Failed to fetch recent activities") from exc
        ordered = sorted(records, key=lambda record: record.created_at, reverse=True)
        return ordered[:limit]

    def stats_for_user(self, owner_id: UUID) -> ActivityStats:
        """Return aggregate meeting totals for the owner."""
        try:
            durations = self.repository.list_durations(owner_id)
        except PersistenceError:
            raise
        except Exception as exc:
            raise PersistenceError("Failed to fetch meeting stats") from exc
        return aggregate_stats(durations)


def validate_activity(activity: NewActivity) -> None:
    """Raise ValidationError when the activity cannot be stored."""
    if not activity.meeting_name or not activity.meeting_id:
        raise ValidationError("Meeting name and ID are required")
    if activity.owner_id is None:
        raise ValidationError("Activity owner is required")
    if activity.start_time is None:
        raise ValidationError("Start time is required")
    if not isinstance(activity.status, ActivityStatus):
        raise ValidationError(f"Unknown status: {activity.status}")
    if activity.duration is not None and activity.duration < 0:
        raise ValidationError("Duration must not be negative")
    if activity.participant_count < 1:
        raise ValidationError("Participant count must be at least 1")
    if activity.end_time is not None and activity.end_time < activity.start_time:
        raise ValidationError("End time must not precede start time")


def aggregate_stats(durations: list[int | None]) -> ActivityStats:
    """Fold activity durations into meeting totals."""
    timed = [duration for duration in durations if duration is not None]
    total_minutes = sum(timed)
    average = total_minutes / len(timed) if timed else 0.0
    return ActivityStats(
        total_meetings=len(durations),
        total_minutes=total_minutes,
        average_duration=average,
    )

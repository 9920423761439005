"""Supabase repository for meeting activities."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from meeting_activity.domain.activities import (
    ActivityRecord,
    ActivityStatus,
    NewActivity,
    OwnerProfile,
)
from meeting_activity.domain.errors import PersistenceError
from meeting_activity.services.activities import ActivityRepository

_ACTIVITY_COLUMNS = (
    "id, user_id, meeting_name, meeting_id, status, duration, participant_count, "
    "start_time, end_time, created_at"
)
_OWNER_COLUMNS = "id, first_name, last_name, email, profile_picture"


@dataclass
class SupabaseActivityRepository(ActivityRepository):
    """Supabase implementation for the activity store."""

    client: Client
    table: str = "meeting_activities"
    users_table: str = "users"

    def insert_activity(
        self, activity: NewActivity, created_at: datetime
    ) -> ActivityRecord:
        """Insert an activity row and return it."""
        response = (
            self.client.table(self.table)
            .insert(
                {
                    "user_id": str(activity.owner_id),
                    "meeting_name": activity.meeting_name,
                    "meeting_id": activity.meeting_id,
                    "status": activity.status.value,
                    "duration": activity.duration,
                    "participant_count": activity.participant_count,
                    "start_time": _isoformat(activity.start_time),
                    "end_time": _isoformat(activity.end_time),
                    "created_at": created_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise PersistenceError("Failed to create meeting activity")
        return _parse_activity(response.data[0])

    def list_recent_activities(
        self, owner_id: UUID, limit: int
    ) -> list[ActivityRecord]:
        """Return recent activities with the owner's profile embedded."""
        response = (
            self.client.table(self.table)
            .select(f"{_ACTIVITY_COLUMNS}, owner:{self.users_table}({_OWNER_COLUMNS})")
            .eq("user_id", str(owner_id))
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_activity(row) for row in response.data or []]

    def list_durations(self, owner_id: UUID) -> list[int | None]:
        """Return the durations of an owner's activities."""
        response = (
            self.client.table(self.table)
            .select("duration")
            .eq("user_id", str(owner_id))
            .execute()
        )
        return [
            int(row["duration"]) if row.get("duration") is not None else None
            for row in response.data or []
        ]


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_datetime(raw: object) -> datetime | None:
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    return None


def _required_datetime(row: dict[str, object], column: str) -> datetime:
    value = _parse_datetime(row.get(column))
    if value is None:
        raise PersistenceError(f"Meeting activity row is missing {column}")
    return value


def _parse_activity(row: dict[str, object]) -> ActivityRecord:
    owner_row = row.get("owner")
    owner = (
        OwnerProfile(
            id=UUID(str(owner_row["id"])),
            first_name=owner_row.get("first_name"),
            last_name=owner_row.get("last_name"),
            email=owner_row.get("email"),
            profile_picture=owner_row.get("profile_picture"),
        )
        if isinstance(owner_row, dict)
        else None
    )
    duration = row.get("duration")
    return ActivityRecord(
        id=UUID(str(row["id"])),
        owner_id=UUID(str(row["user_id"])),
        meeting_name=str(row["meeting_name"]),
        meeting_id=str(row["meeting_id"]),
        status=ActivityStatus(row.get("status") or ActivityStatus.COMPLETED),
        duration=int(duration) if duration is not None else None,
        participant_count=int(row.get("participant_count") or 1),
        start_time=_required_datetime(row, "start_time"),
        end_time=_parse_datetime(row.get("end_time")),
        created_at=_required_datetime(row, "created_at"),
        owner=owner,
    )

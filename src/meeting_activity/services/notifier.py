"""Real-time fan-out of stored activities to the owner's clients."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from meeting_activity.domain.activities import ActivityRecord, ActivityStats
from meeting_activity.services.activities import ActivityService

logger = logging.getLogger(__name__)

ACTIVITY_UPDATED = "activity-updated"
STATS_UPDATED = "stats-updated"


class RealtimeChannel(Protocol):
    """Interface for delivering events to subscribers of a room."""

    async def emit(self, room: str, event: str, data: dict[str, object]) -> None:
        """Send an event to every connection subscribed to the room."""


def user_channel(owner_id: UUID | str) -> str:
    """Return the room name carrying an owner's activity updates."""
    return f"user_{owner_id}"


@dataclass
class ActivityNotifier:
    """Pushes activity and statistics updates to an owner's room."""

    channel: RealtimeChannel
    activity_service: ActivityService

    async def notify_user(self, owner_id: UUID, activity: ActivityRecord) -> None:
        """Deliver a meeting-completed update, then refreshed stats."""
        room = user_channel(owner_id)
        await self.channel.emit(room, ACTIVITY_UPDATED, activity_payload(activity))
        try:
            stats = await asyncio.to_thread(
                self.activity_service.stats_for_user, owner_id
            )
        except Exception:
            logger.exception(
                "Failed to compute stats update", extra={"owner_id": str(owner_id)}
            )
            return
        await self.channel.emit(room, STATS_UPDATED, {"stats": stats_payload(stats)})


def activity_payload(activity: ActivityRecord) -> dict[str, object]:
    """Build the activity-updated payload."""
    return {
        "type": "meeting-completed",
        "activity": {
            "id": str(activity.id),
            "meetingName": activity.meeting_name,
            "status": activity.status.value,
            "duration": activity.duration,
            "participantCount": activity.participant_count,
            "createdAt": activity.created_at.isoformat(),
        },
    }


def stats_payload(stats: ActivityStats) -> dict[str, object]:
    return {
        "totalMeetings": stats.total_meetings,
        "totalMinutes": stats.total_minutes,
        "averageDuration": stats.average_duration,
    }

"""Per-connection state machine for live meeting tracking."""

import asyncio
import logging
import math
from collections.abc import Callable, Coroutine, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from uuid import UUID

from meeting_activity.domain.activities import (
    ActivityRecord,
    ActivityStatus,
    NewActivity,
)
from meeting_activity.domain.sessions import SessionState
from meeting_activity.services.activities import ActivityService
from meeting_activity.services.notifier import ActivityNotifier

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class TrackerPhase(StrEnum):
    """Lifecycle phase of a connection's meeting tracker."""

    IDLE = "IDLE"
    ACTIVE = "ACTIVE"
    FINALIZING = "FINALIZING"


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class TrackerRegistry:
    """Owns the trackers of all live connections and their detached writes."""

    activity_service: ActivityService
    notifier: ActivityNotifier
    clock: Clock = _utcnow
    trackers: dict[str, "MeetingTracker"] = field(default_factory=dict)
    pending: set[asyncio.Task] = field(default_factory=set)

    def open(
        self, connection_id: str, authenticated_owner: UUID | None = None
    ) -> "MeetingTracker":
        """Create and register the tracker for a new connection."""
        tracker = MeetingTracker(
            connection_id=connection_id,
            registry=self,
            authenticated_owner=authenticated_owner,
        )
        self.trackers[connection_id] = tracker
        return tracker

    def close(self, connection_id: str) -> asyncio.Task | None:
        """Finalize any running meeting and forget the connection."""
        tracker = self.trackers.pop(connection_id, None)
        if tracker is None:
            return None
        return tracker.disconnect()

    def is_tracking(self, owner_id: UUID, meeting_id: str) -> bool:
        """Return True when a live connection tracks this owner's meeting."""
        return any(
            tracker.state is not None
            and tracker.state.owner_id == owner_id
            and tracker.state.meeting_id == meeting_id
            for tracker in self.trackers.values()
        )

    def submit(self, activity: NewActivity) -> asyncio.Task:
        """Write and announce an activity as a detached best-effort task."""
        return self.detach(self._write_and_notify(activity))

    def detach(self, coro: Coroutine[object, object, None]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self.pending.add(task)
        task.add_done_callback(self.pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for every in-flight write to finish."""
        while self.pending:
            await asyncio.gather(*list(self.pending), return_exceptions=True)

    async def _write_and_notify(self, activity: NewActivity) -> None:
        context = {
            "meeting_id": activity.meeting_id,
            "owner_id": str(activity.owner_id),
        }
        try:
            record: ActivityRecord = await asyncio.to_thread(
                self.activity_service.append, activity
            )
        except Exception:
            logger.exception("Failed to save meeting activity", extra=context)
            return
        try:
            await self.notifier.notify_user(record.owner_id, record)
        except Exception:
            logger.exception("Failed to notify meeting activity", extra=context)


@dataclass
class MeetingTracker:
    """Tracks the meeting a single connection is attached to."""

    connection_id: str
    registry: TrackerRegistry
    authenticated_owner: UUID | None = None
    state: SessionState | None = None
    _inflight: asyncio.Task | None = field(default=None, init=False, repr=False)

    @property
    def phase(self) -> TrackerPhase:
        if self.state is not None:
            return TrackerPhase.ACTIVE
        if self._inflight is not None and not self._inflight.done():
            return TrackerPhase.FINALIZING
        return TrackerPhase.IDLE

    def start(self, data: Mapping[str, object]) -> bool:
        """Begin tracking a meeting; return False when the signal is ignored."""
        meeting_id = data.get("meetingId")
        meeting_name = data.get("meetingName")
        owner_id = _parse_owner(data.get("userId"))
        if not meeting_id or not meeting_name or owner_id is None:
            logger.info(
                "Ignoring meeting start with missing fields",
                extra={"connection_id": self.connection_id},
            )
            return False
        if (
            self.authenticated_owner is not None
            and owner_id != self.authenticated_owner
        ):
            logger.warning(
                "Ignoring meeting start for another user",
                extra={
                    "connection_id": self.connection_id,
                    "owner_id": str(owner_id),
                },
            )
            return False
        if self.state is not None:
            logger.warning(
                "Replacing running meeting %s without recording it",
                self.state.meeting_id,
                extra={"connection_id": self.connection_id},
            )
        self.state = SessionState(
            meeting_id=str(meeting_id),
            meeting_name=str(meeting_name),
            owner_id=owner_id,
            start_time=self.registry.clock(),
        )
        logger.info(
            "Meeting started: %s (%s) by user %s",
            meeting_name,
            meeting_id,
            owner_id,
        )
        return True

    def participant_joined(self) -> None:
        if self.state is None:
            return
        self.state.participant_count += 1

    def participant_left(self) -> None:
        if self.state is None:
            return
        self.state.participant_count = max(1, self.state.participant_count - 1)

    def end(self) -> asyncio.Task | None:
        """Finalize on an explicit meeting-ended signal."""
        if self.state is None:
            logger.info(
                "Meeting end ignored, no meeting in progress",
                extra={"connection_id": self.connection_id},
            )
            return None
        return self._finalize()

    def disconnect(self) -> asyncio.Task | None:
        """Finalize a meeting left running when the connection drops."""
        if self.state is None:
            return None
        return self._finalize()

    def _finalize(self) -> asyncio.Task:
        state = self.state
        # Cleared before the write is scheduled so a racing trigger sees IDLE.
        self.state = None
        end_time = self.registry.clock()
        activity = NewActivity(
            owner_id=state.owner_id,
            meeting_name=state.meeting_name,
            meeting_id=state.meeting_id,
            status=ActivityStatus.COMPLETED,
            duration=duration_minutes(state.start_time, end_time),
            participant_count=state.participant_count,
            start_time=state.start_time,
            end_time=end_time,
        )
        self._inflight = self.registry.submit(activity)
        return self._inflight


def duration_minutes(start: datetime, end: datetime) -> int:
    """Return elapsed whole minutes, rounding halves up."""
    seconds = (end - start).total_seconds()
    return max(0, math.floor(seconds / 60 + 0.5))


def _parse_owner(raw: object) -> UUID | None:
    if isinstance(raw, UUID):
        return raw
    if not isinstance(raw, str) or not raw:
        return None
    try:
        return UUID(raw)
    except ValueError:
        return None

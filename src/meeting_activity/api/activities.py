"""Meeting activity HTTP endpoints."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

import pydantic
from fastapi import APIRouter, Depends, Header, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError

from meeting_activity.api.models import ActivityPayload
from meeting_activity.domain.activities import (
    ActivityRecord,
    ActivityStatus,
    NewActivity,
    OwnerProfile,
)
from meeting_activity.domain.errors import ActiveMeetingConflict, ValidationError
from meeting_activity.services.notifier import stats_payload

if TYPE_CHECKING:
    from meeting_activity.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["activities"])


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an Authorization header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_user(
    request: Request, authorization: str | None = Header(default=None)
) -> UUID:
    """Resolve the calling user or raise AuthenticationRequired."""
    container: AppContainer = request.app.state.container
    return container.user_service.require_user(bearer_token(authorization))


@router.post("/meeting-activity")
async def save_meeting_activity(
    request: Request, user_id: UUID = Depends(require_user)
) -> dict[str, str]:
    """Store a client-submitted activity and notify the owner's clients."""
    container: AppContainer = request.app.state.container
    payload = await _read_payload(request)
    activity = _build_activity(user_id, payload)
    if activity.meeting_id and container.tracker_registry.is_tracking(
        user_id, activity.meeting_id
    ):
        raise ActiveMeetingConflict("Meeting is being tracked by a live connection")
    record = await run_in_threadpool(container.activity_service.append, activity)
    try:
        await container.notifier.notify_user(user_id, record)
    except Exception:
        logger.exception(
            "Failed to notify meeting activity",
            extra={"activity_id": str(record.id)},
        )
    return {
        "message": "Meeting activity saved successfully",
        "activityId": str(record.id),
    }


@router.get("/recent-activities")
async def recent_activities(
    request: Request, user_id: UUID = Depends(require_user)
) -> dict[str, object]:
    """Return the caller's most recent activities, newest first."""
    container: AppContainer = request.app.state.container
    records = await run_in_threadpool(
        container.activity_service.recent_for_user,
        user_id,
        limit=container.settings.recent_activity_limit,
    )
    return {"activities": [serialize_activity(record) for record in records]}


@router.get("/meeting-stats")
async def meeting_stats(
    request: Request, user_id: UUID = Depends(require_user)
) -> dict[str, object]:
    """Return aggregate meeting totals for the caller."""
    container: AppContainer = request.app.state.container
    stats = await run_in_threadpool(container.activity_service.stats_for_user, user_id)
    return {"stats": stats_payload(stats)}


async def _read_payload(request: Request) -> ActivityPayload:
    """Parse the activity body once the caller is known."""
    try:
        body = await request.json()
    except ValueError as exc:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body",), "msg": "Invalid JSON"}]
        ) from exc
    try:
        return ActivityPayload.model_validate(body)
    except pydantic.ValidationError as exc:
        raise RequestValidationError(
            [
                {**error, "loc": ("body", *error["loc"])}
                for error in exc.errors(include_url=False)
            ],
            body=body,
        ) from exc


def _build_activity(user_id: UUID, payload: ActivityPayload) -> NewActivity:
    try:
        status = ActivityStatus(payload.status or ActivityStatus.COMPLETED)
    except ValueError as exc:
        raise ValidationError(f"Unknown status: {payload.status}") from exc
    end_time = payload.end_time or datetime.now(tz=UTC)
    return NewActivity(
        owner_id=user_id,
        meeting_name=payload.meeting_name,
        meeting_id=payload.meeting_id,
        status=status,
        duration=payload.duration,
        participant_count=payload.participant_count or 1,
        start_time=payload.start_time or min(datetime.now(tz=UTC), end_time),
        end_time=end_time,
    )


def serialize_activity(record: ActivityRecord) -> dict[str, object]:
    """Serialize an activity for the dashboard."""
    return {
        "id": str(record.id),
        "userId": str(record.owner_id),
        "owner": _serialize_owner(record.owner) if record.owner else None,
        "meetingName": record.meeting_name,
        "meetingId": record.meeting_id,
        "status": record.status.value,
        "duration": record.duration,
        "participantCount": record.participant_count,
        "startTime": record.start_time.isoformat(),
        "endTime": record.end_time.isoformat() if record.end_time else None,
        "createdAt": record.created_at.isoformat(),
    }


def _serialize_owner(owner: OwnerProfile) -> dict[str, object]:
    return {
        "id": str(owner.id),
        "firstName": owner.first_name,
        "lastName": owner.last_name,
        "email": owner.email,
        "profilePicture": owner.profile_picture,
    }

"""WebSocket endpoint carrying live meeting signals."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

import pydantic
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool

from meeting_activity.api.activities import bearer_token
from meeting_activity.api.models import RealtimeMessage
from meeting_activity.services.notifier import user_channel

if TYPE_CHECKING:
    from meeting_activity.containers import AppContainer
    from meeting_activity.services.sessions import MeetingTracker

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def realtime(websocket: WebSocket) -> None:
    """Track one connection's meeting and deliver its owner's updates."""
    container: AppContainer = websocket.app.state.container
    token = websocket.query_params.get("access_token") or bearer_token(
        websocket.headers.get("authorization")
    )
    owner_id = await run_in_threadpool(container.user_service.current_user, token)
    await websocket.accept()
    connection_id = str(uuid4())
    tracker = container.tracker_registry.open(connection_id, owner_id)
    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            raw = frame.get("text")
            if raw is None:
                logger.warning(
                    "Ignoring non-text frame", extra={"connection_id": connection_id}
                )
                continue
            try:
                message = RealtimeMessage.model_validate_json(raw)
            except pydantic.ValidationError:
                logger.warning(
                    "Ignoring malformed frame", extra={"connection_id": connection_id}
                )
                continue
            _dispatch(container, websocket, tracker, owner_id, message)
    except WebSocketDisconnect:
        pass
    finally:
        container.hub.discard(websocket)
        container.tracker_registry.close(connection_id)


def _dispatch(
    container: AppContainer,
    websocket: WebSocket,
    tracker: MeetingTracker,
    owner_id: UUID | None,
    message: RealtimeMessage,
) -> None:
    event = message.event
    data = message.data
    if event == "join-user-room":
        _join_user_room(container, websocket, owner_id, data)
    elif event == "meeting-started":
        tracker.start(data if isinstance(data, dict) else {})
    elif event == "participant-joined":
        tracker.participant_joined()
    elif event == "participant-left":
        tracker.participant_left()
    elif event == "meeting-ended":
        tracker.end()
    else:
        logger.info("Ignoring unknown event %s", event)


def _join_user_room(
    container: AppContainer,
    websocket: WebSocket,
    owner_id: UUID | None,
    data: object,
) -> None:
    if not isinstance(data, str | int) or not str(data):
        logger.info("Ignoring room join without a user id")
        return
    requested = str(data)
    if owner_id is not None and requested != str(owner_id):
        logger.warning(
            "Refusing room join for another user", extra={"owner_id": str(owner_id)}
        )
        return
    container.hub.join(user_channel(requested), websocket)

"""WebSocket route that tracks foreground learning time for a session.

One connection is one learning session. The client reports page visibility;
the server keeps the tracker, saves whole minutes every save interval and
does a final save when the connection closes.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from skillbridge.api.deps import SessionFactoryDep
from skillbridge.core.config import Settings, get_settings
from skillbridge.core.logging import get_logger
from skillbridge.schemas.learning import LearningEvent, LearningEventType
from skillbridge.services import user_service
from skillbridge.services.learning_time_service import make_persistence_callback
from skillbridge.services.time_tracker import LearningTimeTracker, VisibilityGate

logger = get_logger(__name__)
router = APIRouter(prefix="/ws", tags=["websocket"])


def _state_message(tracker: LearningTimeTracker) -> dict:
    return {
        "type": "state",
        "state": tracker.state.value,
        "accumulatedMs": tracker.accumulated_ms,
        "persistedMinutes": tracker.persisted_minutes,
    }


@router.websocket("/learning/{user_id}")
async def learning_session(
    websocket: WebSocket,
    user_id: str,
    session_factory: SessionFactoryDep,
    settings: Annotated[Settings, Depends(get_settings)],
    visible: bool | None = None,
) -> None:
    """Track learning time while the client keeps this connection open.

    ``visible`` is the page visibility at connect time; omitted means unknown
    and counts as visible.
    """
    async with session_factory() as db:
        user = await user_service.get_user(db, user_id)
    if not user:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="User not found")
        return

    await websocket.accept()
    tracker = LearningTimeTracker(
        user_id,
        make_persistence_callback(session_factory),
        gate=VisibilityGate(visible),
        interval_seconds=settings.LEARNING_TIME_SAVE_INTERVAL_SECONDS,
    )
    tracker.start()
    logger.info("Learning session connected", user_id=user_id)

    try:
        await websocket.send_json(_state_message(tracker))
        while True:
            raw = await websocket.receive_text()
            try:
                event = LearningEvent.model_validate_json(raw)
            except ValidationError as e:
                await websocket.send_json({
                    "type": "error",
                    "message": f"Invalid event: {e.errors()[0]['msg']}",
                })
                continue

            if event.type is LearningEventType.VISIBILITY:
                if event.visible is None:
                    await websocket.send_json({
                        "type": "error",
                        "message": "visibility event needs 'visible'",
                    })
                    continue
                tracker.set_visible(event.visible)
                await websocket.send_json(_state_message(tracker))
            elif event.type is LearningEventType.FLUSH:
                minutes = await tracker.tick()
                await websocket.send_json({"type": "flushed", "minutes": minutes})
            else:
                await websocket.send_json({"type": "pong"})

    except WebSocketDisconnect:
        logger.info("Learning session disconnected", user_id=user_id)
    finally:
        await tracker.teardown()

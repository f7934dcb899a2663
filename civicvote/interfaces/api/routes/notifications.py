"""Endpoints and websocket handler for the notification inbox."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from sqlalchemy.orm import Session

from civicvote.application.use_cases.notifications import (
    NotificationNotFoundError,
    clear_all_notifications,
    clear_notification,
    list_inbox,
    mark_all_notifications_read,
    mark_notification_read,
)
from civicvote.domain.entities import AUDIENCE_ADMIN, AUDIENCE_USER, InboxItem, VoterProfile
from civicvote.infrastructure.database import SessionLocal, get_db
from civicvote.infrastructure.notifications import (
    notification_manager,
    serialize_notification,
)
from civicvote.interfaces.api.dependencies import get_current_user, resolve_current_user
from civicvote.interfaces.api.schemas import NotificationActionResponse, NotificationRead

router = APIRouter(prefix="/notifications", tags=["notifications"])

logger = logging.getLogger(__name__)


def _require_audience(audience: str, user: VoterProfile) -> str:
    if audience == AUDIENCE_ADMIN and not user.is_admin():
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")
    return audience


def _item_to_schema(item: InboxItem) -> NotificationRead:
    event = item.event
    return NotificationRead(
        id=event.id or 0,
        type=event.type,
        title=event.title,
        message=event.message,
        audience=event.audience,
        scope=event.scope,
        scope_state=event.scope_state,
        scope_lga=event.scope_lga,
        period_id=event.period_id,
        metadata=event.metadata or {},
        created_at=event.created_at,
        read_at=item.read_at,
        cleared_at=item.cleared_at,
    )


def _item_to_payload(item: InboxItem) -> dict[str, Any]:
    return serialize_notification(item.event, read_at=item.read_at, cleared_at=item.cleared_at)


@router.get("/", response_model=list[NotificationRead])
def list_notifications(
    audience: str = Query(AUDIENCE_USER, pattern="^(user|admin)$"),
    limit: int | None = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user: VoterProfile = Depends(get_current_user),
) -> list[NotificationRead]:
    """Return the notifications the authenticated user may currently see."""

    _require_audience(audience, current_user)
    items = list_inbox(db, current_user.id, audience, limit=limit)
    return [_item_to_schema(item) for item in items]


@router.post("/mark-all-read", response_model=NotificationActionResponse)
def mark_all_read(
    audience: str = Query(AUDIENCE_USER, pattern="^(user|admin)$"),
    db: Session = Depends(get_db),
    current_user: VoterProfile = Depends(get_current_user),
) -> NotificationActionResponse:
    _require_audience(audience, current_user)
    updated = mark_all_notifications_read(db, current_user.id, audience)
    return NotificationActionResponse(updated=updated)


@router.post("/clear-all", response_model=NotificationActionResponse)
def clear_all(
    audience: str = Query(AUDIENCE_USER, pattern="^(user|admin)$"),
    db: Session = Depends(get_db),
    current_user: VoterProfile = Depends(get_current_user),
) -> NotificationActionResponse:
    _require_audience(audience, current_user)
    updated = clear_all_notifications(db, current_user.id, audience)
    return NotificationActionResponse(updated=updated)


@router.post("/{notification_id}/read", response_model=NotificationActionResponse)
def mark_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: VoterProfile = Depends(get_current_user),
) -> NotificationActionResponse:
    """Record that the user has seen the notification."""

    try:
        mark_notification_read(db, notification_id, current_user.id)
    except NotificationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return NotificationActionResponse()


@router.post("/{notification_id}/clear", response_model=NotificationActionResponse)
def clear(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: VoterProfile = Depends(get_current_user),
) -> NotificationActionResponse:
    """Hide the notification from the user's inbox for good."""

    try:
        clear_notification(db, notification_id, current_user.id)
    except NotificationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return NotificationActionResponse()


def _acknowledge(user_id: int, ids: list[Any]) -> None:
    session = SessionLocal()
    try:
        for value in ids:
            try:
                mark_notification_read(session, int(value), user_id)
            except (TypeError, ValueError):
                continue
    finally:
        session.close()


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams notifications to the authenticated user."""

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=1008)
        return

    session = SessionLocal()
    try:
        user = resolve_current_user(token, session)
        if user.is_disabled():
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account disabled")
        snapshot = list_inbox(session, user.id, AUDIENCE_USER)
    except HTTPException:
        await websocket.close(code=1008)
        return
    except Exception:
        logger.exception("Failed to open notification channel")
        await websocket.close(code=1011)
        return
    finally:
        session.close()

    await notification_manager.connect(user.id, websocket)
    try:
        await websocket.send_json(
            {"type": "init", "data": [_item_to_payload(item) for item in snapshot]}
        )
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
            elif message_type == "ack":
                ids = message.get("ids")
                if isinstance(ids, list) and ids:
                    _acknowledge(user.id, ids)
    except WebSocketDisconnect:
        pass
    finally:
        notification_manager.disconnect(user.id, websocket)

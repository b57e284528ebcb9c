"""Endpoints and websocket handler for notifications."""

from __future__ import annotations

import logging

from anyio import to_thread
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

from app.application.use_cases.maintenance import (
    archive_all as archive_all_uc,
    delete_all_for_user as delete_all_for_user_uc,
    delete_many_for_user as delete_many_for_user_uc,
    mark_all_read as mark_all_read_uc,
    prune_orphans as prune_orphans_uc,
)
from app.application.use_cases.notifications import (
    count_unread as count_unread_uc,
    create_notification as create_notification_uc,
    list_for_user as list_for_user_uc,
    mark_archived as mark_archived_uc,
    mark_read as mark_read_uc,
)
from app.domain.audience import subscription_channels
from app.domain.exceptions import InvalidArgumentError, NotificationNotFoundError
from app.infrastructure.database import SessionLocal, get_db
from app.infrastructure.notifications import notification_manager
from app.interfaces.api.dependencies import (
    Recipient,
    get_current_recipient,
    require_author,
    resolve_recipient,
)
from app.interfaces.api.schemas import (
    BulkUpdateRead,
    DeleteRead,
    DeliveryStateRead,
    NotificationCreate,
    NotificationDismissRequest,
    NotificationRead,
    NotificationWithStateRead,
    UnreadCountRead,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/", response_model=list[NotificationWithStateRead])
def list_notifications(
    limit: int | None = Query(default=None, ge=1),
    skip: int = Query(default=0, ge=0),
    unread: bool = Query(default=False),
    db: Session = Depends(get_db),
    recipient: Recipient = Depends(get_current_recipient),
) -> list[NotificationWithStateRead]:
    """Return the notifications visible to the caller with their state."""

    merged = list_for_user_uc(
        db,
        recipient.username,
        recipient.role,
        limit=limit,
        skip=skip,
        only_unread=unread,
    )
    return [NotificationWithStateRead.from_merged(item) for item in merged]


@router.get("/unread-count", response_model=UnreadCountRead)
def unread_count(
    db: Session = Depends(get_db),
    recipient: Recipient = Depends(get_current_recipient),
) -> UnreadCountRead:
    return UnreadCountRead(unread=count_unread_uc(db, recipient.username))


@router.post("/", response_model=NotificationRead, status_code=status.HTTP_201_CREATED)
def create_notification(
    payload: NotificationCreate,
    db: Session = Depends(get_db),
    author: Recipient = Depends(require_author),
) -> NotificationRead:
    """Store a notification and push it to its audience's channels."""

    try:
        notification = create_notification_uc(
            db,
            title=payload.title,
            body=payload.body,
            audience=payload.audience.model_dump(),
            type=payload.type,
            severity=payload.severity,
            expires_at=payload.expires_at,
            metadata=payload.metadata,
            channels=payload.channels,
        )
    except InvalidArgumentError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    logger.info("Notification %s authored by %s", notification.id, author.username)
    return NotificationRead.from_entity(notification)


@router.post("/read-all", response_model=BulkUpdateRead)
def mark_all_read(
    db: Session = Depends(get_db),
    recipient: Recipient = Depends(get_current_recipient),
) -> BulkUpdateRead:
    return BulkUpdateRead.from_result(mark_all_read_uc(db, recipient.username))


@router.post("/archive-all", response_model=BulkUpdateRead)
def archive_all(
    db: Session = Depends(get_db),
    recipient: Recipient = Depends(get_current_recipient),
) -> BulkUpdateRead:
    return BulkUpdateRead.from_result(archive_all_uc(db, recipient.username))


@router.post("/dismiss", response_model=DeleteRead)
def dismiss_notifications(
    payload: NotificationDismissRequest,
    db: Session = Depends(get_db),
    recipient: Recipient = Depends(get_current_recipient),
) -> DeleteRead:
    """Forget the caller's state for the given notifications."""

    result = delete_many_for_user_uc(db, recipient.username, payload.unique_ids())
    return DeleteRead.from_result(result)


@router.delete("/", response_model=DeleteRead)
def delete_all_notifications(
    db: Session = Depends(get_db),
    recipient: Recipient = Depends(get_current_recipient),
) -> DeleteRead:
    return DeleteRead.from_result(delete_all_for_user_uc(db, recipient.username))


@router.post("/maintenance/prune-orphans", response_model=DeleteRead)
def prune_orphans(
    db: Session = Depends(get_db),
    _: Recipient = Depends(require_author),
) -> DeleteRead:
    return DeleteRead(deleted_count=prune_orphans_uc(db))


@router.post("/{notification_id}/read", response_model=DeliveryStateRead)
def mark_read(
    notification_id: int,
    db: Session = Depends(get_db),
    recipient: Recipient = Depends(get_current_recipient),
) -> DeliveryStateRead:
    state = mark_read_uc(db, recipient.username, notification_id)
    return DeliveryStateRead.from_state(state)


@router.post("/{notification_id}/archive", response_model=DeliveryStateRead)
def mark_archived(
    notification_id: int,
    db: Session = Depends(get_db),
    recipient: Recipient = Depends(get_current_recipient),
) -> DeliveryStateRead:
    state = mark_archived_uc(db, recipient.username, notification_id)
    return DeliveryStateRead.from_state(state)


def _acknowledge(username: str, ids: list[int]) -> None:
    session = SessionLocal()
    try:
        for notification_id in ids:
            try:
                mark_read_uc(session, username, notification_id)
            except NotificationNotFoundError:
                logger.info(
                    "Ignoring ack of unknown notification %s from %s", notification_id, username
                )
    finally:
        session.close()


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint streaming new notifications to the caller's channels."""

    try:
        recipient = resolve_recipient(
            websocket.query_params.get("username"),
            websocket.query_params.get("role"),
        )
    except HTTPException:
        await websocket.close(code=1008)
        return

    channels = subscription_channels(recipient.username, recipient.role)
    await notification_manager.connect(websocket, channels)
    try:
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
                continue

            if message_type == "ack":
                ids = [item for item in message.get("ids", []) if isinstance(item, int)]
                if ids:
                    await to_thread.run_sync(_acknowledge, recipient.username, ids)
                continue
    except WebSocketDisconnect:
        notification_manager.disconnect(websocket)
    except Exception:
        notification_manager.disconnect(websocket)
        raise

import asyncio
import json
import logging
import uuid
from collections.abc import AsyncGenerator
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from sqlmodel import Session, col, select, update
from sse_starlette.sse import EventSourceResponse

from hackhub.api.deps import CurrentUser, SessionDep
from hackhub.core.config import settings
from hackhub.core.db import engine
from hackhub.models import Message, Notification, NotificationPublic, NotificationsPublic
from hackhub.services.notifications import unread_count

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)


@router.get("/", response_model=NotificationsPublic)
def read_notifications(
    session: SessionDep, current_user: CurrentUser, unread_only: bool = False, limit: int = 50
) -> Any:
    statement = select(Notification).where(Notification.user_id == current_user.id)
    if unread_only:
        statement = statement.where(Notification.read == False)  # noqa: E712
    notifications = session.exec(
        statement.order_by(col(Notification.created_at).desc()).limit(limit)
    ).all()
    return NotificationsPublic(
        data=notifications,
        count=len(notifications),
        unread_count=unread_count(session=session, user_id=current_user.id),
    )


@router.patch("/{notification_id}/read", response_model=NotificationPublic)
def mark_read(session: SessionDep, notification_id: uuid.UUID, current_user: CurrentUser) -> Any:
    notification = session.get(Notification, notification_id)
    if not notification or notification.user_id != current_user.id:
        raise HTTPException(status_code=404, detail="Notification not found")
    notification.read = True
    session.add(notification)
    session.commit()
    session.refresh(notification)
    return notification


@router.post("/read-all", response_model=Message)
def mark_all_read(session: SessionDep, current_user: CurrentUser) -> Any:
    session.exec(  # type: ignore[call-overload]
        update(Notification)
        .where(col(Notification.user_id) == current_user.id, col(Notification.read) == False)  # noqa: E712
        .values(read=True)
    )
    session.commit()
    return Message(message="All notifications marked as read")


async def unread_count_events(request: Request, user_id: uuid.UUID) -> AsyncGenerator[str, None]:
    # Each poll opens its own session; the request session is closed once streaming starts.
    last: int | None = None
    while True:
        if await request.is_disconnected():
            logger.info("Notification stream closed for user %s", user_id)
            break
        with Session(engine) as session:
            count = unread_count(session=session, user_id=user_id)
        if count != last:
            last = count
            yield json.dumps({"status": "unread_count", "unread_count": count})
        await asyncio.sleep(settings.NOTIFICATION_STREAM_INTERVAL_SECONDS)


@router.get("/stream")
async def stream_notifications(request: Request, current_user: CurrentUser) -> EventSourceResponse:
    """
    Server-sent events carrying the unread notification count whenever it changes.
    """
    return EventSourceResponse(unread_count_events(request, current_user.id))

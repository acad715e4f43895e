import logging
import uuid
from collections.abc import Iterable

from fastapi import BackgroundTasks
from sqlmodel import Session, func, select

from hackhub.models import Notification, NotificationType, User
from hackhub.services.email import send_email

logger = logging.getLogger(__name__)


def wants_email(user: User) -> bool:
    return bool((user.notification_preferences or {}).get("email_notifications", True))


def notify(
    *,
    session: Session,
    user_ids: Iterable[uuid.UUID],
    type: NotificationType,
    title: str,
    message: str,
    related_event_id: uuid.UUID | None = None,
    related_team_id: uuid.UUID | None = None,
    related_project_id: uuid.UUID | None = None,
    action_url: str | None = None,
    background_tasks: BackgroundTasks | None = None,
    email: tuple[str, str] | None = None,
) -> list[Notification]:
    """
    Store one in-app notification per user and commit.

    When ``email`` (subject, body) and ``background_tasks`` are given, users who
    keep email notifications on also get the message by email after the
    response is sent.
    """
    notifications = []
    for user_id in dict.fromkeys(user_ids):
        notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            related_event_id=related_event_id,
            related_team_id=related_team_id,
            related_project_id=related_project_id,
            action_url=action_url,
        )
        session.add(notification)
        notifications.append(notification)

        if email and background_tasks is not None:
            user = session.get(User, user_id)
            if user and user.is_active and wants_email(user):
                subject, body = email
                background_tasks.add_task(send_email, email_to=user.email, subject=subject, body=body)
    session.commit()
    logger.info("Created %s %s notifications", len(notifications), type.value)
    return notifications


def unread_count(*, session: Session, user_id: uuid.UUID) -> int:
    statement = (
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user_id, Notification.read == False)  # noqa: E712
    )
    return session.exec(statement).one()

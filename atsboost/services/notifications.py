"""In-app notifications, optionally mirrored to WhatsApp."""

import logging

from sqlalchemy.orm import Session

from atsboost.db.tables import Notification, SAProfile
from atsboost.tools import whatsapp

logger = logging.getLogger(__name__)


def create_notification(
    db: Session,
    user_id: str,
    type: str,
    title: str,
    message: str,
    priority: str = "normal",
    extra_data: dict | None = None,
    send_whatsapp: bool = False,
) -> Notification:
    """
    Store a notification for a user.

    With send_whatsapp, the message is also sent to the user's verified
    WhatsApp number when they have notifications switched on. The caller
    commits.
    """
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        priority=priority,
        extra_data=extra_data or {},
    )
    db.add(notification)

    if send_whatsapp:
        profile = db.query(SAProfile).filter(SAProfile.user_id == user_id).first()
        if profile and profile.whatsapp_verified and profile.whatsapp_notifications and profile.whatsapp_number:
            if not whatsapp.send_message(profile.whatsapp_number, f"*{title}*\n\n{message}"):
                logger.warning(f"WhatsApp delivery failed for notification to user {user_id}")

    return notification


def list_notifications(db: Session, user_id: str, unread_only: bool = False, limit: int = 50) -> list[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc()).limit(limit).all()


def unread_count(db: Session, user_id: str) -> int:
    return db.query(Notification).filter(Notification.user_id == user_id, Notification.is_read.is_(False)).count()


def mark_all_read(db: Session, user_id: str) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()
    return updated

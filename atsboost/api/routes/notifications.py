"""In-app notification endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from atsboost.api.deps import get_current_user
from atsboost.api.schemas import NotificationListResponse, NotificationResponse
from atsboost.db import Notification, User, get_db
from atsboost.services.notifications import list_notifications, mark_all_read, unread_count

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
def get_notifications(
    unread_only: bool = False,
    limit: int = Query(50, ge=1, le=200),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """The user's notifications, newest first."""
    notifications = list_notifications(db, user.id, unread_only, limit)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        unread=unread_count(db, user.id),
    )


@router.post("/read-all")
def read_all(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Mark every notification as read."""
    return {"updated": mark_all_read(db, user.id)}


@router.post("/{notification_id}/read", response_model=NotificationResponse)
def read_notification(notification_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Mark one notification as read."""
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user.id)
        .first()
    )
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return NotificationResponse.model_validate(notification)

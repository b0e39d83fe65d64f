"""The current user's notification inbox."""
import uuid
from typing import Any

from fastapi import APIRouter, Query

from nakshatra_talks.dependencies import CurrentUser, Notifications
from nakshatra_talks.schemas import calculate_pagination, ok

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


@router.get("")
def list_notifications(
    user: CurrentUser,
    notifications: Notifications,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    is_read: bool | None = Query(default=None, alias="isRead"),
) -> dict[str, Any]:
    """Own and broadcast notifications, newest first, with the unread count."""
    items, total, unread = notifications.list_for_user(
        user.id, is_read=is_read, page=page, limit=limit
    )
    return ok(
        {
            "notifications": items,
            "unreadCount": unread,
            "pagination": calculate_pagination(total, page, limit),
        }
    )


@router.patch("/read-all")
def mark_all_read(user: CurrentUser, notifications: Notifications) -> dict[str, Any]:
    updated = notifications.mark_all_read(user.id)
    return ok({"updated": updated}, "All notifications marked as read")


@router.patch("/{notification_id}/read")
def mark_read(
    notification_id: uuid.UUID, user: CurrentUser, notifications: Notifications
) -> dict[str, Any]:
    return ok(notifications.mark_read(notification_id, user.id), "Notification marked as read")

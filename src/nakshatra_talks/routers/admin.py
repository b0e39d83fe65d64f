"""Admin-only routes: ledger audit, moderation, content and user management."""
import uuid
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Query, status

from nakshatra_talks.db.models import (FeedbackStatus, TransactionStatus,
                                       TransactionType)
from nakshatra_talks.dependencies import (AdminUser, Content, Feedbacks, Ledger,
                                          Notifications, Reviews, Users)
from nakshatra_talks.schemas import (BannerCreate, BannerUpdate,
                                     CategoryCreate, CategoryUpdate,
                                     FeedbackUpdate, NotificationSend,
                                     ReviewModerate, calculate_pagination, ok,
                                     paginated)
from nakshatra_talks.services import FeedbackFilters, TransactionFilters

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.get("/transactions")
def list_all_transactions(
    _admin: AdminUser,
    ledger: Ledger,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    user_id: uuid.UUID | None = Query(default=None, alias="userId"),
    txn_type: TransactionType | None = Query(default=None, alias="type"),
    txn_status: TransactionStatus | None = Query(default=None, alias="status"),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
) -> dict[str, Any]:
    filters = TransactionFilters(
        user_id=user_id,
        type=txn_type,
        status=txn_status,
        start_date=start_date,
        end_date=end_date,
    )
    items, total = ledger.list_transactions(filters, page=page, limit=limit)
    return paginated(items, calculate_pagination(total, page, limit))


@router.patch("/reviews/{review_id}")
def moderate_review(
    review_id: uuid.UUID, body: ReviewModerate, _admin: AdminUser, reviews: Reviews
) -> dict[str, Any]:
    """Approve or reject a review; the astrologer's rating is recomputed."""
    return ok(reviews.moderate(review_id, body.status), "Review updated")


@router.get("/users")
def list_users(
    _admin: AdminUser,
    users: Users,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    search: str | None = None,
    is_active: bool | None = Query(default=None, alias="isActive"),
) -> dict[str, Any]:
    items, total = users.list_users(search=search, is_active=is_active, page=page, limit=limit)
    return paginated(items, calculate_pagination(total, page, limit))


@router.post("/categories", status_code=status.HTTP_201_CREATED)
def create_category(body: CategoryCreate, _admin: AdminUser, content: Content) -> dict[str, Any]:
    return ok(content.create_category(body), "Category created successfully")


@router.put("/categories/{category_id}")
def update_category(
    category_id: uuid.UUID, body: CategoryUpdate, _admin: AdminUser, content: Content
) -> dict[str, Any]:
    return ok(content.update_category(category_id, body), "Category updated successfully")


@router.delete("/categories/{category_id}")
def delete_category(category_id: uuid.UUID, _admin: AdminUser, content: Content) -> dict[str, Any]:
    content.delete_category(category_id)
    return ok(message="Category deleted successfully")


@router.post("/banners", status_code=status.HTTP_201_CREATED)
def create_banner(body: BannerCreate, _admin: AdminUser, content: Content) -> dict[str, Any]:
    return ok(content.create_banner(body), "Banner created successfully")


@router.put("/banners/{banner_id}")
def update_banner(
    banner_id: uuid.UUID, body: BannerUpdate, _admin: AdminUser, content: Content
) -> dict[str, Any]:
    return ok(content.update_banner(banner_id, body), "Banner updated successfully")


@router.delete("/banners/{banner_id}")
def delete_banner(banner_id: uuid.UUID, _admin: AdminUser, content: Content) -> dict[str, Any]:
    content.delete_banner(banner_id)
    return ok(message="Banner deleted successfully")


@router.post("/notifications", status_code=status.HTTP_201_CREATED)
def send_notification(
    body: NotificationSend, _admin: AdminUser, notifications: Notifications
) -> dict[str, Any]:
    """``targetUsers: ["all"]`` stores a single broadcast row."""
    return ok({"count": notifications.send(body)}, "Notification(s) sent successfully")


@router.get("/feedback")
def list_feedback(
    _admin: AdminUser,
    feedback: Feedbacks,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    feedback_status: FeedbackStatus | None = Query(default=None, alias="status"),
    rating: int | None = Query(default=None, ge=1, le=5),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
) -> dict[str, Any]:
    filters = FeedbackFilters(
        status=feedback_status, rating=rating, start_date=start_date, end_date=end_date
    )
    items, total = feedback.list_feedback(filters, page=page, limit=limit)
    return paginated(items, calculate_pagination(total, page, limit))


@router.patch("/feedback/{feedback_id}")
def update_feedback(
    feedback_id: uuid.UUID, body: FeedbackUpdate, _admin: AdminUser, feedback: Feedbacks
) -> dict[str, Any]:
    return ok(feedback.update(feedback_id, body), "Feedback updated successfully")


@router.delete("/feedback/{feedback_id}")
def delete_feedback(feedback_id: uuid.UUID, _admin: AdminUser, feedback: Feedbacks) -> dict[str, Any]:
    feedback.delete(feedback_id)
    return ok(message="Feedback deleted successfully")

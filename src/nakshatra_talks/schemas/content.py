"""Home-screen content, notifications, feedback and admin listing bodies."""
import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import Field

from nakshatra_talks.db.models import (FeedbackStatus, NotificationType,
                                       UserRole)
from nakshatra_talks.schemas.auth import EMAIL_PATTERN, PHONE_PATTERN
from nakshatra_talks.schemas.base import ApiModel, Money

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class CategoryOut(ApiModel):
    id: uuid.UUID
    name: str
    icon: str
    description: str | None = None
    order: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class CategoryCreate(ApiModel):
    name: str = Field(min_length=1, max_length=80)
    icon: str = Field(min_length=1)
    description: str | None = None
    order: int = 0
    is_active: bool = True


class CategoryUpdate(ApiModel):
    """Unset fields are left alone."""

    name: str | None = Field(default=None, min_length=1, max_length=80)
    icon: str | None = Field(default=None, min_length=1)
    description: str | None = None
    order: int | None = None
    is_active: bool | None = None


class BannerOut(ApiModel):
    id: uuid.UUID
    title: str
    subtitle: str | None = None
    button_text: str | None = None
    button_action: str | None = None
    image: str | None = None
    background_color: str
    order: int
    is_active: bool
    start_date: datetime | None = None
    end_date: datetime | None = None
    created_at: datetime


class BannerCreate(ApiModel):
    title: str = Field(min_length=1, max_length=120)
    subtitle: str | None = None
    button_text: str | None = None
    button_action: str | None = None
    image: str | None = None
    background_color: str = Field(default="#FFCF0D", pattern=HEX_COLOR_PATTERN)
    order: int = 0
    is_active: bool = True
    start_date: datetime | None = None
    end_date: datetime | None = None


class BannerUpdate(ApiModel):
    title: str | None = Field(default=None, min_length=1, max_length=120)
    subtitle: str | None = None
    button_text: str | None = None
    button_action: str | None = None
    image: str | None = None
    background_color: str | None = Field(default=None, pattern=HEX_COLOR_PATTERN)
    order: int | None = None
    is_active: bool | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


class NotificationOut(ApiModel):
    id: uuid.UUID
    user_id: uuid.UUID | None = None
    title: str
    message: str
    type: NotificationType
    data: dict[str, Any] = {}
    is_read: bool
    scheduled_at: datetime | None = None
    created_at: datetime


class NotificationSend(ApiModel):
    """``target_users`` is ``["all"]`` for a broadcast or a list of user ids."""

    title: str = Field(min_length=1, max_length=120)
    message: str = Field(min_length=1)
    type: NotificationType
    target_users: list[uuid.UUID | Literal["all"]] = Field(min_length=1)
    scheduled_at: datetime | None = None
    data: dict[str, Any] = {}

    @property
    def is_broadcast(self) -> bool:
        return "all" in self.target_users

    @property
    def recipients(self) -> list[uuid.UUID]:
        return [target for target in self.target_users if isinstance(target, uuid.UUID)]


class FeedbackCreate(ApiModel):
    name: str = Field(min_length=1, max_length=120)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN)
    rating: int | None = Field(default=None, ge=1, le=5)
    category: str = "general"
    comments: str = Field(min_length=10)


class FeedbackOut(ApiModel):
    id: uuid.UUID
    user_id: uuid.UUID | None = None
    name: str
    email: str | None = None
    phone: str | None = None
    rating: int | None = None
    category: str
    comments: str
    status: FeedbackStatus
    admin_notes: str | None = None
    created_at: datetime
    updated_at: datetime


class FeedbackReceipt(ApiModel):
    feedback_id: uuid.UUID
    status: FeedbackStatus
    created_at: datetime


class FeedbackUpdate(ApiModel):
    status: FeedbackStatus | None = None
    admin_notes: str | None = None


class LiveStatusUpdate(ApiModel):
    is_live: bool


class AdminUserOut(ApiModel):
    user_id: uuid.UUID = Field(validation_alias="id")
    name: str | None = None
    phone: str
    email: str | None = None
    profile_image: str | None = None
    wallet_balance: Money
    role: UserRole
    is_active: bool
    created_at: datetime

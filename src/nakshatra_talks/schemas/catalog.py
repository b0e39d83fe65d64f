"""Astrologer discovery, presence and review bodies."""
import uuid
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import Field

from nakshatra_talks.db.models import AstrologerStatus, ReviewStatus
from nakshatra_talks.schemas.base import ApiModel, Money


class AstrologerSort(str, Enum):
    RATING = "rating"
    PRICE = "price"
    EXPERIENCE = "experience"
    CALLS = "calls"


class AstrologerSummary(ApiModel):
    id: uuid.UUID
    name: str
    image: str | None = None
    is_live: bool
    is_available: bool
    specialization: list[str] = []
    languages: list[str] = []
    experience: int
    rating: Money
    total_calls: int
    chat_price_per_minute: Money
    call_price_per_minute: Money
    next_available_at: datetime | None = None


class ReviewOut(ApiModel):
    id: uuid.UUID
    user_id: uuid.UUID
    user_name: str
    astrologer_id: uuid.UUID
    session_id: uuid.UUID
    rating: int
    comment: str | None = None
    tags: list[str] = []
    status: ReviewStatus
    created_at: datetime


class AstrologerDetail(AstrologerSummary):
    email: str | None = None
    phone: str
    bio: str | None = None
    education: list[str] = []
    working_hours: dict[str, Any] = {}
    total_reviews: int
    status: AstrologerStatus
    last_activity_at: datetime | None = None
    reviews: list[ReviewOut] = []


class ReviewCreate(ApiModel):
    session_id: uuid.UUID
    rating: int = Field(ge=1, le=5)
    comment: str | None = None
    tags: list[str] = []


class ReviewModerate(ApiModel):
    status: ReviewStatus


class AvailabilityUpdate(ApiModel):
    is_available: bool


class PresenceOut(ApiModel):
    id: uuid.UUID
    is_available: bool
    is_live: bool
    last_activity_at: datetime | None = None

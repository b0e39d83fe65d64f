"""Request and response bodies for sessions, wallet and the pricing gate."""
import uuid
from datetime import datetime

from pydantic import Field

from nakshatra_talks.db.models import (EndReason, MessageType, SenderType,
                                       SessionStatus, SessionType,
                                       TransactionStatus, TransactionType)
from nakshatra_talks.schemas.base import ApiModel, Money

# Reasons a client may give; SUPERSEDED is reserved for the auto-end path.
CLIENT_END_REASONS = frozenset(
    {
        EndReason.USER_ENDED,
        EndReason.ASTROLOGER_ENDED,
        EndReason.TIMEOUT,
        EndReason.INSUFFICIENT_BALANCE,
    }
)


class StartSessionRequest(ApiModel):
    astrologer_id: uuid.UUID
    session_type: SessionType = SessionType.CHAT


class EndSessionRequest(ApiModel):
    end_reason: EndReason | None = None


class RateSessionRequest(ApiModel):
    rating: int = Field(ge=1, le=5)
    review: str | None = None
    tags: list[str] | None = None


class ValidateBalanceRequest(ApiModel):
    astrologer_id: uuid.UUID
    session_type: SessionType = SessionType.CHAT


class RechargeRequest(ApiModel):
    amount: Money = Field(gt=0, max_digits=12, decimal_places=2)
    payment_method: str = Field(min_length=1)
    payment_id: str = Field(min_length=1)


class SessionOut(ApiModel):
    """Full session record; cost fields stay null until the session ends."""

    id: uuid.UUID
    user_id: uuid.UUID
    astrologer_id: uuid.UUID
    astrologer_name: str | None = None
    session_type: SessionType
    start_time: datetime
    end_time: datetime | None = None
    duration: float | None = None
    price_per_minute: Money
    total_cost: Money | None = None
    status: SessionStatus
    end_reason: EndReason | None = None
    rating: int | None = None
    review: str | None = None
    tags: list[str] | None = None
    created_at: datetime
    updated_at: datetime


class SettlementOut(ApiModel):
    """Outcome of ending a session."""

    session_id: uuid.UUID
    session_type: SessionType
    start_time: datetime
    end_time: datetime
    duration: float
    duration_seconds: int
    price_per_minute: Money
    total_cost: Money
    remaining_balance: Money
    transaction_id: uuid.UUID
    end_reason: EndReason | None = None
    status: SessionStatus


class RatingOut(ApiModel):
    session_id: uuid.UUID
    rating: int


class BalanceCheck(ApiModel):
    """Result of the read-only affordability check."""

    can_start: bool
    session_type: SessionType
    current_balance: Money
    price_per_minute: Money
    minimum_required: Money
    estimated_minutes: int | None = None
    shortfall: Money | None = None


class BalanceOut(ApiModel):
    user_id: uuid.UUID
    balance: Money
    currency: str
    last_updated: datetime


class CreditOut(ApiModel):
    transaction_id: uuid.UUID
    amount: Money
    new_balance: Money
    status: TransactionStatus


class TransactionOut(ApiModel):
    id: uuid.UUID
    user_id: uuid.UUID
    type: TransactionType
    amount: Money
    description: str
    astrologer_id: uuid.UUID | None = None
    astrologer_name: str | None = None
    session_id: uuid.UUID | None = None
    duration: float | None = None
    payment_method: str | None = None
    status: TransactionStatus
    balance_before: Money
    balance_after: Money
    created_at: datetime


class MessageCreate(ApiModel):
    message: str = Field(min_length=1)
    type: MessageType = MessageType.TEXT


class MessageOut(ApiModel):
    id: uuid.UUID
    session_id: uuid.UUID
    sender_id: uuid.UUID
    sender_type: SenderType
    message: str
    type: MessageType
    is_read: bool
    created_at: datetime

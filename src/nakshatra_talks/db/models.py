"""Database models for the consultation marketplace.

Money columns are fixed-point decimals. Enum-valued columns are stored as their
lowercase string values so that raw SQL (e.g. the partial unique index on active
sessions) can refer to them directly.
"""
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy import JSON, CheckConstraint, DateTime, Index, String, text
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field, SQLModel

from nakshatra_talks.utils import utcnow


class UTCDateTime(TypeDecorator):
    """Timestamp column that always round-trips as an aware UTC datetime.

    Naive input is taken to be UTC. SQLite has no zone support, so values are
    written there as naive UTC and re-tagged on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class UserRole(str, Enum):
    USER = "user"
    ASTROLOGER = "astrologer"
    ADMIN = "admin"


class AstrologerStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    INACTIVE = "inactive"


class SessionType(str, Enum):
    CHAT = "chat"
    CALL = "call"
    VIDEO = "video"


class SessionStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class EndReason(str, Enum):
    USER_ENDED = "user_ended"
    ASTROLOGER_ENDED = "astrologer_ended"
    TIMEOUT = "timeout"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    SUPERSEDED = "superseded"  # a new session was started while this one was active


class TransactionType(str, Enum):
    RECHARGE = "recharge"
    DEBIT = "debit"
    REFUND = "refund"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    COMPLETED = "completed"


class ReviewStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class MessageType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    FILE = "file"


class SenderType(str, Enum):
    USER = "user"
    ASTROLOGER = "astrologer"


class NotificationType(str, Enum):
    WALLET = "wallet"
    CHAT = "chat"
    PROMOTION = "promotion"
    SYSTEM = "system"


class FeedbackStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"


class User(SQLModel, table=True):
    """Client account; created on first OTP verification."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("wallet_balance >= 0", name="ck_users_wallet_balance_non_negative"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    phone: str = Field(unique=True, index=True)
    name: str | None = None
    email: str | None = None
    profile_image: str | None = None
    date_of_birth: date | None = None
    place_of_birth: str | None = None
    time_of_birth: str | None = None
    gender: str | None = None
    marital_status: str | None = None
    # Written only by WalletLedger.
    wallet_balance: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    role: UserRole = Field(default=UserRole.USER, sa_type=String(16), index=True)
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class Astrologer(SQLModel, table=True):
    """Astrologer profile, per-minute prices and presence flags."""

    __tablename__ = "astrologers"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    phone: str = Field(unique=True, index=True)
    name: str
    email: str | None = None
    image: str | None = None
    bio: str | None = None
    specialization: list[str] = Field(default_factory=list, sa_type=JSON)
    languages: list[str] = Field(default_factory=list, sa_type=JSON)
    education: list[str] = Field(default_factory=list, sa_type=JSON)
    experience: int = 0
    chat_price_per_minute: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    call_price_per_minute: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    # Derived from approved reviews; never set from client input.
    rating: Decimal = Field(default=Decimal("0.0"), max_digits=3, decimal_places=1)
    total_reviews: int = 0
    total_calls: int = 0
    is_available: bool = Field(default=True, index=True)
    is_live: bool = Field(default=False, index=True)
    last_activity_at: datetime | None = Field(default=None, sa_type=UTCDateTime)
    next_available_at: datetime | None = Field(default=None, sa_type=UTCDateTime)
    working_hours: dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    status: AstrologerStatus = Field(
        default=AstrologerStatus.PENDING, sa_type=String(16), index=True
    )
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class ChatSession(SQLModel, table=True):
    """A billed chat/call/video consultation.

    At most one row per user may be ``active``; the partial unique index below
    backs the application-level auto-end policy.
    """

    __tablename__ = "chat_sessions"
    __table_args__ = (
        Index(
            "uq_chat_sessions_one_active_per_user",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)
    astrologer_id: uuid.UUID = Field(foreign_key="astrologers.id", index=True)
    session_type: SessionType = Field(sa_type=String(16))
    start_time: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    end_time: datetime | None = Field(default=None, sa_type=UTCDateTime)
    # Snapshotted at creation; later price changes do not affect the session.
    price_per_minute: Decimal = Field(max_digits=10, decimal_places=2)
    duration: float | None = None  # minutes, fractional
    total_cost: Decimal | None = Field(default=None, max_digits=12, decimal_places=2)
    status: SessionStatus = Field(default=SessionStatus.ACTIVE, sa_type=String(16), index=True)
    end_reason: EndReason | None = Field(default=None, sa_type=String(32))
    rating: int | None = None
    review: str | None = None
    tags: list[str] | None = Field(default=None, sa_type=JSON)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, index=True)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class Transaction(SQLModel, table=True):
    """Immutable ledger row, one per balance mutation.

    ``amount`` is signed: positive for recharges/refunds, negative for debits.
    """

    __tablename__ = "transactions"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)
    type: TransactionType = Field(sa_type=String(16), index=True)
    amount: Decimal = Field(max_digits=12, decimal_places=2)
    description: str
    astrologer_id: uuid.UUID | None = Field(default=None, foreign_key="astrologers.id")
    session_id: uuid.UUID | None = None
    duration: float | None = None
    payment_id: str | None = None
    payment_method: str | None = None
    status: TransactionStatus = Field(
        default=TransactionStatus.PENDING, sa_type=String(16), index=True
    )
    balance_before: Decimal = Field(max_digits=12, decimal_places=2)
    balance_after: Decimal = Field(max_digits=12, decimal_places=2)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, index=True)


class Review(SQLModel, table=True):
    """Public review of an astrologer, one per completed session."""

    __tablename__ = "reviews"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)
    user_name: str = "Anonymous"
    astrologer_id: uuid.UUID = Field(foreign_key="astrologers.id", index=True)
    session_id: uuid.UUID = Field(foreign_key="chat_sessions.id", unique=True)
    rating: int
    comment: str | None = None
    tags: list[str] = Field(default_factory=list, sa_type=JSON)
    status: ReviewStatus = Field(default=ReviewStatus.APPROVED, sa_type=String(16), index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, index=True)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class ChatMessage(SQLModel, table=True):
    """Message exchanged inside an active session."""

    __tablename__ = "chat_messages"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    session_id: uuid.UUID = Field(foreign_key="chat_sessions.id", index=True)
    sender_id: uuid.UUID
    sender_type: SenderType = Field(sa_type=String(16))
    message: str
    type: MessageType = Field(default=MessageType.TEXT, sa_type=String(16))
    is_read: bool = False
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, index=True)


class Category(SQLModel, table=True):
    """Consultation category shown on the home screen."""

    __tablename__ = "categories"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str
    icon: str
    description: str | None = None
    order: int = Field(default=0, index=True)
    is_active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class Banner(SQLModel, table=True):
    """Promotional banner, optionally limited to a ``start_date``/``end_date`` window."""

    __tablename__ = "banners"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str
    subtitle: str | None = None
    button_text: str | None = None
    button_action: str | None = None
    image: str | None = None
    background_color: str = "#FFCF0D"
    order: int = Field(default=0, index=True)
    is_active: bool = Field(default=True, index=True)
    start_date: datetime | None = Field(default=None, sa_type=UTCDateTime)
    end_date: datetime | None = Field(default=None, sa_type=UTCDateTime)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class Notification(SQLModel, table=True):
    """In-app notification. A null ``user_id`` is a broadcast seen by every user."""

    __tablename__ = "notifications"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID | None = Field(default=None, foreign_key="users.id", index=True)
    title: str
    message: str
    type: NotificationType = Field(sa_type=String(16))
    data: dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    is_read: bool = Field(default=False, index=True)
    scheduled_at: datetime | None = Field(default=None, sa_type=UTCDateTime)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, index=True)


class Feedback(SQLModel, table=True):
    """App feedback; may be sent without signing in."""

    __tablename__ = "feedback"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID | None = Field(default=None, foreign_key="users.id", index=True)
    name: str
    email: str | None = None
    phone: str | None = None
    rating: int | None = None
    category: str = "general"
    comments: str
    status: FeedbackStatus = Field(
        default=FeedbackStatus.PENDING, sa_type=String(16), index=True
    )
    admin_notes: str | None = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, index=True)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

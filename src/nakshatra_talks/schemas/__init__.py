"""Pydantic schemas for the HTTP API. Not persisted to DB."""
from nakshatra_talks.schemas.auth import (IdentitySession, IdentityUser,
                                          ProfileUpdate, SendOtpRequest,
                                          TokenOut, UserOut, VerifyOtpRequest)
from nakshatra_talks.schemas.base import (ApiModel, Money, PaginationMeta,
                                          calculate_pagination, ok, paginated)
from nakshatra_talks.schemas.billing import (CLIENT_END_REASONS, BalanceCheck,
                                             BalanceOut, CreditOut,
                                             EndSessionRequest, MessageCreate,
                                             MessageOut, RateSessionRequest,
                                             RatingOut, RechargeRequest,
                                             SessionOut, SettlementOut,
                                             StartSessionRequest,
                                             TransactionOut,
                                             ValidateBalanceRequest)
from nakshatra_talks.schemas.catalog import (AstrologerDetail, AstrologerSort,
                                             AstrologerSummary,
                                             AvailabilityUpdate, PresenceOut,
                                             ReviewCreate, ReviewModerate,
                                             ReviewOut)
from nakshatra_talks.schemas.content import (AdminUserOut, BannerCreate,
                                             BannerOut, BannerUpdate,
                                             CategoryCreate, CategoryOut,
                                             CategoryUpdate, FeedbackCreate,
                                             FeedbackOut, FeedbackReceipt,
                                             FeedbackUpdate, LiveStatusUpdate,
                                             NotificationOut, NotificationSend)

__all__ = [
    "AdminUserOut",
    "ApiModel",
    "AstrologerDetail",
    "AstrologerSort",
    "AstrologerSummary",
    "AvailabilityUpdate",
    "BalanceCheck",
    "BalanceOut",
    "BannerCreate",
    "BannerOut",
    "BannerUpdate",
    "CategoryCreate",
    "CategoryOut",
    "CategoryUpdate",
    "CLIENT_END_REASONS",
    "CreditOut",
    "EndSessionRequest",
    "FeedbackCreate",
    "FeedbackOut",
    "FeedbackReceipt",
    "FeedbackUpdate",
    "IdentitySession",
    "IdentityUser",
    "LiveStatusUpdate",
    "MessageCreate",
    "MessageOut",
    "Money",
    "NotificationOut",
    "NotificationSend",
    "PaginationMeta",
    "PresenceOut",
    "ProfileUpdate",
    "RateSessionRequest",
    "RatingOut",
    "RechargeRequest",
    "ReviewCreate",
    "ReviewModerate",
    "ReviewOut",
    "SendOtpRequest",
    "SessionOut",
    "SettlementOut",
    "StartSessionRequest",
    "TokenOut",
    "TransactionOut",
    "UserOut",
    "ValidateBalanceRequest",
    "calculate_pagination",
    "ok",
    "paginated",
]

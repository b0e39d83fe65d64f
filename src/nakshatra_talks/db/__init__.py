"""Database package: models and session management."""
from nakshatra_talks.db.models import (Astrologer, AstrologerStatus, Banner,
                                       Category, ChatMessage, ChatSession,
                                       EndReason, Feedback, FeedbackStatus,
                                       MessageType, Notification,
                                       NotificationType, Review, ReviewStatus,
                                       SenderType, SessionStatus, SessionType,
                                       Transaction, TransactionStatus,
                                       TransactionType, User, UserRole)

__all__ = [
    "Astrologer",
    "AstrologerStatus",
    "Banner",
    "Category",
    "ChatMessage",
    "ChatSession",
    "EndReason",
    "Feedback",
    "FeedbackStatus",
    "MessageType",
    "Notification",
    "NotificationType",
    "Review",
    "ReviewStatus",
    "SenderType",
    "SessionStatus",
    "SessionType",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
    "User",
    "UserRole",
]

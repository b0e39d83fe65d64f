"""Business logic services; each one works inside the caller's unit of work."""
from nakshatra_talks.services.auth import AuthService
from nakshatra_talks.services.catalog import AstrologerCatalog, AstrologerFilters
from nakshatra_talks.services.content import HomeContent
from nakshatra_talks.services.feedback import FeedbackFilters, FeedbackService
from nakshatra_talks.services.messages import SessionMessages
from nakshatra_talks.services.notifications import NotificationService
from nakshatra_talks.services.pricing_gate import (PricingGate,
                                                   check_affordability,
                                                   price_for, session_cost)
from nakshatra_talks.services.reviews import ReviewService, recompute_rating
from nakshatra_talks.services.session_lifecycle import (SessionFilters,
                                                        SessionLifecycle,
                                                        settlement_message)
from nakshatra_talks.services.users import UserService
from nakshatra_talks.services.wallet_ledger import (CreditResult, DebitResult,
                                                    TransactionFilters,
                                                    WalletLedger)

__all__ = [
    "AstrologerCatalog",
    "AstrologerFilters",
    "AuthService",
    "CreditResult",
    "DebitResult",
    "FeedbackFilters",
    "FeedbackService",
    "HomeContent",
    "NotificationService",
    "PricingGate",
    "ReviewService",
    "SessionFilters",
    "SessionLifecycle",
    "SessionMessages",
    "TransactionFilters",
    "UserService",
    "WalletLedger",
    "check_affordability",
    "price_for",
    "recompute_rating",
    "session_cost",
    "settlement_message",
]

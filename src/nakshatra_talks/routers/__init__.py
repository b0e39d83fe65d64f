"""API routers.

Includes routes for:
- /auth - phone OTP login and the current user
- /api/v1/chat - consultation sessions, billing and in-session messages
- /api/v1/wallet - balance, recharge, transaction history
- /api/v1/astrologers - discovery, search, reviews, presence
- /api/v1/users - profile
- /api/v1/notifications - the user's inbox
- /api/v1 - categories, banners, specializations, feedback
- /api/v1/admin - ledger audit, moderation, content and user management
"""
from nakshatra_talks.routers.admin import router as admin_router
from nakshatra_talks.routers.astrologers import router as astrologers_router
from nakshatra_talks.routers.auth import router as auth_router
from nakshatra_talks.routers.chat import router as chat_router
from nakshatra_talks.routers.content import router as content_router
from nakshatra_talks.routers.notifications import router as notifications_router
from nakshatra_talks.routers.users import router as users_router
from nakshatra_talks.routers.wallet import router as wallet_router

__all__ = [
    "admin_router",
    "astrologers_router",
    "auth_router",
    "chat_router",
    "content_router",
    "notifications_router",
    "users_router",
    "wallet_router",
]

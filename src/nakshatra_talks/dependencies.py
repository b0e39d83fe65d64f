"""Dependency injection for FastAPI.

Shared resources (DB engine, identity provider, clock) live on ``app.state``
and are wired in the lifespan. Each request gets one DB session (its unit of
work) and services built on top of it.
"""
from collections.abc import Callable, Generator
from datetime import datetime
from typing import Annotated

from fastapi import Depends, Header, Request
from sqlmodel import Session

from nakshatra_talks.db.models import User, UserRole
from nakshatra_talks.db.sessions import get_session
from nakshatra_talks.errors import ForbiddenError, UnauthorizedError
from nakshatra_talks.providers import IdentityProviderABC
from nakshatra_talks.schemas import IdentityUser
from nakshatra_talks.services import (AstrologerCatalog, AuthService,
                                      FeedbackService, HomeContent,
                                      NotificationService, PricingGate,
                                      ReviewService, SessionLifecycle,
                                      SessionMessages, UserService,
                                      WalletLedger)
from nakshatra_talks.utils import utcnow


def get_db(request: Request) -> Generator[Session, None, None]:
    """One session per request; committed after the handler returns."""
    with get_session(request.app.state.engine) as session:
        yield session


def get_identity_provider(request: Request) -> IdentityProviderABC:
    """Inject the shared identity provider (abstraction)."""
    return request.app.state.identity_provider


def get_clock(request: Request) -> Callable[[], datetime]:
    return getattr(request.app.state, "clock", utcnow)


DbSession = Annotated[Session, Depends(get_db)]
Clock = Annotated[Callable[[], datetime], Depends(get_clock)]


def get_auth_service(
    provider: Annotated[IdentityProviderABC, Depends(get_identity_provider)],
) -> AuthService:
    return AuthService(provider)


Auth = Annotated[AuthService, Depends(get_auth_service)]


async def get_identity(
    auth: Auth,
    authorization: Annotated[str | None, Header()] = None,
) -> IdentityUser:
    """Verify the bearer token with the identity provider."""
    return await auth.resolve_token(authorization)


def get_current_user(
    identity: Annotated[IdentityUser, Depends(get_identity)],
    db: DbSession,
) -> User:
    """Local user for the verified identity; provisioned on first request."""
    user = UserService(db).provision(identity)
    if not user.is_active:
        raise UnauthorizedError("Account is disabled")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


async def get_optional_identity(
    auth: Auth,
    authorization: Annotated[str | None, Header()] = None,
) -> IdentityUser | None:
    """Verified identity when a bearer token is sent, else None."""
    if not authorization:
        return None
    return await auth.resolve_token(authorization)


def get_optional_user(
    identity: Annotated[IdentityUser | None, Depends(get_optional_identity)],
    db: DbSession,
) -> User | None:
    if identity is None:
        return None
    return get_current_user(identity, db)


OptionalUser = Annotated[User | None, Depends(get_optional_user)]


def require_admin(user: CurrentUser) -> User:
    if user.role != UserRole.ADMIN:
        raise ForbiddenError("Admin access required")
    return user


AdminUser = Annotated[User, Depends(require_admin)]


def get_wallet_ledger(db: DbSession) -> WalletLedger:
    return WalletLedger(db)


Ledger = Annotated[WalletLedger, Depends(get_wallet_ledger)]


def get_pricing_gate(db: DbSession, ledger: Ledger) -> PricingGate:
    return PricingGate(db, ledger)


Gate = Annotated[PricingGate, Depends(get_pricing_gate)]


def get_session_lifecycle(
    db: DbSession,
    ledger: Ledger,
    gate: Gate,
    clock: Clock,
) -> SessionLifecycle:
    return SessionLifecycle(db, ledger, gate, clock=clock)


Lifecycle = Annotated[SessionLifecycle, Depends(get_session_lifecycle)]


def get_session_messages(db: DbSession) -> SessionMessages:
    return SessionMessages(db)


Messages = Annotated[SessionMessages, Depends(get_session_messages)]


def get_review_service(db: DbSession) -> ReviewService:
    return ReviewService(db)


Reviews = Annotated[ReviewService, Depends(get_review_service)]


def get_catalog(db: DbSession) -> AstrologerCatalog:
    return AstrologerCatalog(db)


Catalog = Annotated[AstrologerCatalog, Depends(get_catalog)]


def get_user_service(db: DbSession) -> UserService:
    return UserService(db)


Users = Annotated[UserService, Depends(get_user_service)]


def get_home_content(db: DbSession, clock: Clock) -> HomeContent:
    return HomeContent(db, clock=clock)


Content = Annotated[HomeContent, Depends(get_home_content)]


def get_notification_service(db: DbSession, clock: Clock) -> NotificationService:
    return NotificationService(db, clock=clock)


Notifications = Annotated[NotificationService, Depends(get_notification_service)]


def get_feedback_service(db: DbSession) -> FeedbackService:
    return FeedbackService(db)


Feedbacks = Annotated[FeedbackService, Depends(get_feedback_service)]

"""Affordability checks and per-session cost arithmetic."""
import uuid
from decimal import Decimal

from sqlmodel import Session

from nakshatra_talks.config import MINIMUM_SESSION_MINUTES
from nakshatra_talks.db.models import Astrologer, AstrologerStatus, SessionType
from nakshatra_talks.errors import BadRequestError, NotFoundError
from nakshatra_talks.schemas import BalanceCheck
from nakshatra_talks.services.wallet_ledger import WalletLedger
from nakshatra_talks.utils import to_money


def price_for(astrologer: Astrologer, session_type: SessionType) -> Decimal:
    """Per-minute price for a session type; video is billed at the call rate."""
    if session_type == SessionType.CHAT:
        return to_money(astrologer.chat_price_per_minute)
    return to_money(astrologer.call_price_per_minute)


def session_cost(duration_seconds: float, price_per_minute: Decimal) -> Decimal:
    """Exact fractional-minute cost, rounded half up to 2 decimals."""
    minutes = Decimal(str(duration_seconds)) / Decimal(60)
    return to_money(minutes * price_per_minute)


def check_affordability(
    balance: Decimal,
    price_per_minute: Decimal,
    session_type: SessionType,
    minimum_minutes: Decimal = MINIMUM_SESSION_MINUTES,
) -> BalanceCheck:
    """Whether ``balance`` covers ``minimum_minutes`` at ``price_per_minute``.

    A balance exactly equal to the minimum is enough. A free astrologer
    (price 0) can always be started and has no estimated minutes.
    """
    balance = to_money(balance)
    price = to_money(price_per_minute)
    minimum = to_money(price * minimum_minutes)
    can_start = balance >= minimum
    estimated = int(balance // price) if price > 0 else None
    return BalanceCheck(
        can_start=can_start,
        session_type=session_type,
        current_balance=balance,
        price_per_minute=price,
        minimum_required=minimum,
        estimated_minutes=estimated,
        shortfall=None if can_start else minimum - balance,
    )


class PricingGate:
    """Read-only gate in front of session start."""

    def __init__(
        self,
        session: Session,
        ledger: WalletLedger,
        *,
        minimum_minutes: Decimal = MINIMUM_SESSION_MINUTES,
    ) -> None:
        self._session = session
        self._ledger = ledger
        self._minimum_minutes = minimum_minutes

    def get_astrologer(self, astrologer_id: uuid.UUID) -> Astrologer:
        astrologer = self._session.get(Astrologer, astrologer_id)
        if astrologer is None:
            raise NotFoundError("Astrologer not found")
        return astrologer

    def get_bookable_astrologer(self, astrologer_id: uuid.UUID) -> Astrologer:
        """Astrologer that may take a new session right now.

        Raises:
            NotFoundError: unknown astrologer.
            BadRequestError: not approved, or marked unavailable.
        """
        astrologer = self.get_astrologer(astrologer_id)
        if astrologer.status != AstrologerStatus.APPROVED:
            raise BadRequestError("Astrologer is not accepting sessions")
        if not astrologer.is_available:
            raise BadRequestError("Astrologer is currently unavailable")
        return astrologer

    def check(
        self, user_id: uuid.UUID, astrologer: Astrologer, session_type: SessionType
    ) -> BalanceCheck:
        balance = self._ledger.get_balance(user_id)
        return check_affordability(
            balance, price_for(astrologer, session_type), session_type, self._minimum_minutes
        )

    def validate_balance(
        self, user_id: uuid.UUID, astrologer_id: uuid.UUID, session_type: SessionType
    ) -> BalanceCheck:
        """Affordability of a prospective session; changes nothing."""
        return self.check(user_id, self.get_astrologer(astrologer_id), session_type)

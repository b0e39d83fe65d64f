"""Session lifecycle: start, settle, rate and look up billed consultations.

State machine: ``active -> completed``. A session leaves ``active`` only
through ``_settle``, which debits the wallet first and marks the session
completed only if the debit succeeded. A failed debit leaves the session
active so that a later end attempt can settle it.
"""
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, or_, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from nakshatra_talks.db.models import (Astrologer, ChatSession, EndReason,
                                       SessionStatus, SessionType)
from nakshatra_talks.errors import (ConflictError, ErrorCode,
                                    InsufficientBalanceError, NotFoundError,
                                    ServerError)
from nakshatra_talks.schemas import RatingOut, SessionOut, SettlementOut
from nakshatra_talks.services.pricing_gate import (PricingGate, price_for,
                                                   session_cost)
from nakshatra_talks.services.wallet_ledger import WalletLedger
from nakshatra_talks.utils import utcnow

logger = logging.getLogger(__name__)


class SessionAlreadySettled(NotFoundError):
    """The session left ``active`` before this settlement could claim it."""

    default_message = "Active session not found"


@dataclass(frozen=True)
class SessionFilters:
    status: SessionStatus | None = None
    astrologer_id: uuid.UUID | None = None
    session_type: SessionType | None = None


def settlement_message(settlement: SettlementOut) -> str:
    """Human summary of a settlement, e.g. "Total cost: ₹15.00 for 1.5 minutes"."""
    if settlement.duration_seconds < 60:
        spent = f"{settlement.duration_seconds} seconds"
    else:
        spent = f"{settlement.duration:.1f} minutes"
    return (
        f"{settlement.session_type.value.capitalize()} session ended successfully. "
        f"Total cost: ₹{settlement.total_cost} for {spent}"
    )


class SessionLifecycle:
    """Start, end and rate sessions inside one unit of work.

    ``clock`` returns naive UTC datetimes; tests pass a fixed clock to get
    exact durations.
    """

    def __init__(
        self,
        session: Session,
        ledger: WalletLedger,
        gate: PricingGate,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session = session
        self._ledger = ledger
        self._gate = gate
        self._clock = clock

    def start(
        self, user_id: uuid.UUID, astrologer_id: uuid.UUID, session_type: SessionType
    ) -> SessionOut:
        """Open a new billed session, auto-ending any session the user still has active.

        Raises:
            NotFoundError: unknown astrologer or user.
            BadRequestError: astrologer not approved or unavailable.
            InsufficientBalanceError: balance below the minimum, or the
                previous active session could not be settled.
            ConflictError: a concurrent start won the race for the active slot.
        """
        session_type = SessionType(session_type)
        astrologer = self._gate.get_bookable_astrologer(astrologer_id)
        price = price_for(astrologer, session_type)

        # The minimum-balance floor sees the balance before any auto-end below is settled.
        check = self._gate.check(user_id, astrologer, session_type)
        if not check.can_start:
            raise InsufficientBalanceError(
                "Insufficient wallet balance",
                details={
                    "required": float(check.minimum_required),
                    "current": float(check.current_balance),
                    "shortfall": float(check.shortfall),
                },
            )

        previous = self.get_active(user_id)
        if previous is not None:
            logger.info(
                "Auto-ending session %s for user %s before starting a new one",
                previous.id,
                user_id,
            )
            try:
                self._settle(previous, EndReason.SUPERSEDED)
            except SessionAlreadySettled:
                logger.info("Session %s was settled by a concurrent request", previous.id)

        now = self._clock()
        chat_session = ChatSession(
            user_id=user_id,
            astrologer_id=astrologer.id,
            session_type=session_type,
            start_time=now,
            price_per_minute=price,
            status=SessionStatus.ACTIVE,
            created_at=now,
            updated_at=now,
        )
        try:
            with self._session.begin_nested():
                self._session.add(chat_session)
        except IntegrityError as exc:
            raise ConflictError("An active session already exists for this user") from exc

        logger.info(
            "Started %s session %s (user %s, astrologer %s, %s/min)",
            session_type.value,
            chat_session.id,
            user_id,
            astrologer.id,
            price,
        )
        return self._to_out(chat_session, astrologer.name)

    def end(
        self,
        session_id: uuid.UUID,
        user_id: uuid.UUID,
        end_reason: EndReason | None = None,
    ) -> SettlementOut:
        """Settle an active session owned by ``user_id``.

        Raises:
            NotFoundError: no active session with this id for this user.
            InsufficientBalanceError: the debit failed; the session stays active.
        """
        chat_session = self._session.exec(
            select(ChatSession).where(
                ChatSession.id == session_id,
                ChatSession.user_id == user_id,
                ChatSession.status == SessionStatus.ACTIVE,
            )
        ).first()
        if chat_session is None:
            raise NotFoundError("Active session not found")
        return self._settle(chat_session, end_reason)

    def _settle(self, chat_session: ChatSession, end_reason: EndReason | None) -> SettlementOut:
        """Claim the active row, then debit its cost.

        The claim is a conditional update on ``status = 'active'``, so of two
        overlapping settlements only one sees a row and debits. Claim and debit
        share a savepoint: a failed debit puts the session back to active.
        """
        end_time = self._clock()
        duration_seconds = max((end_time - chat_session.start_time).total_seconds(), 0.0)
        duration_minutes = duration_seconds / 60
        total_cost = session_cost(duration_seconds, chat_session.price_per_minute)

        session_type = SessionType(chat_session.session_type)
        if end_reason == EndReason.SUPERSEDED:
            description = f"{session_type.value.capitalize()} session ended automatically"
        else:
            description = f"{session_type.value.capitalize()} session with astrologer"

        with self._session.begin_nested():
            claimed = self._session.exec(
                update(ChatSession)
                .where(
                    ChatSession.id == chat_session.id,
                    ChatSession.status == SessionStatus.ACTIVE,
                )
                .values(
                    status=SessionStatus.COMPLETED,
                    end_time=end_time,
                    duration=duration_minutes,
                    total_cost=total_cost,
                    end_reason=end_reason,
                    updated_at=end_time,
                )
                .returning(ChatSession.id)
                .execution_options(synchronize_session=False)
            ).first()
            if claimed is None:
                raise SessionAlreadySettled()

            result = self._ledger.debit(
                chat_session.user_id,
                total_cost,
                description,
                astrologer_id=chat_session.astrologer_id,
                session_id=chat_session.id,
                duration_minutes=duration_minutes,
            )
            if not result.success:
                if result.error_code == ErrorCode.INSUFFICIENT_BALANCE:
                    raise InsufficientBalanceError(
                        "Insufficient wallet balance to settle session",
                        details={"sessionId": str(chat_session.id), "totalCost": float(total_cost)},
                    )
                if result.error_code == ErrorCode.NOT_FOUND:
                    raise NotFoundError(result.error)
                raise ServerError(result.error or "Failed to debit wallet")

        self._session.refresh(chat_session)
        self._increment_total_calls(chat_session.astrologer_id)
        logger.info(
            "Settled session %s: %.0fs, cost %s, balance %s",
            chat_session.id,
            duration_seconds,
            total_cost,
            result.remaining_balance,
        )
        return SettlementOut(
            session_id=chat_session.id,
            session_type=session_type,
            start_time=chat_session.start_time,
            end_time=end_time,
            duration=duration_minutes,
            duration_seconds=round(duration_seconds),
            price_per_minute=chat_session.price_per_minute,
            total_cost=total_cost,
            remaining_balance=result.remaining_balance,
            transaction_id=result.transaction_id,
            end_reason=end_reason,
            status=SessionStatus.COMPLETED,
        )

    def _increment_total_calls(self, astrologer_id: uuid.UUID) -> None:
        """Best-effort counter bump; a failure never undoes the settlement."""
        try:
            with self._session.begin_nested():
                self._session.exec(
                    update(Astrologer)
                    .where(Astrologer.id == astrologer_id)
                    .values(total_calls=Astrologer.total_calls + 1)
                )
        except SQLAlchemyError as exc:
            logger.warning("Failed to increment total calls for astrologer %s: %s", astrologer_id, exc)

    def rate(
        self,
        session_id: uuid.UUID,
        user_id: uuid.UUID,
        rating: int,
        review: str | None = None,
        tags: list[str] | None = None,
    ) -> RatingOut:
        """Attach a rating to a completed session; repeated calls overwrite it."""
        chat_session = self._session.exec(
            select(ChatSession).where(
                ChatSession.id == session_id,
                ChatSession.user_id == user_id,
                ChatSession.status == SessionStatus.COMPLETED,
            )
        ).first()
        if chat_session is None:
            raise NotFoundError("Completed session not found")

        chat_session.rating = rating
        chat_session.review = review
        chat_session.tags = tags
        chat_session.updated_at = self._clock()
        self._session.add(chat_session)
        self._session.flush()
        return RatingOut(session_id=chat_session.id, rating=rating)

    def get_active(
        self, user_id: uuid.UUID, session_types: list[SessionType] | None = None
    ) -> ChatSession | None:
        stmt = select(ChatSession).where(
            ChatSession.user_id == user_id, ChatSession.status == SessionStatus.ACTIVE
        )
        if session_types:
            stmt = stmt.where(ChatSession.session_type.in_(session_types))
        return self._session.exec(stmt).first()

    def get_active_out(
        self, user_id: uuid.UUID, session_types: list[SessionType] | None = None
    ) -> SessionOut | None:
        chat_session = self.get_active(user_id, session_types)
        if chat_session is None:
            return None
        return self._to_out(chat_session, self._astrologer_name(chat_session.astrologer_id))

    def history(
        self,
        user_id: uuid.UUID,
        filters: SessionFilters,
        *,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[SessionOut], int]:
        """Newest-first page of the user's sessions and the total count."""
        conditions = [ChatSession.user_id == user_id]
        if filters.status is not None:
            conditions.append(ChatSession.status == filters.status)
        if filters.astrologer_id is not None:
            conditions.append(ChatSession.astrologer_id == filters.astrologer_id)
        if filters.session_type is not None:
            conditions.append(ChatSession.session_type == filters.session_type)

        total = self._session.exec(
            select(func.count()).select_from(ChatSession).where(*conditions)
        ).one()
        rows = self._session.exec(
            select(ChatSession, Astrologer.name)
            .join(Astrologer, ChatSession.astrologer_id == Astrologer.id)
            .where(*conditions)
            .order_by(ChatSession.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
        return [self._to_out(chat_session, name) for chat_session, name in rows], total

    def get(self, session_id: uuid.UUID, viewer_id: uuid.UUID) -> SessionOut:
        """A session the viewer took part in, as client or as astrologer."""
        chat_session = self._session.exec(
            select(ChatSession).where(
                ChatSession.id == session_id,
                or_(ChatSession.user_id == viewer_id, ChatSession.astrologer_id == viewer_id),
            )
        ).first()
        if chat_session is None:
            raise NotFoundError("Session not found")
        return self._to_out(chat_session, self._astrologer_name(chat_session.astrologer_id))

    def _astrologer_name(self, astrologer_id: uuid.UUID) -> str | None:
        return self._session.exec(
            select(Astrologer.name).where(Astrologer.id == astrologer_id)
        ).first()

    @staticmethod
    def _to_out(chat_session: ChatSession, astrologer_name: str | None) -> SessionOut:
        return SessionOut.model_validate(chat_session).model_copy(
            update={"astrologer_name": astrologer_name}
        )

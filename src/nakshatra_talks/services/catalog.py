"""Astrologer discovery and presence (heartbeat, availability, live status, stale sweep)."""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy import or_, update
from sqlmodel import Session, select

from nakshatra_talks.db.models import (Astrologer, AstrologerStatus,
                                       SessionType, User, UserRole)
from nakshatra_talks.errors import ForbiddenError, NotFoundError
from nakshatra_talks.schemas import (AstrologerDetail, AstrologerSort,
                                     AstrologerSummary, PresenceOut)
from nakshatra_talks.services.pricing_gate import price_for
from nakshatra_talks.services.reviews import ReviewService
from nakshatra_talks.utils import utcnow

logger = logging.getLogger(__name__)

DETAIL_REVIEW_LIMIT = 10
SHOWCASE_LIMIT = 10


@dataclass(frozen=True)
class AstrologerFilters:
    q: str | None = None
    specialization: str | None = None
    language: str | None = None
    min_rating: Decimal | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    session_type: SessionType = SessionType.CHAT
    only_live: bool = False
    sort_by: AstrologerSort = AstrologerSort.RATING


def _contains(values: list[str] | None, wanted: str) -> bool:
    wanted = wanted.casefold()
    return any(value.casefold() == wanted for value in values or [])


def _matches_text(astrologer: Astrologer, text: str) -> bool:
    """Case-insensitive substring match on name, bio or any specialization."""
    needle = text.strip().casefold()
    haystack = [astrologer.name, astrologer.bio or "", *(astrologer.specialization or [])]
    return any(needle in field.casefold() for field in haystack)


def _sort(rows: list[Astrologer], sort_by: AstrologerSort, session_type: SessionType) -> None:
    """Price ascending; every other key descending."""
    if sort_by == AstrologerSort.PRICE:
        rows.sort(key=lambda a: price_for(a, session_type))
    elif sort_by == AstrologerSort.EXPERIENCE:
        rows.sort(key=lambda a: a.experience, reverse=True)
    elif sort_by == AstrologerSort.CALLS:
        rows.sort(key=lambda a: a.total_calls, reverse=True)
    else:
        rows.sort(key=lambda a: (a.rating, a.total_reviews), reverse=True)


class AstrologerCatalog:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_astrologers(
        self, filters: AstrologerFilters, *, page: int = 1, limit: int = 20
    ) -> tuple[list[AstrologerSummary], int]:
        """Approved and available astrologers matching ``filters``.

        Price sorts ascending (by the price of ``filters.session_type``);
        every other sort key is descending.
        """
        stmt = select(Astrologer).where(
            Astrologer.status == AstrologerStatus.APPROVED,
            Astrologer.is_available == True,  # noqa: E712
        )
        if filters.only_live:
            stmt = stmt.where(Astrologer.is_live == True)  # noqa: E712
        if filters.min_rating is not None:
            stmt = stmt.where(Astrologer.rating >= filters.min_rating)
        price_column = (
            Astrologer.chat_price_per_minute
            if filters.session_type == SessionType.CHAT
            else Astrologer.call_price_per_minute
        )
        if filters.min_price is not None:
            stmt = stmt.where(price_column >= filters.min_price)
        if filters.max_price is not None:
            stmt = stmt.where(price_column <= filters.max_price)
        rows = list(self._session.exec(stmt).all())

        # JSON list columns; filtered here so the same code runs on every backend.
        if filters.specialization:
            rows = [a for a in rows if _contains(a.specialization, filters.specialization)]
        if filters.language:
            rows = [a for a in rows if _contains(a.languages, filters.language)]
        if filters.q:
            rows = [a for a in rows if _matches_text(a, filters.q)]

        _sort(rows, filters.sort_by, filters.session_type)

        total = len(rows)
        start = (page - 1) * limit
        return [AstrologerSummary.model_validate(a) for a in rows[start:start + limit]], total

    def list_live(self, limit: int = SHOWCASE_LIMIT) -> list[AstrologerSummary]:
        """Approved astrologers who are live and available right now, best rated first."""
        rows = list(
            self._session.exec(
                select(Astrologer).where(
                    Astrologer.status == AstrologerStatus.APPROVED,
                    Astrologer.is_available == True,  # noqa: E712
                    Astrologer.is_live == True,  # noqa: E712
                )
            ).all()
        )
        _sort(rows, AstrologerSort.RATING, SessionType.CHAT)
        return [AstrologerSummary.model_validate(a) for a in rows[:limit]]

    def list_top_rated(
        self,
        sort_by: AstrologerSort = AstrologerSort.RATING,
        limit: int = SHOWCASE_LIMIT,
    ) -> list[AstrologerSummary]:
        """Approved astrologers regardless of presence."""
        rows = list(
            self._session.exec(
                select(Astrologer).where(Astrologer.status == AstrologerStatus.APPROVED)
            ).all()
        )
        _sort(rows, sort_by, SessionType.CHAT)
        return [AstrologerSummary.model_validate(a) for a in rows[:limit]]

    def list_specializations(self) -> list[str]:
        """Sorted distinct specializations offered by approved astrologers."""
        lists = self._session.exec(
            select(Astrologer.specialization).where(
                Astrologer.status == AstrologerStatus.APPROVED
            )
        ).all()
        return sorted({item for values in lists for item in values or []})

    def get_detail(self, astrologer_id: uuid.UUID) -> AstrologerDetail:
        astrologer = self._session.get(Astrologer, astrologer_id)
        if astrologer is None or astrologer.status != AstrologerStatus.APPROVED:
            raise NotFoundError("Astrologer not found")
        reviews = ReviewService(self._session).list_for_astrologer(
            astrologer_id, limit=DETAIL_REVIEW_LIMIT
        )
        return AstrologerDetail.model_validate(astrologer).model_copy(update={"reviews": reviews})

    def heartbeat(self, astrologer_id: uuid.UUID, caller: User) -> PresenceOut:
        """Mark the calling astrologer live and stamp its last activity."""
        if caller.id != astrologer_id:
            raise ForbiddenError("Astrologers can only send their own heartbeat")
        astrologer = self._get(astrologer_id)
        astrologer.last_activity_at = utcnow()
        astrologer.is_live = True
        self._session.add(astrologer)
        self._session.flush()
        return PresenceOut.model_validate(astrologer)

    def set_availability(self, astrologer_id: uuid.UUID, caller: User, is_available: bool) -> PresenceOut:
        if caller.id != astrologer_id and caller.role != UserRole.ADMIN:
            raise ForbiddenError("Not allowed to change this astrologer's availability")
        astrologer = self._get(astrologer_id)
        astrologer.is_available = is_available
        astrologer.updated_at = utcnow()
        self._session.add(astrologer)
        self._session.flush()
        logger.info("Astrologer %s availability set to %s", astrologer_id, is_available)
        return PresenceOut.model_validate(astrologer)

    def set_live_status(self, astrologer_id: uuid.UUID, caller: User, is_live: bool) -> PresenceOut:
        """Go live or offline. Going live counts as activity for the stale sweep."""
        if caller.id != astrologer_id and caller.role != UserRole.ADMIN:
            raise ForbiddenError("You can only update your own live status")
        astrologer = self._get(astrologer_id)
        astrologer.is_live = is_live
        now = utcnow()
        if is_live:
            astrologer.last_activity_at = now
        astrologer.updated_at = now
        self._session.add(astrologer)
        self._session.flush()
        logger.info("Astrologer %s live status set to %s", astrologer_id, is_live)
        return PresenceOut.model_validate(astrologer)

    def sweep_stale(self, stale_after_seconds: float, now: datetime | None = None) -> int:
        """Take live astrologers with no recent heartbeat offline. Returns how many changed."""
        cutoff = (now or utcnow()) - timedelta(seconds=stale_after_seconds)
        result = self._session.exec(
            update(Astrologer)
            .where(
                Astrologer.is_live == True,  # noqa: E712
                or_(Astrologer.last_activity_at.is_(None), Astrologer.last_activity_at < cutoff),
            )
            .values(is_live=False, is_available=False)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    def _get(self, astrologer_id: uuid.UUID) -> Astrologer:
        astrologer = self._session.get(Astrologer, astrologer_id)
        if astrologer is None:
            raise NotFoundError("Astrologer not found")
        return astrologer

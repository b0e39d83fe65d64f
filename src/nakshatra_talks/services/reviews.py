"""Public reviews and the astrologer rating aggregate derived from them."""
import logging
import re
import uuid
from decimal import Decimal

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from nakshatra_talks.db.models import (Astrologer, ChatSession, Review,
                                       ReviewStatus, SessionStatus, User)
from nakshatra_talks.errors import (ConflictError, ForbiddenError,
                                    NotFoundError)
from nakshatra_talks.schemas import ReviewOut
from nakshatra_talks.utils import round1, utcnow

logger = logging.getLogger(__name__)

_ANGLE_BRACKETS = re.compile(r"[<>]")


def sanitize_comment(comment: str | None) -> str | None:
    """Trim and strip angle brackets; blank comments become None."""
    if comment is None:
        return None
    cleaned = _ANGLE_BRACKETS.sub("", comment.strip())
    return cleaned or None


def recompute_rating(session: Session, astrologer_id: uuid.UUID) -> tuple[Decimal, int]:
    """Set ``rating`` to the mean of approved reviews (1 decimal) and ``total_reviews`` to their count."""
    ratings = session.exec(
        select(Review.rating).where(
            Review.astrologer_id == astrologer_id,
            Review.status == ReviewStatus.APPROVED,
        )
    ).all()
    count = len(ratings)
    average = round1(Decimal(sum(ratings)) / count) if count else Decimal("0.0")

    astrologer = session.get(Astrologer, astrologer_id)
    if astrologer is None:
        raise NotFoundError("Astrologer not found")
    astrologer.rating = average
    astrologer.total_reviews = count
    astrologer.updated_at = utcnow()
    session.add(astrologer)
    session.flush()
    return average, count


class ReviewService:
    def __init__(self, session: Session) -> None:
        self._session = session

    def submit(
        self,
        user_id: uuid.UUID,
        astrologer_id: uuid.UUID,
        session_id: uuid.UUID,
        rating: int,
        comment: str | None = None,
        tags: list[str] | None = None,
    ) -> ReviewOut:
        """Review an astrologer for a completed session the user had with them.

        Raises:
            NotFoundError: unknown astrologer.
            ForbiddenError: no such completed session between user and astrologer.
            ConflictError: the session was already reviewed.
        """
        if self._session.get(Astrologer, astrologer_id) is None:
            raise NotFoundError("Astrologer not found")

        consulted = self._session.exec(
            select(ChatSession.id).where(
                ChatSession.id == session_id,
                ChatSession.user_id == user_id,
                ChatSession.astrologer_id == astrologer_id,
                ChatSession.status == SessionStatus.COMPLETED,
            )
        ).first()
        if consulted is None:
            raise ForbiddenError("You can only review astrologers you have consulted")

        existing = self._session.exec(select(Review.id).where(Review.session_id == session_id)).first()
        if existing is not None:
            raise ConflictError("You have already reviewed this session")

        user = self._session.get(User, user_id)
        review = Review(
            user_id=user_id,
            user_name=(user.name if user and user.name else "Anonymous"),
            astrologer_id=astrologer_id,
            session_id=session_id,
            rating=rating,
            comment=sanitize_comment(comment),
            tags=tags or [],
            status=ReviewStatus.APPROVED,
        )
        try:
            with self._session.begin_nested():
                self._session.add(review)
        except IntegrityError as exc:
            raise ConflictError("You have already reviewed this session") from exc

        self._refresh_rating(astrologer_id)
        logger.info("Review %s submitted for astrologer %s", review.id, astrologer_id)
        return ReviewOut.model_validate(review)

    def list_for_astrologer(self, astrologer_id: uuid.UUID, limit: int = 20) -> list[ReviewOut]:
        """Approved reviews, newest first."""
        rows = self._session.exec(
            select(Review)
            .where(Review.astrologer_id == astrologer_id, Review.status == ReviewStatus.APPROVED)
            .order_by(Review.created_at.desc())
            .limit(limit)
        ).all()
        return [ReviewOut.model_validate(row) for row in rows]

    def moderate(self, review_id: uuid.UUID, status: ReviewStatus) -> ReviewOut:
        review = self._session.get(Review, review_id)
        if review is None:
            raise NotFoundError("Review not found")
        review.status = status
        review.updated_at = utcnow()
        self._session.add(review)
        self._session.flush()
        self._refresh_rating(review.astrologer_id)
        logger.info("Review %s moderated to %s", review_id, ReviewStatus(status).value)
        return ReviewOut.model_validate(review)

    def _refresh_rating(self, astrologer_id: uuid.UUID) -> None:
        """Best-effort recompute; the review write stands even if this fails."""
        try:
            with self._session.begin_nested():
                recompute_rating(self._session, astrologer_id)
        except (SQLAlchemyError, NotFoundError) as exc:
            logger.warning("Failed to recompute rating for astrologer %s: %s", astrologer_id, exc)

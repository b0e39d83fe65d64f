"""App feedback from users and visitors, triaged by admins."""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func
from sqlmodel import Session, select

from nakshatra_talks.db.models import Feedback, FeedbackStatus
from nakshatra_talks.errors import NotFoundError
from nakshatra_talks.schemas import (FeedbackCreate, FeedbackOut,
                                     FeedbackReceipt, FeedbackUpdate)
from nakshatra_talks.services.reviews import sanitize_comment
from nakshatra_talks.utils import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedbackFilters:
    status: FeedbackStatus | None = None
    rating: int | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


class FeedbackService:
    def __init__(self, session: Session) -> None:
        self._session = session

    def submit(self, body: FeedbackCreate, user_id: uuid.UUID | None = None) -> FeedbackReceipt:
        feedback = Feedback(
            user_id=user_id,
            name=sanitize_comment(body.name) or "Anonymous",
            email=body.email,
            phone=body.phone,
            rating=body.rating,
            category=body.category,
            comments=sanitize_comment(body.comments) or "",
        )
        self._session.add(feedback)
        self._session.flush()
        logger.info("Feedback %s received", feedback.id)
        return FeedbackReceipt(
            feedback_id=feedback.id, status=feedback.status, created_at=feedback.created_at
        )

    def list_feedback(
        self, filters: FeedbackFilters, *, page: int = 1, limit: int = 20
    ) -> tuple[list[FeedbackOut], int]:
        conditions = []
        if filters.status is not None:
            conditions.append(Feedback.status == filters.status)
        if filters.rating is not None:
            conditions.append(Feedback.rating == filters.rating)
        if filters.start_date is not None:
            conditions.append(Feedback.created_at >= filters.start_date)
        if filters.end_date is not None:
            conditions.append(Feedback.created_at <= filters.end_date)

        total = self._session.exec(
            select(func.count()).select_from(Feedback).where(*conditions)
        ).one()
        rows = self._session.exec(
            select(Feedback)
            .where(*conditions)
            .order_by(Feedback.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
        return [FeedbackOut.model_validate(row) for row in rows], total

    def update(self, feedback_id: uuid.UUID, changes: FeedbackUpdate) -> FeedbackOut:
        feedback = self._get(feedback_id)
        if changes.status is not None:
            feedback.status = changes.status
        if "admin_notes" in changes.model_fields_set:
            feedback.admin_notes = changes.admin_notes
        feedback.updated_at = utcnow()
        self._session.add(feedback)
        self._session.flush()
        logger.info("Feedback %s marked %s", feedback_id, FeedbackStatus(feedback.status).value)
        return FeedbackOut.model_validate(feedback)

    def delete(self, feedback_id: uuid.UUID) -> None:
        self._session.delete(self._get(feedback_id))
        self._session.flush()

    def _get(self, feedback_id: uuid.UUID) -> Feedback:
        feedback = self._session.get(Feedback, feedback_id)
        if feedback is None:
            raise NotFoundError("Feedback not found")
        return feedback

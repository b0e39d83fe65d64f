"""In-app notifications: per-user inbox, read state and admin sends."""
import logging
import uuid
from collections.abc import Callable
from datetime import datetime

from sqlalchemy import func, or_, update
from sqlmodel import Session, select

from nakshatra_talks.db.models import Notification, User
from nakshatra_talks.errors import BadRequestError, NotFoundError
from nakshatra_talks.schemas import NotificationOut, NotificationSend
from nakshatra_talks.utils import as_utc, utcnow

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, session: Session, clock: Callable[[], datetime] = utcnow) -> None:
        self._session = session
        self._clock = clock

    def list_for_user(
        self,
        user_id: uuid.UUID,
        *,
        is_read: bool | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[NotificationOut], int, int]:
        """Newest-first page of the user's own and broadcast notifications.

        Returns the page, the total matching ``is_read`` and the unread count.
        Scheduled notifications are hidden until their time comes.
        """
        visible = [
            or_(Notification.user_id == user_id, Notification.user_id.is_(None)),
            or_(Notification.scheduled_at.is_(None), Notification.scheduled_at <= self._clock()),
        ]
        conditions = list(visible)
        if is_read is not None:
            conditions.append(Notification.is_read == is_read)

        total = self._session.exec(
            select(func.count()).select_from(Notification).where(*conditions)
        ).one()
        unread = self._session.exec(
            select(func.count())
            .select_from(Notification)
            .where(*visible, Notification.is_read == False)  # noqa: E712
        ).one()
        rows = self._session.exec(
            select(Notification)
            .where(*conditions)
            .order_by(Notification.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
        return [NotificationOut.model_validate(row) for row in rows], total, unread

    def mark_read(self, notification_id: uuid.UUID, user_id: uuid.UUID) -> NotificationOut:
        """Only the recipient's own notifications can be marked; broadcasts are shared."""
        notification = self._session.get(Notification, notification_id)
        if notification is None or notification.user_id != user_id:
            raise NotFoundError("Notification not found")
        notification.is_read = True
        self._session.add(notification)
        self._session.flush()
        return NotificationOut.model_validate(notification)

    def mark_all_read(self, user_id: uuid.UUID) -> int:
        result = self._session.exec(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    def send(self, body: NotificationSend) -> int:
        """Store one broadcast row for ``["all"]``, else one row per recipient."""
        if body.is_broadcast:
            recipients: list[uuid.UUID | None] = [None]
        else:
            recipients = list(dict.fromkeys(body.recipients))
            known = set(self._session.exec(select(User.id).where(User.id.in_(recipients))).all())
            missing = [str(r) for r in recipients if r not in known]
            if missing:
                raise BadRequestError("Unknown target users", details={"userIds": missing})

        for recipient in recipients:
            self._session.add(
                Notification(
                    user_id=recipient,
                    title=body.title,
                    message=body.message,
                    type=body.type,
                    data=body.data,
                    scheduled_at=as_utc(body.scheduled_at),
                )
            )
        self._session.flush()
        logger.info("Sent %s notification(s) of type %s", len(recipients), body.type.value)
        return len(recipients)

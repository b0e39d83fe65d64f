"""Local user accounts: provisioning, profile edits and the admin listing."""
import logging
import uuid

from sqlalchemy import func, or_
from sqlmodel import Session, select

from nakshatra_talks.db.models import User
from nakshatra_talks.errors import NotFoundError
from nakshatra_talks.schemas import (AdminUserOut, IdentityUser, ProfileUpdate,
                                     UserOut)
from nakshatra_talks.utils import utcnow

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, user_id: uuid.UUID) -> User:
        user = self._session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def provision(self, identity: IdentityUser) -> User:
        """Local user for a verified identity, created on first sight.

        Matches by identity id first, then by phone, so a user seeded before
        their first login keeps their wallet.
        """
        user = self._session.get(User, identity.id)
        if user is None and identity.phone:
            user = self._session.exec(select(User).where(User.phone == identity.phone)).first()
        if user is not None:
            return user

        user = User(
            id=identity.id,
            phone=identity.phone or str(identity.id),
            email=identity.email,
        )
        self._session.add(user)
        self._session.flush()
        logger.info("Provisioned local user %s", user.id)
        return user

    def get_profile(self, user_id: uuid.UUID) -> UserOut:
        return UserOut.model_validate(self.get(user_id))

    def update_profile(self, user_id: uuid.UUID, changes: ProfileUpdate) -> UserOut:
        """Apply only the fields present in the request."""
        user = self.get(user_id)
        for field, value in changes.model_dump(exclude_unset=True).items():
            setattr(user, field, value)
        user.updated_at = utcnow()
        self._session.add(user)
        self._session.flush()
        return UserOut.model_validate(user)

    def list_users(
        self,
        *,
        search: str | None = None,
        is_active: bool | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[AdminUserOut], int]:
        """Newest-first page of accounts; ``search`` matches name, email or phone."""
        conditions = []
        if search:
            pattern = f"%{search.strip().lower()}%"
            conditions.append(
                or_(
                    func.lower(User.name).like(pattern),
                    func.lower(User.email).like(pattern),
                    User.phone.like(pattern),
                )
            )
        if is_active is not None:
            conditions.append(User.is_active == is_active)

        total = self._session.exec(select(func.count()).select_from(User).where(*conditions)).one()
        rows = self._session.exec(
            select(User)
            .where(*conditions)
            .order_by(User.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
        return [AdminUserOut.model_validate(row) for row in rows], total

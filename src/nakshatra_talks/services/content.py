"""Home-screen content managed by admins: categories and promotional banners."""
import logging
import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Any

from sqlalchemy import or_
from sqlmodel import Session, select

from nakshatra_talks.db.models import Banner, Category
from nakshatra_talks.errors import BadRequestError, NotFoundError
from nakshatra_talks.schemas import (BannerCreate, BannerOut, BannerUpdate,
                                     CategoryCreate, CategoryOut,
                                     CategoryUpdate)
from nakshatra_talks.services.reviews import sanitize_comment
from nakshatra_talks.utils import as_utc, utcnow

logger = logging.getLogger(__name__)

CATEGORY_NULLABLE = frozenset({"description"})
BANNER_NULLABLE = frozenset(
    {"subtitle", "button_text", "button_action", "image", "start_date", "end_date"}
)


def _clean_name(name: str | None) -> str:
    cleaned = sanitize_comment(name)
    if cleaned is None:
        raise BadRequestError("Name is required")
    return cleaned


def _apply(row: Category | Banner, changes: dict[str, Any], nullable: frozenset[str]) -> None:
    """Copy sent fields onto ``row``; only ``nullable`` fields may be cleared."""
    for field, value in changes.items():
        if value is None and field not in nullable:
            raise BadRequestError(f"{field} cannot be null")
        if field in {"name", "title"}:
            value = _clean_name(value)
        elif field in {"start_date", "end_date"}:
            value = as_utc(value)
        setattr(row, field, value)


class HomeContent:
    def __init__(self, session: Session, clock: Callable[[], datetime] = utcnow) -> None:
        self._session = session
        self._clock = clock

    def list_categories(self) -> list[CategoryOut]:
        """Active categories in display order."""
        rows = self._session.exec(
            select(Category).where(Category.is_active == True).order_by(Category.order)  # noqa: E712
        ).all()
        return [CategoryOut.model_validate(row) for row in rows]

    def create_category(self, body: CategoryCreate) -> CategoryOut:
        category = Category(**body.model_dump(exclude={"name"}), name=_clean_name(body.name))
        self._session.add(category)
        self._session.flush()
        logger.info("Category %s created", category.id)
        return CategoryOut.model_validate(category)

    def update_category(self, category_id: uuid.UUID, changes: CategoryUpdate) -> CategoryOut:
        category = self._session.get(Category, category_id)
        if category is None:
            raise NotFoundError("Category not found")
        _apply(category, changes.model_dump(exclude_unset=True), CATEGORY_NULLABLE)
        category.updated_at = self._clock()
        self._session.add(category)
        self._session.flush()
        return CategoryOut.model_validate(category)

    def delete_category(self, category_id: uuid.UUID) -> None:
        category = self._session.get(Category, category_id)
        if category is None:
            raise NotFoundError("Category not found")
        self._session.delete(category)
        self._session.flush()
        logger.info("Category %s deleted", category_id)

    def list_banners(self) -> list[BannerOut]:
        """Active banners whose display window contains now, in display order."""
        now = self._clock()
        rows = self._session.exec(
            select(Banner)
            .where(
                Banner.is_active == True,  # noqa: E712
                or_(Banner.start_date.is_(None), Banner.start_date <= now),
                or_(Banner.end_date.is_(None), Banner.end_date >= now),
            )
            .order_by(Banner.order)
        ).all()
        return [BannerOut.model_validate(row) for row in rows]

    def create_banner(self, body: BannerCreate) -> BannerOut:
        banner = Banner(
            **body.model_dump(exclude={"title", "start_date", "end_date"}),
            title=_clean_name(body.title),
            start_date=as_utc(body.start_date),
            end_date=as_utc(body.end_date),
        )
        _check_window(banner.start_date, banner.end_date)
        self._session.add(banner)
        self._session.flush()
        logger.info("Banner %s created", banner.id)
        return BannerOut.model_validate(banner)

    def update_banner(self, banner_id: uuid.UUID, changes: BannerUpdate) -> BannerOut:
        banner = self._session.get(Banner, banner_id)
        if banner is None:
            raise NotFoundError("Banner not found")
        _apply(banner, changes.model_dump(exclude_unset=True), BANNER_NULLABLE)
        _check_window(banner.start_date, banner.end_date)
        banner.updated_at = self._clock()
        self._session.add(banner)
        self._session.flush()
        return BannerOut.model_validate(banner)

    def delete_banner(self, banner_id: uuid.UUID) -> None:
        banner = self._session.get(Banner, banner_id)
        if banner is None:
            raise NotFoundError("Banner not found")
        self._session.delete(banner)
        self._session.flush()
        logger.info("Banner %s deleted", banner_id)


def _check_window(start: datetime | None, end: datetime | None) -> None:
    if start is not None and end is not None and end < start:
        raise BadRequestError("Banner end date must not be before its start date")

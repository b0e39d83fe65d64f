"""Astrologer discovery, reviews and presence routes."""
import uuid
from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Query, status

from nakshatra_talks.db.models import SessionType
from nakshatra_talks.dependencies import Catalog, CurrentUser, Reviews
from nakshatra_talks.schemas import (AstrologerSort, AvailabilityUpdate,
                                     LiveStatusUpdate, ReviewCreate,
                                     calculate_pagination, ok, paginated)
from nakshatra_talks.services import AstrologerFilters

router = APIRouter(prefix="/api/v1/astrologers", tags=["astrologers"])


@router.get("")
def list_astrologers(
    catalog: Catalog,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    q: str | None = Query(default=None, min_length=1, max_length=100),
    specialization: str | None = None,
    language: str | None = None,
    min_rating: Decimal | None = Query(default=None, ge=0, le=5, alias="minRating"),
    min_price: Decimal | None = Query(default=None, ge=0, alias="minPrice"),
    max_price: Decimal | None = Query(default=None, ge=0, alias="maxPrice"),
    session_type: SessionType = Query(default=SessionType.CHAT, alias="sessionType"),
    only_live: bool = Query(default=False, alias="onlyLive"),
    sort_by: AstrologerSort = Query(default=AstrologerSort.RATING, alias="sortBy"),
) -> dict[str, Any]:
    """Approved, available astrologers. Public. ``q`` searches name, bio and specializations."""
    filters = AstrologerFilters(
        q=q,
        specialization=specialization,
        language=language,
        min_rating=min_rating,
        min_price=min_price,
        max_price=max_price,
        session_type=session_type,
        only_live=only_live,
        sort_by=sort_by,
    )
    items, total = catalog.list_astrologers(filters, page=page, limit=limit)
    return paginated(items, calculate_pagination(total, page, limit))


@router.get("/live")
def list_live(catalog: Catalog, limit: int = Query(default=10, ge=1, le=50)) -> dict[str, Any]:
    """Live and available right now. Public."""
    return ok(catalog.list_live(limit))


@router.get("/top-rated")
def list_top_rated(
    catalog: Catalog,
    limit: int = Query(default=10, ge=1, le=50),
    sort_by: AstrologerSort = Query(default=AstrologerSort.RATING, alias="sortBy"),
) -> dict[str, Any]:
    return ok(catalog.list_top_rated(sort_by, limit))


@router.get("/{astrologer_id}")
def get_astrologer(astrologer_id: uuid.UUID, catalog: Catalog) -> dict[str, Any]:
    """Profile with the latest approved reviews. Public."""
    return ok(catalog.get_detail(astrologer_id))


@router.get("/{astrologer_id}/reviews")
def list_reviews(
    astrologer_id: uuid.UUID,
    reviews: Reviews,
    limit: int = Query(default=20, ge=1, le=100),
) -> dict[str, Any]:
    return ok(reviews.list_for_astrologer(astrologer_id, limit))


@router.post("/{astrologer_id}/reviews", status_code=status.HTTP_201_CREATED)
def submit_review(
    astrologer_id: uuid.UUID, body: ReviewCreate, user: CurrentUser, reviews: Reviews
) -> dict[str, Any]:
    review = reviews.submit(
        user.id, astrologer_id, body.session_id, body.rating, body.comment, body.tags
    )
    return ok(review, "Review submitted successfully")


@router.post("/{astrologer_id}/heartbeat")
def heartbeat(astrologer_id: uuid.UUID, user: CurrentUser, catalog: Catalog) -> dict[str, Any]:
    """Keep the calling astrologer marked live."""
    return ok(catalog.heartbeat(astrologer_id, user))


@router.patch("/{astrologer_id}/availability")
def set_availability(
    astrologer_id: uuid.UUID,
    body: AvailabilityUpdate,
    user: CurrentUser,
    catalog: Catalog,
) -> dict[str, Any]:
    return ok(
        catalog.set_availability(astrologer_id, user, body.is_available),
        "Availability updated",
    )


@router.patch("/{astrologer_id}/live-status")
def set_live_status(
    astrologer_id: uuid.UUID,
    body: LiveStatusUpdate,
    user: CurrentUser,
    catalog: Catalog,
) -> dict[str, Any]:
    presence = catalog.set_live_status(astrologer_id, user, body.is_live)
    state = "enabled" if body.is_live else "disabled"
    return ok(presence, f"Live status {state} successfully")

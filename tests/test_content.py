import uuid
from datetime import timedelta

import pytest

from conftest import T0, make_user
from nakshatra_talks.db import Banner, FeedbackStatus
from nakshatra_talks.errors import BadRequestError, NotFoundError
from nakshatra_talks.schemas import (BannerCreate, BannerUpdate,
                                     CategoryCreate, CategoryUpdate,
                                     FeedbackCreate, FeedbackUpdate)
from nakshatra_talks.services import (FeedbackFilters, FeedbackService,
                                      HomeContent)


def test_categories_listed_active_in_display_order(db, clock):
    content = HomeContent(db, clock=clock)
    content.create_category(CategoryCreate(name="Tarot", icon="tarot.png", order=2))
    content.create_category(CategoryCreate(name="Vedic", icon="vedic.png", order=1))
    content.create_category(CategoryCreate(name="Hidden", icon="x.png", is_active=False))

    assert [c.name for c in content.list_categories()] == ["Vedic", "Tarot"]


def test_category_name_is_sanitized(db, clock):
    category = HomeContent(db, clock=clock).create_category(
        CategoryCreate(name="  <b>Love</b> ", icon="heart.png")
    )
    assert category.name == "bLove/b"


def test_category_update_applies_sent_fields_only(db, clock):
    content = HomeContent(db, clock=clock)
    created = content.create_category(
        CategoryCreate(name="Career", icon="briefcase.png", description="Jobs")
    )

    updated = content.update_category(created.id, CategoryUpdate(order=5, description=None))

    assert updated.order == 5
    assert updated.description is None
    assert updated.icon == "briefcase.png"
    assert updated.updated_at == T0


def test_category_required_fields_cannot_be_cleared(db, clock):
    content = HomeContent(db, clock=clock)
    created = content.create_category(CategoryCreate(name="Career", icon="briefcase.png"))

    with pytest.raises(BadRequestError):
        content.update_category(created.id, CategoryUpdate(icon=None))


def test_unknown_category(db, clock):
    content = HomeContent(db, clock=clock)
    missing = uuid.uuid4()
    with pytest.raises(NotFoundError, match="Category not found"):
        content.update_category(missing, CategoryUpdate(order=1))
    with pytest.raises(NotFoundError):
        content.delete_category(missing)


def test_banners_respect_display_window(db, clock):
    day = timedelta(days=1)
    db.add_all(
        [
            Banner(title="Always", order=3),
            Banner(title="Current", order=1, start_date=T0 - day, end_date=T0 + day),
            Banner(title="Upcoming", start_date=T0 + day),
            Banner(title="Expired", end_date=T0 - day),
            Banner(title="Off", is_active=False),
        ]
    )
    db.flush()

    banners = HomeContent(db, clock=clock).list_banners()

    assert [b.title for b in banners] == ["Current", "Always"]
    assert banners[1].background_color == "#FFCF0D"

    clock.advance(2 * 24 * 3600)
    titles = {b.title for b in HomeContent(db, clock=clock).list_banners()}
    assert titles == {"Always", "Upcoming"}


def test_banner_window_must_be_ordered(db, clock):
    content = HomeContent(db, clock=clock)
    with pytest.raises(BadRequestError):
        content.create_banner(BannerCreate(title="Sale", start_date=T0, end_date=T0 - timedelta(hours=1)))

    banner = content.create_banner(BannerCreate(title="Sale", start_date=T0))
    with pytest.raises(BadRequestError):
        content.update_banner(banner.id, BannerUpdate(end_date=T0 - timedelta(days=1)))


def test_naive_banner_dates_are_taken_as_utc(db, clock):
    banner = HomeContent(db, clock=clock).create_banner(
        BannerCreate(title="Diwali", start_date=T0.replace(tzinfo=None))
    )
    assert banner.start_date == T0


def test_feedback_submit_and_triage(db):
    user = make_user(db, name="Asha")
    service = FeedbackService(db)

    receipt = service.submit(
        FeedbackCreate(name="Asha", rating=4, comments="Great readings <3 overall"), user.id
    )
    service.submit(FeedbackCreate(name="Visitor", comments="Please add Tamil support"))

    assert receipt.status == FeedbackStatus.PENDING
    items, total = service.list_feedback(FeedbackFilters())
    assert total == 2
    mine = next(f for f in items if f.id == receipt.feedback_id)
    assert mine.user_id == user.id
    assert mine.comments == "Great readings 3 overall"
    assert mine.category == "general"

    updated = service.update(
        receipt.feedback_id,
        FeedbackUpdate(status=FeedbackStatus.RESOLVED, admin_notes="Thanked the user"),
    )
    assert updated.status == FeedbackStatus.RESOLVED
    assert updated.admin_notes == "Thanked the user"

    resolved, total = service.list_feedback(FeedbackFilters(status=FeedbackStatus.RESOLVED))
    assert total == 1
    assert resolved[0].id == receipt.feedback_id
    assert service.list_feedback(FeedbackFilters(rating=5))[1] == 0

    service.delete(receipt.feedback_id)
    with pytest.raises(NotFoundError, match="Feedback not found"):
        service.update(receipt.feedback_id, FeedbackUpdate(status=FeedbackStatus.REVIEWED))


def test_feedback_comments_need_ten_characters():
    with pytest.raises(ValueError):
        FeedbackCreate(name="Asha", comments="too short")

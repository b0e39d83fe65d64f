"""Home-screen content and app feedback. Public."""
from typing import Any

from fastapi import APIRouter, status

from nakshatra_talks.dependencies import Catalog, Content, Feedbacks, OptionalUser
from nakshatra_talks.schemas import FeedbackCreate, ok

router = APIRouter(prefix="/api/v1", tags=["content"])


@router.get("/categories")
def list_categories(content: Content) -> dict[str, Any]:
    return ok(content.list_categories())


@router.get("/banners")
def list_banners(content: Content) -> dict[str, Any]:
    """Banners currently inside their display window."""
    return ok(content.list_banners())


@router.get("/specializations")
def list_specializations(catalog: Catalog) -> dict[str, Any]:
    return ok(catalog.list_specializations())


@router.post("/feedback", status_code=status.HTTP_201_CREATED)
def submit_feedback(body: FeedbackCreate, user: OptionalUser, feedback: Feedbacks) -> dict[str, Any]:
    """Signed-in senders are linked to their account; anyone else may still send."""
    receipt = feedback.submit(body, user.id if user else None)
    return ok(receipt, "Thank you for your feedback!")

"""Profile routes for the current user."""
from typing import Any

from fastapi import APIRouter

from nakshatra_talks.dependencies import CurrentUser, Users
from nakshatra_talks.schemas import ProfileUpdate, ok

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("/profile")
def get_profile(user: CurrentUser, users: Users) -> dict[str, Any]:
    return ok(users.get_profile(user.id))


@router.patch("/profile")
def update_profile(body: ProfileUpdate, user: CurrentUser, users: Users) -> dict[str, Any]:
    """Update only the fields sent in the request body."""
    return ok(users.update_profile(user.id, body), "Profile updated successfully")

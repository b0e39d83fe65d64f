"""Phone OTP login routes."""
import logging
from typing import Any

from fastapi import APIRouter

from nakshatra_talks.dependencies import Auth, CurrentUser, DbSession
from nakshatra_talks.schemas import (SendOtpRequest, TokenOut, UserOut,
                                     VerifyOtpRequest, ok)
from nakshatra_talks.services import UserService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/send-otp")
async def send_otp(body: SendOtpRequest, auth: Auth) -> dict[str, Any]:
    await auth.send_otp(body.phone)
    return ok(message="OTP sent successfully")


@router.post("/verify-otp")
async def verify_otp(body: VerifyOtpRequest, auth: Auth, db: DbSession) -> dict[str, Any]:
    """Verify the OTP and return tokens; the local account is created on first login."""
    identity_session = await auth.verify_otp(body.phone, body.otp)
    user = UserService(db).provision(identity_session.user)
    token = TokenOut(
        access_token=identity_session.access_token,
        refresh_token=identity_session.refresh_token,
        expires_in=identity_session.expires_in,
        user=UserOut.model_validate(user),
    )
    logger.info("User %s logged in", user.id)
    return ok(token, "Login successful")


@router.get("/me")
def me(user: CurrentUser) -> dict[str, Any]:
    return ok(UserOut.model_validate(user))

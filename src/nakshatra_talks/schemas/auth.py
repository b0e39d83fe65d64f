"""Auth and profile bodies."""
import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field

from nakshatra_talks.db.models import UserRole
from nakshatra_talks.schemas.base import ApiModel, Money

# E.164, optional leading "+".
PHONE_PATTERN = r"^\+?[1-9]\d{1,14}$"
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


class SendOtpRequest(ApiModel):
    phone: str = Field(pattern=PHONE_PATTERN)


class VerifyOtpRequest(ApiModel):
    phone: str = Field(pattern=PHONE_PATTERN)
    otp: str = Field(min_length=4, max_length=10)


class UserOut(ApiModel):
    id: uuid.UUID
    phone: str
    name: str | None = None
    email: str | None = None
    profile_image: str | None = None
    date_of_birth: date | None = None
    place_of_birth: str | None = None
    time_of_birth: str | None = None
    gender: str | None = None
    marital_status: str | None = None
    wallet_balance: Money
    role: UserRole
    created_at: datetime


class TokenOut(ApiModel):
    access_token: str
    refresh_token: str
    expires_in: int | None = None
    token_type: str = "bearer"
    user: UserOut


class ProfileUpdate(ApiModel):
    """Fields a user may change on their own profile. Unset fields are left alone."""

    name: str | None = Field(default=None, min_length=1, max_length=120)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    profile_image: str | None = None
    date_of_birth: date | None = None
    place_of_birth: str | None = None
    time_of_birth: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}(:\d{2})?$")
    gender: str | None = Field(default=None, pattern=r"^(male|female|other)$")
    marital_status: str | None = Field(
        default=None, pattern=r"^(single|married|divorced|widowed)$"
    )


class IdentityUser(BaseModel):
    """User as known to the identity provider."""

    id: uuid.UUID
    phone: str | None = None
    email: str | None = None


class IdentitySession(BaseModel):
    """Tokens issued by the identity provider after OTP verification."""

    access_token: str
    refresh_token: str
    expires_in: int | None = None
    user: IdentityUser

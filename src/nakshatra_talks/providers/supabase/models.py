"""Models for the Supabase GoTrue provider (request bodies and responses)."""
import uuid

from pydantic import BaseModel

from nakshatra_talks.schemas import IdentitySession, IdentityUser


class GoTrueOtpBody(BaseModel):
    """Body for POST /otp."""

    phone: str
    channel: str = "sms"


class GoTrueVerifyBody(BaseModel):
    """Body for POST /verify."""

    phone: str
    token: str
    type: str = "sms"


class GoTrueUser(BaseModel):
    id: uuid.UUID
    phone: str | None = None
    email: str | None = None

    def to_identity_user(self) -> IdentityUser:
        # GoTrue stores phones without the leading "+".
        phone = f"+{self.phone.lstrip('+')}" if self.phone else None
        return IdentityUser(id=self.id, phone=phone, email=self.email or None)


class GoTrueSession(BaseModel):
    """Response of POST /verify. Token fields are absent when verification produced no session."""

    access_token: str | None = None
    refresh_token: str | None = None
    expires_in: int | None = None
    user: GoTrueUser | None = None

    def to_identity_session(self) -> IdentitySession:
        if not self.access_token or not self.refresh_token or self.user is None:
            raise ValueError("Unable to create session")
        return IdentitySession(
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            expires_in=self.expires_in,
            user=self.user.to_identity_user(),
        )

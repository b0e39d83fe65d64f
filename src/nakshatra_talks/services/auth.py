"""Phone OTP login over the identity provider, with provider errors mapped to domain errors."""
from nakshatra_talks.errors import UnauthorizedError
from nakshatra_talks.providers.core import (AUTH_ERRORS, OTP_REQUEST_ERRORS,
                                            PROVIDER_EXCEPTIONS,
                                            IdentityProviderABC)
from nakshatra_talks.schemas import IdentitySession, IdentityUser


class AuthService:
    """Wraps an IdentityProviderABC; raises AppError subclasses only."""

    def __init__(self, provider: IdentityProviderABC) -> None:
        self._provider = provider

    async def send_otp(self, phone: str) -> None:
        try:
            await self._provider.send_otp(phone)
        except PROVIDER_EXCEPTIONS as e:
            OTP_REQUEST_ERRORS.raise_app_error(e)

    async def verify_otp(self, phone: str, otp: str) -> IdentitySession:
        try:
            return await self._provider.verify_otp(phone, otp)
        except PROVIDER_EXCEPTIONS as e:
            AUTH_ERRORS.raise_app_error(e)

    async def resolve_token(self, authorization: str | None) -> IdentityUser:
        """Identity behind an ``Authorization: Bearer <token>`` header value."""
        scheme, _, token = (authorization or "").partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise UnauthorizedError("Access token required")
        try:
            return await self._provider.get_user(token.strip())
        except PROVIDER_EXCEPTIONS as e:
            AUTH_ERRORS.raise_app_error(e)

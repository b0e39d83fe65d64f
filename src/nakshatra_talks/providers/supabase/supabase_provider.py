"""Supabase GoTrue identity provider for phone OTP logins."""
import logging

import httpx

from nakshatra_talks.config import (IDENTITY_TIMEOUT_SECONDS,
                                    SUPABASE_ANON_KEY, SUPABASE_URL)
from nakshatra_talks.providers.core import IdentityProviderABC
from nakshatra_talks.providers.supabase.models import (GoTrueOtpBody,
                                                       GoTrueSession,
                                                       GoTrueUser,
                                                       GoTrueVerifyBody)
from nakshatra_talks.schemas import IdentitySession, IdentityUser

logger = logging.getLogger(__name__)


class SupabaseIdentityProvider(IdentityProviderABC):
    """Identity provider backed by the Supabase Auth (GoTrue) REST API.

    Uses one shared httpx.AsyncClient with the project's anon key sent as the
    ``apikey`` header on every call. Errors are raised as httpx exceptions
    (or ValueError for malformed answers) and mapped by the caller.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float = IDENTITY_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Supabase provider.

        Args:
            base_url: Supabase project URL. Defaults to SUPABASE_URL.
            api_key: Anon/public API key. Defaults to SUPABASE_ANON_KEY.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (tests pass httpx.MockTransport).
        """
        base = (base_url or SUPABASE_URL).rstrip("/")
        headers = {"Accept": "application/json", "apikey": api_key or SUPABASE_ANON_KEY}
        self._client = httpx.AsyncClient(
            base_url=f"{base}/auth/v1",
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def send_otp(self, phone: str) -> None:
        response = await self._client.post(
            "/otp", json=GoTrueOtpBody(phone=phone).model_dump()
        )
        response.raise_for_status()
        logger.info("OTP requested for phone ending %s", phone[-4:])

    async def verify_otp(self, phone: str, otp: str) -> IdentitySession:
        response = await self._client.post(
            "/verify", json=GoTrueVerifyBody(phone=phone, token=otp).model_dump()
        )
        response.raise_for_status()
        return GoTrueSession.model_validate(response.json()).to_identity_session()

    async def get_user(self, access_token: str) -> IdentityUser:
        response = await self._client.get(
            "/user", headers={"Authorization": f"Bearer {access_token}"}
        )
        response.raise_for_status()
        return GoTrueUser.model_validate(response.json()).to_identity_user()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

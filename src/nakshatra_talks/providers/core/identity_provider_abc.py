"""Abstract base class for phone-OTP identity providers."""
from abc import ABC, abstractmethod

from nakshatra_talks.schemas import IdentitySession, IdentityUser


class IdentityProviderABC(ABC):
    """Base interface for the external service that owns phone logins.

    The provider issues OTPs, exchanges a verified OTP for tokens and
    resolves a bearer token to a user. Local accounts and wallets are kept
    by this service; the provider only vouches for identity.
    """

    @abstractmethod
    async def send_otp(self, phone: str) -> None:
        """Send a one-time password to ``phone`` by SMS."""

    @abstractmethod
    async def verify_otp(self, phone: str, otp: str) -> IdentitySession:
        """Exchange a phone + OTP pair for an access/refresh token session.

        Raises:
            httpx.HTTPStatusError: the provider rejected the code.
            ValueError: the provider answered without a session.
        """

    @abstractmethod
    async def get_user(self, access_token: str) -> IdentityUser:
        """Resolve a bearer token to the identity it was issued for."""

    async def close(self) -> None:
        """Clean up resources (connections, clients).

        Override in subclasses if cleanup is needed.
        """

    async def __aenter__(self) -> "IdentityProviderABC":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.close()

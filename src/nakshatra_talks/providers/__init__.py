"""External identity providers.

The service does not store credentials itself: phone OTP delivery, OTP
verification and bearer-token resolution are delegated to an
``IdentityProviderABC`` implementation.

- SupabaseIdentityProvider: Supabase Auth (GoTrue) over httpx

Example:
    async with SupabaseIdentityProvider() as provider:
        await provider.send_otp("+919876543210")
        session = await provider.verify_otp("+919876543210", "123456")
        user = await provider.get_user(session.access_token)
"""
from nakshatra_talks.providers.core import IdentityProviderABC
from nakshatra_talks.providers.supabase import SupabaseIdentityProvider

__all__ = [
    "IdentityProviderABC",
    "SupabaseIdentityProvider",
]

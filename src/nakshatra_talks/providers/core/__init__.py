"""Core provider abstractions."""
from nakshatra_talks.providers.core.error_mapper import (AUTH_ERRORS,
                                                         OTP_REQUEST_ERRORS,
                                                         PROVIDER_EXCEPTIONS,
                                                         IdentityErrorMapper)
from nakshatra_talks.providers.core.identity_provider_abc import \
    IdentityProviderABC

__all__ = [
    "AUTH_ERRORS",
    "IdentityErrorMapper",
    "IdentityProviderABC",
    "OTP_REQUEST_ERRORS",
    "PROVIDER_EXCEPTIONS",
]

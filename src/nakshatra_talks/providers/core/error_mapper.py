"""Mapping of identity provider exceptions to domain errors."""
import asyncio
from dataclasses import dataclass
from typing import NoReturn

import httpx

from nakshatra_talks.errors import (AppError, BadRequestError, ServerError,
                                    UnauthorizedError)

# Exceptions from providers we map; all others propagate (e.g. bugs, BaseException).
PROVIDER_EXCEPTIONS: tuple[type[Exception], ...] = (
    ValueError,
    TimeoutError,
    asyncio.TimeoutError,
    httpx.HTTPError,
)


def _provider_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    for key in ("msg", "error_description", "message", "error"):
        if isinstance(body.get(key), str):
            return body[key]
    return None


@dataclass(frozen=True)
class IdentityErrorMapper:
    """Maps identity provider exceptions to AppError subclasses.

    ``rejected`` is the error raised when the provider turns the request down
    (4xx): UnauthorizedError for token/OTP checks, BadRequestError when the
    caller's input (e.g. the phone number) was refused.
    """

    rejected: type[AppError] = UnauthorizedError
    api_name: str = "Identity provider"

    def to_app_error(self, exc: Exception) -> AppError:
        if isinstance(exc, ValueError):
            return self.rejected(str(exc) or None)
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            if status >= 500:
                return ServerError(f"{self.api_name} error")
            if status == 429:
                return BadRequestError("Too many requests, please try again later")
            return self.rejected(_provider_message(exc.response))
        if isinstance(exc, (asyncio.TimeoutError, TimeoutError, httpx.TimeoutException)):
            return ServerError(f"Request to {self.api_name} timed out")
        if isinstance(exc, httpx.HTTPError):
            return ServerError(f"{self.api_name} unavailable")
        return ServerError()

    def raise_app_error(self, exc: Exception) -> NoReturn:
        """Map and raise. Never returns."""
        raise self.to_app_error(exc) from exc


OTP_REQUEST_ERRORS = IdentityErrorMapper(rejected=BadRequestError)
AUTH_ERRORS = IdentityErrorMapper()

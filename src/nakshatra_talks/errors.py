"""Domain errors and their mapping to the standard error envelope."""
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in ``error.code``."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    SERVER_ERROR = "SERVER_ERROR"


class AppError(Exception):
    """Base error carrying an HTTP status, an error code and optional details."""

    status_code: int = 500
    code: ErrorCode = ErrorCode.SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, details: Any = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_body(self) -> dict[str, Any]:
        """Render as the ``{success: false, error: {...}}`` envelope."""
        return error_body(self.code, self.message, self.details)


class InvalidRequestError(AppError):
    status_code = 400
    code = ErrorCode.VALIDATION_ERROR
    default_message = "Invalid request"


class BadRequestError(AppError):
    status_code = 400
    code = ErrorCode.BAD_REQUEST
    default_message = "Bad request"


class UnauthorizedError(AppError):
    status_code = 401
    code = ErrorCode.UNAUTHORIZED
    default_message = "User not authenticated"


class ForbiddenError(AppError):
    status_code = 403
    code = ErrorCode.FORBIDDEN
    default_message = "Access denied"


class NotFoundError(AppError):
    status_code = 404
    code = ErrorCode.NOT_FOUND
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    code = ErrorCode.CONFLICT
    default_message = "Conflict"


class InsufficientBalanceError(AppError):
    status_code = 400
    code = ErrorCode.INSUFFICIENT_BALANCE
    default_message = "Insufficient wallet balance"


class ServerError(AppError):
    status_code = 500
    code = ErrorCode.SERVER_ERROR


_STATUS_TO_CODE: dict[int, ErrorCode] = {
    400: ErrorCode.BAD_REQUEST,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.VALIDATION_ERROR,
}


def code_for_status(status_code: int) -> ErrorCode:
    """Pick an error code for a bare HTTP status (e.g. from a Starlette HTTPException)."""
    return _STATUS_TO_CODE.get(status_code, ErrorCode.SERVER_ERROR)


def error_body(code: ErrorCode, message: str, details: Any = None) -> dict[str, Any]:
    """Build an error envelope without raising."""
    error: dict[str, Any] = {"code": code.value, "message": message}
    if details is not None:
        error["details"] = details
    return {"success": False, "error": error}

"""Consultation session routes: start, end, rate, history and in-session messages."""
import uuid
from typing import Any

from fastapi import APIRouter, Body, Query, status

from nakshatra_talks.db.models import SessionStatus, SessionType
from nakshatra_talks.dependencies import (CurrentUser, Gate, Lifecycle,
                                          Messages)
from nakshatra_talks.errors import (InsufficientBalanceError,
                                    InvalidRequestError)
from nakshatra_talks.schemas import (CLIENT_END_REASONS, EndSessionRequest,
                                     MessageCreate, RateSessionRequest,
                                     StartSessionRequest,
                                     ValidateBalanceRequest,
                                     calculate_pagination, ok, paginated)
from nakshatra_talks.services import SessionFilters, settlement_message

router = APIRouter(prefix="/api/v1/chat", tags=["chat"])


@router.post("/sessions", status_code=status.HTTP_201_CREATED)
def start_session(
    body: StartSessionRequest, user: CurrentUser, lifecycle: Lifecycle
) -> dict[str, Any]:
    """Start a chat/call/video session, ending any session the user still has open."""
    session_out = lifecycle.start(user.id, body.astrologer_id, body.session_type)
    return ok(session_out, f"{body.session_type.value.capitalize()} session started successfully")


@router.get("/sessions")
def list_sessions(
    user: CurrentUser,
    lifecycle: Lifecycle,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    session_status: SessionStatus | None = Query(default=None, alias="status"),
    astrologer_id: uuid.UUID | None = Query(default=None, alias="astrologerId"),
    session_type: SessionType | None = Query(default=None, alias="sessionType"),
) -> dict[str, Any]:
    """Session history for the current user, newest first."""
    filters = SessionFilters(
        status=session_status, astrologer_id=astrologer_id, session_type=session_type
    )
    items, total = lifecycle.history(user.id, filters, page=page, limit=limit)
    return paginated(items, calculate_pagination(total, page, limit))


@router.get("/sessions/active")
def get_active_session(
    user: CurrentUser,
    lifecycle: Lifecycle,
    session_type: SessionType | None = Query(default=None, alias="sessionType"),
) -> dict[str, Any]:
    """The user's active session, or null."""
    types = [session_type] if session_type else None
    return ok(lifecycle.get_active_out(user.id, types))


@router.get("/sessions/{session_id}")
def get_session_detail(
    session_id: uuid.UUID, user: CurrentUser, lifecycle: Lifecycle
) -> dict[str, Any]:
    return ok(lifecycle.get(session_id, user.id))


@router.post("/sessions/{session_id}/end")
def end_session(
    session_id: uuid.UUID,
    user: CurrentUser,
    lifecycle: Lifecycle,
    body: EndSessionRequest | None = Body(default=None),
) -> dict[str, Any]:
    """End an active session and debit its cost from the wallet."""
    end_reason = body.end_reason if body else None
    if end_reason is not None and end_reason not in CLIENT_END_REASONS:
        raise InvalidRequestError(f"Invalid end reason: {end_reason.value}")
    settlement = lifecycle.end(session_id, user.id, end_reason)
    return ok(settlement, settlement_message(settlement))


@router.post("/sessions/{session_id}/rating")
def rate_session(
    session_id: uuid.UUID,
    body: RateSessionRequest,
    user: CurrentUser,
    lifecycle: Lifecycle,
) -> dict[str, Any]:
    rating = lifecycle.rate(session_id, user.id, body.rating, body.review, body.tags)
    return ok(rating, "Session rated successfully")


@router.post("/validate-balance")
def validate_balance(
    body: ValidateBalanceRequest, user: CurrentUser, gate: Gate
) -> dict[str, Any]:
    """Pre-check whether the wallet covers the minimum session length."""
    check = gate.validate_balance(user.id, body.astrologer_id, body.session_type)
    data = check.model_dump(mode="json", by_alias=True)
    data[f"canStart{body.session_type.value.capitalize()}"] = check.can_start
    if not check.can_start:
        raise InsufficientBalanceError("Insufficient balance for this session", details=data)
    return ok(data, "Sufficient balance")


@router.get("/sessions/{session_id}/messages")
def list_messages(
    session_id: uuid.UUID,
    user: CurrentUser,
    messages: Messages,
    limit: int = Query(default=50, ge=1, le=100),
) -> dict[str, Any]:
    return ok(messages.list_messages(session_id, user.id, limit))


@router.post("/sessions/{session_id}/messages", status_code=status.HTTP_201_CREATED)
def send_message(
    session_id: uuid.UUID,
    body: MessageCreate,
    user: CurrentUser,
    messages: Messages,
) -> dict[str, Any]:
    message = messages.send_message(session_id, user.id, body.message, body.type)
    return ok(message, "Message sent")

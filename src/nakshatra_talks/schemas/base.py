"""Wire conventions shared by every endpoint: camelCase models and the response envelope."""
import math
from decimal import Decimal
from typing import Annotated, Any

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

# Decimals travel as JSON numbers, not strings.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

_MISSING: Any = object()


class ApiModel(BaseModel):
    """Base for request/response bodies: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationMeta(ApiModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next: bool
    has_prev: bool


def calculate_pagination(total: int, page: int, limit: int) -> PaginationMeta:
    """Pagination metadata for a 1-based page of ``limit`` items out of ``total``."""
    total_pages = math.ceil(total / limit) if limit else 0
    return PaginationMeta(
        current_page=page,
        total_pages=total_pages,
        total_items=total,
        items_per_page=limit,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


def ok(data: Any = _MISSING, message: str | None = None) -> dict[str, Any]:
    """Success envelope ``{success, message?, data?}``; ``data`` is omitted only when not passed."""
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not _MISSING:
        body["data"] = jsonable_encoder(data, by_alias=True)
    return body


def paginated(items: list[Any], pagination: PaginationMeta) -> dict[str, Any]:
    """Success envelope for a page of results."""
    return {
        "success": True,
        "data": jsonable_encoder(items, by_alias=True),
        "pagination": jsonable_encoder(pagination, by_alias=True),
    }

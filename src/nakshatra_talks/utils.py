"""Shared helpers for time and money."""
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

CENTS = Decimal("0.01")
TENTHS = Decimal("0.1")


def utcnow() -> datetime:
    """Timezone-aware UTC now; every stored timestamp is UTC."""
    return datetime.now(timezone.utc)


def to_money(value: Decimal | float | int | str | None) -> Decimal:
    """Quantize a value to 2 decimal places (half up); None counts as zero."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def round1(value: Decimal | float) -> Decimal:
    """Round a value to 1 decimal place (half up)."""
    return Decimal(str(value)).quantize(TENTHS, rounding=ROUND_HALF_UP)


def as_utc(value: datetime | None) -> datetime | None:
    """Aware UTC copy of ``value``; naive input is taken to be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

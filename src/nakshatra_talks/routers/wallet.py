"""Wallet routes: balance, recharge and ledger history for the current user."""
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Query

from nakshatra_talks.config import WALLET_CURRENCY
from nakshatra_talks.db.models import TransactionStatus, TransactionType
from nakshatra_talks.dependencies import CurrentUser, Ledger
from nakshatra_talks.schemas import (BalanceOut, CreditOut, RechargeRequest,
                                     calculate_pagination, ok, paginated)
from nakshatra_talks.services import TransactionFilters

router = APIRouter(prefix="/api/v1/wallet", tags=["wallet"])


@router.get("/balance")
def get_balance(user: CurrentUser, ledger: Ledger) -> dict[str, Any]:
    balance = ledger.get_balance(user.id)
    return ok(
        BalanceOut(
            user_id=user.id,
            balance=balance,
            currency=WALLET_CURRENCY,
            last_updated=user.updated_at,
        )
    )


@router.post("/recharge")
def recharge(body: RechargeRequest, user: CurrentUser, ledger: Ledger) -> dict[str, Any]:
    """Credit the wallet after a confirmed payment."""
    result = ledger.credit(user.id, body.amount, body.payment_method, body.payment_id)
    return ok(
        CreditOut(
            transaction_id=result.transaction_id,
            amount=result.amount,
            new_balance=result.new_balance,
            status=TransactionStatus.SUCCESS,
        ),
        "Wallet recharged successfully",
    )


@router.get("/transactions")
def list_transactions(
    user: CurrentUser,
    ledger: Ledger,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    txn_type: TransactionType | None = Query(default=None, alias="type"),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
) -> dict[str, Any]:
    """The current user's transactions, newest first."""
    filters = TransactionFilters(
        user_id=user.id, type=txn_type, start_date=start_date, end_date=end_date
    )
    items, total = ledger.list_transactions(filters, page=page, limit=limit)
    return paginated(items, calculate_pagination(total, page, limit))

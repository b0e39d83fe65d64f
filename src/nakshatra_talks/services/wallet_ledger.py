"""Wallet ledger: the only code path that changes a user's stored balance.

Every mutation is a single conditional ``UPDATE ... RETURNING`` on the balance
column followed by an immutable ``transactions`` row, both inside the caller's
unit of work (see ``db.sessions.get_session``). Concurrent debits cannot drive
the balance negative and cannot lose each other's updates.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, update
from sqlmodel import Session, select

from nakshatra_talks.db.models import (Astrologer, Transaction,
                                       TransactionStatus, TransactionType, User)
from nakshatra_talks.errors import (ErrorCode, InvalidRequestError,
                                    NotFoundError)
from nakshatra_talks.schemas import TransactionOut
from nakshatra_talks.utils import to_money, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DebitResult:
    """Outcome of a debit. Callers must check ``success`` before trusting the balance."""

    success: bool
    transaction_id: uuid.UUID | None = None
    remaining_balance: Decimal | None = None
    error: str | None = None
    error_code: ErrorCode | None = None


@dataclass(frozen=True)
class CreditResult:
    transaction_id: uuid.UUID
    amount: Decimal
    new_balance: Decimal


@dataclass(frozen=True)
class TransactionFilters:
    """Optional filters for ledger history."""

    user_id: uuid.UUID | None = None
    type: TransactionType | None = None
    status: TransactionStatus | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


class WalletLedger:
    """Balance reads, credits, debits and transaction history for one unit of work."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_balance(self, user_id: uuid.UUID) -> Decimal:
        """Current balance. Raises NotFoundError if the user does not exist."""
        balance = self._session.exec(
            select(User.wallet_balance).where(User.id == user_id)
        ).first()
        if balance is None:
            raise NotFoundError("User not found")
        return to_money(balance)

    def credit(
        self,
        user_id: uuid.UUID,
        amount: Decimal,
        payment_method: str,
        payment_id: str,
        *,
        description: str = "Wallet recharge",
    ) -> CreditResult:
        """Add ``amount`` to the balance and record a ``recharge`` transaction.

        Raises:
            InvalidRequestError: amount is not positive.
            NotFoundError: the user does not exist.
        """
        amount = to_money(amount)
        if amount <= 0:
            raise InvalidRequestError("Invalid amount")

        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(wallet_balance=User.wallet_balance + amount, updated_at=utcnow())
            .returning(User.wallet_balance)
        )
        row = self._session.exec(stmt).first()
        if row is None:
            raise NotFoundError("User not found")

        balance_after = to_money(row[0])
        txn = Transaction(
            user_id=user_id,
            type=TransactionType.RECHARGE,
            amount=amount,
            description=description,
            payment_method=payment_method,
            payment_id=payment_id,
            status=TransactionStatus.SUCCESS,
            balance_before=balance_after - amount,
            balance_after=balance_after,
        )
        self._session.add(txn)
        self._session.flush()
        logger.info("Credited %s to user %s (balance %s)", amount, user_id, balance_after)
        return CreditResult(transaction_id=txn.id, amount=amount, new_balance=balance_after)

    def debit(
        self,
        user_id: uuid.UUID,
        amount: Decimal,
        description: str,
        astrologer_id: uuid.UUID | None = None,
        session_id: uuid.UUID | None = None,
        duration_minutes: float | None = None,
    ) -> DebitResult:
        """Subtract ``amount`` if the balance covers it; no partial debits.

        Returns a DebitResult rather than raising so that callers decide how a
        failed settlement surfaces.
        """
        amount = to_money(amount)
        if amount < 0:
            return DebitResult(
                success=False,
                error="Debit amount must not be negative",
                error_code=ErrorCode.VALIDATION_ERROR,
            )

        stmt = (
            update(User)
            .where(User.id == user_id, User.wallet_balance >= amount)
            .values(wallet_balance=User.wallet_balance - amount, updated_at=utcnow())
            .returning(User.wallet_balance)
        )
        row = self._session.exec(stmt).first()
        if row is None:
            exists = self._session.exec(select(User.id).where(User.id == user_id)).first()
            if exists is None:
                return DebitResult(
                    success=False, error="User not found", error_code=ErrorCode.NOT_FOUND
                )
            logger.info("Debit of %s refused for user %s: insufficient balance", amount, user_id)
            return DebitResult(
                success=False,
                error="Insufficient balance",
                error_code=ErrorCode.INSUFFICIENT_BALANCE,
            )

        balance_after = to_money(row[0])
        txn = Transaction(
            user_id=user_id,
            type=TransactionType.DEBIT,
            amount=Decimal("0.00") - amount,
            description=description,
            astrologer_id=astrologer_id,
            session_id=session_id,
            duration=duration_minutes,
            status=TransactionStatus.COMPLETED,
            balance_before=balance_after + amount,
            balance_after=balance_after,
        )
        self._session.add(txn)
        self._session.flush()
        logger.info("Debited %s from user %s (balance %s)", amount, user_id, balance_after)
        return DebitResult(success=True, transaction_id=txn.id, remaining_balance=balance_after)

    def list_transactions(
        self,
        filters: TransactionFilters,
        *,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[TransactionOut], int]:
        """Newest-first page of transactions and the total count matching ``filters``."""
        conditions = []
        if filters.user_id is not None:
            conditions.append(Transaction.user_id == filters.user_id)
        if filters.type is not None:
            conditions.append(Transaction.type == filters.type)
        if filters.status is not None:
            conditions.append(Transaction.status == filters.status)
        if filters.start_date is not None:
            conditions.append(Transaction.created_at >= filters.start_date)
        if filters.end_date is not None:
            conditions.append(Transaction.created_at <= filters.end_date)

        total = self._session.exec(
            select(func.count()).select_from(Transaction).where(*conditions)
        ).one()
        rows = self._session.exec(
            select(Transaction, Astrologer.name)
            .outerjoin(Astrologer, Transaction.astrologer_id == Astrologer.id)
            .where(*conditions)
            .order_by(Transaction.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
        items = [
            TransactionOut.model_validate(txn).model_copy(update={"astrologer_name": name})
            for txn, name in rows
        ]
        return items, total

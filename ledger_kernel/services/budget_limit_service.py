"""
BudgetLimitService -- per-period spending limits on budgets.

Responsibility:
    Create, read and re-amount BudgetLimit rows, and derive how much has
    been spent against a limit.

Invariants enforced:
    - Every lookup joins through ``budgets.user_id``; a limit on another
      user's budget raises the same BudgetLimitNotFoundError as a missing
      one.
    - ``start_date <= end_date`` and ``amount > 0``.

Spent:
    Sum of the source (negative) leg amounts of Withdrawal journals linked to
    the limit's budget at journal level and dated inside the inclusive
    range. Spent is therefore zero or negative.
"""

import datetime as dt
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import Numeric, func, select

from ledger_kernel.exceptions import BudgetLimitNotFoundError, InvalidBudgetLimitError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.associations import budget_transaction_journal
from ledger_kernel.models.budget import Budget, BudgetLimit
from ledger_kernel.models.journal import Transaction, TransactionJournal, TransactionType
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.label_service import LabelService

logger = get_logger("services.budget_limit")


@dataclass(frozen=True)
class BudgetLimitInfo:
    id: int
    budget_id: int
    start_date: dt.date
    end_date: dt.date
    amount: Decimal
    spent: Decimal

    @property
    def left(self) -> Decimal:
        """Amount still available; negative when overspent."""
        return self.amount + self.spent


def _validate(start: dt.date, end: dt.date, amount: Decimal) -> None:
    if end < start:
        raise InvalidBudgetLimitError(f"end date {end} is before start date {start}")
    if amount <= 0:
        raise InvalidBudgetLimitError(f"amount must be positive, got {amount}")


class BudgetLimitService(BaseService):
    """
    Owner-scoped access to budget limits.

    Usage:
        limits = BudgetLimitService(session)
        info = limits.create(user_id, budget.id, date(2024, 1, 1),
                             date(2024, 1, 31), Decimal("200.00"))
        limits.get(user_id, info.id).spent
    """

    def create(
        self,
        user_id: int,
        budget_id: int,
        start: dt.date,
        end: dt.date,
        amount: Decimal,
    ) -> BudgetLimitInfo:
        """
        Add a limit to one of the user's budgets.

        Raises:
            BudgetNotFoundError: the budget is missing or not the user's.
            InvalidBudgetLimitError: bad range or non-positive amount.
        """
        _validate(start, end, amount)
        budget = LabelService(self.session).get_budget(user_id, budget_id)

        limit = BudgetLimit(budget=budget, start_date=start, end_date=end, amount=amount)
        self.session.add(limit)
        self.session.flush()

        logger.info(
            "budget_limit_created",
            extra={"budget_limit_id": limit.id, "budget_id": budget.id},
        )
        return self._to_info(user_id, limit)

    def get(self, user_id: int, limit_id: int) -> BudgetLimitInfo:
        """
        Raises:
            BudgetLimitNotFoundError: no such limit on the user's budgets.
        """
        return self._to_info(user_id, self._find(user_id, limit_id))

    def update_amount(self, user_id: int, limit_id: int, amount: Decimal) -> BudgetLimitInfo:
        limit = self._find(user_id, limit_id)
        _validate(limit.start_date, limit.end_date, amount)
        limit.amount = amount
        self.session.flush()
        logger.info("budget_limit_updated", extra={"budget_limit_id": limit.id})
        return self._to_info(user_id, limit)

    def spent(self, user_id: int, budget_id: int, start: dt.date, end: dt.date) -> Decimal:
        """Withdrawal spending against ``budget_id`` between ``start`` and ``end``."""
        stmt = (
            select(func.coalesce(func.sum(Transaction.amount), 0, type_=Numeric(38, 9)))
            .join(TransactionJournal, Transaction.transaction_journal_id == TransactionJournal.id)
            .join(
                budget_transaction_journal,
                budget_transaction_journal.c.transaction_journal_id == TransactionJournal.id,
            )
            .where(
                budget_transaction_journal.c.budget_id == budget_id,
                TransactionJournal.user_id == user_id,
                TransactionJournal.transaction_type == TransactionType.WITHDRAWAL,
                TransactionJournal.date >= start,
                TransactionJournal.date <= end,
                Transaction.amount < 0,
            )
        )
        return Decimal(self.session.execute(stmt).scalar_one())

    def _find(self, user_id: int, limit_id: int) -> BudgetLimit:
        stmt = (
            select(BudgetLimit)
            .join(Budget, BudgetLimit.budget_id == Budget.id)
            .where(BudgetLimit.id == limit_id, Budget.user_id == user_id)
        )
        limit = self.session.execute(stmt).scalar_one_or_none()
        if limit is None:
            logger.warning("budget_limit_not_found", extra={"budget_limit_id": limit_id})
            raise BudgetLimitNotFoundError(limit_id)
        return limit

    def _to_info(self, user_id: int, limit: BudgetLimit) -> BudgetLimitInfo:
        return BudgetLimitInfo(
            id=limit.id,
            budget_id=limit.budget_id,
            start_date=limit.start_date,
            end_date=limit.end_date,
            amount=limit.amount,
            spent=self.spent(user_id, limit.budget_id, limit.start_date, limit.end_date),
        )

"""
Module: ledger_kernel.selectors.journal_selector
Responsibility: Read access to journals as immutable JournalInfo DTOs,
    including their legs and associations.
"""

import datetime as dt
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import func, select

from ledger_kernel.models.associations import (
    budget_transaction,
    budget_transaction_journal,
    category_transaction,
    category_transaction_journal,
    tag_transaction_journal,
)
from ledger_kernel.models.category import Category
from ledger_kernel.models.journal import Transaction, TransactionJournal, TransactionType
from ledger_kernel.models.tag import Tag
from ledger_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class LegInfo:
    """One journal leg."""

    id: int
    account_id: int
    amount: Decimal
    currency_id: int
    foreign_amount: Decimal | None
    foreign_currency_id: int | None
    category_names: tuple[str, ...] = ()
    budget_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class JournalInfo:
    """A journal with its legs, tags, categories and budgets."""

    id: int
    user_id: int
    transaction_type: TransactionType
    description: str
    date: dt.date
    currency_id: int
    legs: tuple[LegInfo, ...]
    tags: tuple[str, ...] = ()
    category_names: tuple[str, ...] = ()
    budget_ids: tuple[int, ...] = ()

    @property
    def source(self) -> LegInfo:
        return next(leg for leg in self.legs if leg.amount < 0)

    @property
    def destination(self) -> LegInfo:
        return next(leg for leg in self.legs if leg.amount > 0)

    @property
    def is_balanced(self) -> bool:
        """Exactly two legs summing to zero, foreign amounts included."""
        if len(self.legs) != 2:
            return False
        first, second = self.legs
        if first.amount + second.amount != 0:
            return False
        if first.currency_id != second.currency_id:
            return False
        if first.foreign_amount is None or second.foreign_amount is None:
            return first.foreign_amount is None and second.foreign_amount is None
        return first.foreign_amount + second.foreign_amount == 0


class JournalSelector(BaseSelector):
    """Query journals."""

    def get(self, journal_id: int, user_id: int | None = None) -> JournalInfo | None:
        """The journal, or None when missing or (with user_id) not owned."""
        stmt = select(TransactionJournal).where(TransactionJournal.id == journal_id)
        if user_id is not None:
            stmt = stmt.where(TransactionJournal.user_id == user_id)
        journal = self.session.execute(stmt).scalar_one_or_none()
        if journal is None:
            return None

        legs = self.session.execute(
            select(Transaction)
            .where(Transaction.transaction_journal_id == journal.id)
            .order_by(Transaction.id)
        ).scalars().all()

        return JournalInfo(
            id=journal.id,
            user_id=journal.user_id,
            transaction_type=journal.transaction_type,
            description=journal.description,
            date=journal.date,
            currency_id=journal.currency_id,
            legs=tuple(self._leg_info(leg) for leg in legs),
            tags=self.tag_names(journal.id),
            category_names=tuple(
                self.session.execute(
                    select(Category.name)
                    .join(category_transaction_journal)
                    .where(category_transaction_journal.c.transaction_journal_id == journal.id)
                    .order_by(Category.name)
                ).scalars()
            ),
            budget_ids=tuple(
                self.session.execute(
                    select(budget_transaction_journal.c.budget_id)
                    .where(budget_transaction_journal.c.transaction_journal_id == journal.id)
                    .order_by(budget_transaction_journal.c.budget_id)
                ).scalars()
            ),
        )

    def tag_names(self, journal_id: int) -> tuple[str, ...]:
        """Tag names linked to the journal, alphabetically."""
        return tuple(
            self.session.execute(
                select(Tag.tag)
                .join(tag_transaction_journal)
                .where(tag_transaction_journal.c.transaction_journal_id == journal_id)
                .order_by(Tag.tag)
            ).scalars()
        )

    def count_for_user(self, user_id: int) -> int:
        return self.session.execute(
            select(func.count(TransactionJournal.id)).where(
                TransactionJournal.user_id == user_id
            )
        ).scalar_one()

    def _leg_info(self, leg: Transaction) -> LegInfo:
        return LegInfo(
            id=leg.id,
            account_id=leg.account_id,
            amount=leg.amount,
            currency_id=leg.transaction_currency_id,
            foreign_amount=leg.foreign_amount,
            foreign_currency_id=leg.foreign_currency_id,
            category_names=tuple(
                self.session.execute(
                    select(Category.name)
                    .join(category_transaction)
                    .where(category_transaction.c.transaction_id == leg.id)
                    .order_by(Category.name)
                ).scalars()
            ),
            budget_ids=tuple(
                self.session.execute(
                    select(budget_transaction.c.budget_id)
                    .where(budget_transaction.c.transaction_id == leg.id)
                    .order_by(budget_transaction.c.budget_id)
                ).scalars()
            ),
        )

"""
Module: ledger_kernel.models.journal
Responsibility: ORM persistence for transaction journals and their legs --
    the ledger's record of every money movement.
Architecture position: Kernel > Models. May import from db/base.py and
    sibling models only.

Invariants enforced:
    - A committed journal has exactly two legs (written by JournalBuilder
      inside one transaction; JournalInfo.is_balanced is the read-side check).
    - Legs carry opposite-signed amounts of equal magnitude in one
      currency; foreign amounts, when present, are opposite-signed too.
    - transaction_type never changes after creation.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import Date, Enum as SAEnum, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase
from ledger_kernel.models.associations import (
    budget_transaction,
    budget_transaction_journal,
    category_transaction,
    category_transaction_journal,
    tag_transaction_journal,
)

if TYPE_CHECKING:
    from ledger_kernel.models.account import Account
    from ledger_kernel.models.budget import Budget
    from ledger_kernel.models.category import Category
    from ledger_kernel.models.tag import Tag


class TransactionType(str, Enum):
    """Kind of money movement a journal records."""

    WITHDRAWAL = "Withdrawal"
    DEPOSIT = "Deposit"
    TRANSFER = "Transfer"
    OPENING_BALANCE = "Opening balance"


class TransactionJournal(TrackedBase):
    """
    One logical economic event, composed of two Transaction legs.

    Budgets, categories and tags attach at this level; categories and
    budgets may additionally attach to individual legs.
    """

    __tablename__ = "transaction_journals"

    __table_args__ = (
        Index("idx_journal_user_date", "user_id", "date"),
    )

    user_id: Mapped[int] = mapped_column(nullable=False)

    transaction_type: Mapped[TransactionType] = mapped_column(
        SAEnum(
            TransactionType,
            native_enum=False,
            length=30,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
    )

    # Native currency of the journal (primary leg currency)
    currency_id: Mapped[int] = mapped_column(
        ForeignKey("transaction_currencies.id"),
        nullable=False,
    )

    description: Mapped[str] = mapped_column(String(1024), nullable=False)

    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    transactions: Mapped[list["Transaction"]] = relationship(
        back_populates="journal",
        cascade="all, delete-orphan",
        order_by="Transaction.id",
    )

    tags: Mapped[list["Tag"]] = relationship(
        secondary=tag_transaction_journal,
        order_by="Tag.tag",
        viewonly=True,
    )

    categories: Mapped[list["Category"]] = relationship(
        secondary=category_transaction_journal,
        viewonly=True,
    )

    budgets: Mapped[list["Budget"]] = relationship(
        secondary=budget_transaction_journal,
        viewonly=True,
    )

    def __repr__(self) -> str:
        return f"<TransactionJournal #{self.id} {self.description!r}>"


class Transaction(TrackedBase):
    """
    One account-side leg of a journal.

    Source legs are negative, destination legs positive. foreign_amount and
    foreign_currency_id preserve what the user entered when it differed
    from the native currency; both are NULL otherwise.
    """

    __tablename__ = "transactions"

    __table_args__ = (
        Index("idx_transaction_journal", "transaction_journal_id"),
        Index("idx_transaction_account", "account_id"),
    )

    transaction_journal_id: Mapped[int] = mapped_column(
        ForeignKey("transaction_journals.id", ondelete="CASCADE"),
        nullable=False,
    )

    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)

    transaction_currency_id: Mapped[int] = mapped_column(
        ForeignKey("transaction_currencies.id"),
        nullable=False,
    )

    foreign_amount: Mapped[Decimal | None] = mapped_column(Numeric(38, 9), nullable=True)

    foreign_currency_id: Mapped[int | None] = mapped_column(
        ForeignKey("transaction_currencies.id"),
        nullable=True,
    )

    # Pairs legs within a journal; a simple journal has one pair, 0
    identifier: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    journal: Mapped["TransactionJournal"] = relationship(back_populates="transactions")

    account: Mapped["Account"] = relationship()

    categories: Mapped[list["Category"]] = relationship(
        secondary=category_transaction,
        viewonly=True,
    )

    budgets: Mapped[list["Budget"]] = relationship(
        secondary=budget_transaction,
        viewonly=True,
    )

    def __repr__(self) -> str:
        return f"<Transaction #{self.id} {self.amount} on account #{self.account_id}>"

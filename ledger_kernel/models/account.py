"""
Module: ledger_kernel.models.account
Responsibility: ORM persistence for user-owned accounts, the targets of
    every journal leg.
Architecture position: Kernel > Models. May import from db/base.py only.

Invariants enforced:
    - (user_id, account_type, name) is unique (uq_account_user_type_name).
      Counterparty find-or-create relies on this constraint to stay
      idempotent under concurrent requests.
    - Accounts are never shared across users; every lookup scopes by
      user_id.
"""

from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Enum as SAEnum, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase

if TYPE_CHECKING:
    from ledger_kernel.models.currency import Currency


class AccountType(str, Enum):
    """Kinds of accounts a user can hold or transact with."""

    ASSET = "Asset account"
    EXPENSE = "Expense account"
    REVENUE = "Revenue account"
    CASH = "Cash account"
    INITIAL_BALANCE = "Initial balance account"


class Account(TrackedBase):
    """
    A single account owned by one user.

    Asset accounts are created explicitly by the user and carry a native
    currency. Expense, Revenue and Cash accounts are usually created
    implicitly as counterparties and may have no native currency.
    """

    __tablename__ = "accounts"

    __table_args__ = (
        UniqueConstraint(
            "user_id", "account_type", "name", name="uq_account_user_type_name"
        ),
        Index("idx_account_user", "user_id"),
    )

    user_id: Mapped[int] = mapped_column(nullable=False)

    account_type: Mapped[AccountType] = mapped_column(
        SAEnum(
            AccountType,
            native_enum=False,
            length=40,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Native currency, fixed at creation
    currency_id: Mapped[int | None] = mapped_column(
        ForeignKey("transaction_currencies.id"),
        nullable=True,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    currency: Mapped["Currency | None"] = relationship()

    def __repr__(self) -> str:
        return f"<Account #{self.id} {self.name!r}>"

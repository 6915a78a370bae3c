"""
Module: ledger_kernel.models.budget
Responsibility: ORM persistence for budgets and their per-period limits.
Architecture position: Kernel > Models.

Invariants enforced:
    - (user_id, name) is unique per budget (uq_budget_user_name).
    - A BudgetLimit belongs to exactly one Budget and is only reachable
      through its budget's owner (enforced by BudgetLimitService, which
      joins through budgets.user_id on every lookup).
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, ForeignKey, Index, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase


class Budget(TrackedBase):
    """A user-owned envelope that withdrawals can be charged against."""

    __tablename__ = "budgets"

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_budget_user_name"),
    )

    user_id: Mapped[int] = mapped_column(nullable=False)

    name: Mapped[str] = mapped_column(String(1024), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    limits: Mapped[list["BudgetLimit"]] = relationship(
        back_populates="budget",
        cascade="all, delete-orphan",
        order_by="BudgetLimit.start_date",
    )

    def __repr__(self) -> str:
        return f"<Budget #{self.id} {self.name!r}>"


class BudgetLimit(TrackedBase):
    """Allowed spend for a budget over an inclusive date range."""

    __tablename__ = "budget_limits"

    __table_args__ = (
        Index("idx_budget_limit_budget", "budget_id"),
    )

    budget_id: Mapped[int] = mapped_column(
        ForeignKey("budgets.id", ondelete="CASCADE"),
        nullable=False,
    )

    start_date: Mapped[date] = mapped_column(Date, nullable=False)

    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    amount: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)

    budget: Mapped["Budget"] = relationship(back_populates="limits")

    def __repr__(self) -> str:
        return f"<BudgetLimit #{self.id} {self.start_date}..{self.end_date} {self.amount}>"

"""
Module: ledger_kernel.models.currency
Responsibility: ORM persistence for transaction currencies.
Architecture position: Kernel > Models. May import from db/base.py only.
"""

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase


class Currency(TrackedBase):
    """
    A currency known to the ledger.

    Accounts reference a Currency as their fixed native currency; journal
    legs reference one as their transaction (and optionally foreign)
    currency.
    """

    __tablename__ = "transaction_currencies"

    __table_args__ = (
        UniqueConstraint("code", name="uq_currency_code"),
    )

    # ISO 4217 code
    code: Mapped[str] = mapped_column(String(3), nullable=False)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    decimal_places: Mapped[int] = mapped_column(Integer, nullable=False, default=2)

    def __repr__(self) -> str:
        return f"<Currency {self.code}>"

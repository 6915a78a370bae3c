"""
Module: ledger_kernel.models.category
Responsibility: ORM persistence for user categories.
Architecture position: Kernel > Models.

Invariants enforced:
    - (user_id, name) is unique (uq_category_user_name).
"""

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase


class Category(TrackedBase):
    """A spending/earning category, linked to journals or single legs."""

    __tablename__ = "categories"

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_category_user_name"),
    )

    user_id: Mapped[int] = mapped_column(nullable=False)

    name: Mapped[str] = mapped_column(String(1024), nullable=False)

    def __repr__(self) -> str:
        return f"<Category #{self.id} {self.name!r}>"

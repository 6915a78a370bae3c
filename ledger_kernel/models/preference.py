"""
Module: ledger_kernel.models.preference
Responsibility: ORM persistence for per-user preferences (language, ...).
Architecture position: Kernel > Models.
"""

from typing import Any

from sqlalchemy import JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase


class Preference(TrackedBase):
    """A named JSON value stored for one user."""

    __tablename__ = "preferences"

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_preference_user_name"),
    )

    user_id: Mapped[int] = mapped_column(nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    data: Mapped[Any] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<Preference {self.name}={self.data!r}>"

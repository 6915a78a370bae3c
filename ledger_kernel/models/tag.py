"""
Module: ledger_kernel.models.tag
Responsibility: ORM persistence for user tags.
Architecture position: Kernel > Models.

Invariants enforced:
    - (user_id, tag) is unique (uq_tag_user_tag); tags are created on first
      use through a conflict-ignoring insert.
"""

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase


class Tag(TrackedBase):
    """A free-form label a user attaches to journals."""

    __tablename__ = "tags"

    __table_args__ = (
        UniqueConstraint("user_id", "tag", name="uq_tag_user_tag"),
    )

    user_id: Mapped[int] = mapped_column(nullable=False)

    tag: Mapped[str] = mapped_column(String(1024), nullable=False)

    def __repr__(self) -> str:
        return f"<Tag #{self.id} {self.tag!r}>"

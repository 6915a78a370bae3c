"""
LabelService -- tag, category and budget repository.

Responsibility:
    Idempotent find-or-create for tags and categories (and budgets), owner
    scoped budget lookup, and the association primitives used by
    BudgetCategoryLinker and TagReconciler.

Invariants enforced:
    - Find-or-create is an INSERT ... ON CONFLICT DO NOTHING on the
      (user_id, name) unique constraint followed by a SELECT, so two
      concurrent requests can never create the same label twice.
    - Association inserts ignore conflicts on the link table's composite
      primary key: linking twice is a no-op.
    - Budgets are looked up by id AND owner; another user's budget is
      reported as not found.
"""

from typing import Any, Iterable, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ledger_kernel.db.upsert import insert_ignoring_conflict
from ledger_kernel.exceptions import BudgetNotFoundError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.associations import (
    budget_transaction,
    budget_transaction_journal,
    category_transaction,
    category_transaction_journal,
    tag_transaction_journal,
)
from ledger_kernel.models.budget import Budget
from ledger_kernel.models.category import Category
from ledger_kernel.models.tag import Tag
from ledger_kernel.services.base import BaseService

logger = get_logger("services.labels")

LabelT = TypeVar("LabelT", Tag, Category, Budget)


def find_or_create(
    session: Session,
    model: type[LabelT],
    key: dict[str, Any],
    defaults: dict[str, Any] | None = None,
) -> LabelT:
    """
    Return the single ``model`` row matching ``key``, creating it if absent.

    ``key`` must name exactly the columns of a unique constraint on
    ``model``.
    """
    insert_ignoring_conflict(
        session,
        model,
        {**(defaults or {}), **key},
        conflict_columns=tuple(key),
    )
    stmt = select(model).filter_by(**key)
    return session.execute(stmt).scalar_one()


class LabelService(BaseService):
    """Repository for user labels and their journal/leg associations."""

    # -- find-or-create -----------------------------------------------------

    def upsert_tag(self, user_id: int, name: str) -> Tag:
        return find_or_create(self.session, Tag, {"user_id": user_id, "tag": name})

    def upsert_category(self, user_id: int, name: str) -> Category:
        return find_or_create(self.session, Category, {"user_id": user_id, "name": name})

    def upsert_budget(self, user_id: int, name: str) -> Budget:
        return find_or_create(
            self.session,
            Budget,
            {"user_id": user_id, "name": name},
            defaults={"is_active": True},
        )

    def get_budget(self, user_id: int, budget_id: int) -> Budget:
        """
        Get a budget owned by ``user_id``.

        Raises:
            BudgetNotFoundError: no such budget for this user.
        """
        stmt = select(Budget).where(Budget.id == budget_id, Budget.user_id == user_id)
        budget = self.session.execute(stmt).scalar_one_or_none()
        if budget is None:
            raise BudgetNotFoundError(budget_id, user_id)
        return budget

    # -- associations -------------------------------------------------------

    def link_journal_tag(self, journal_id: int, tag_id: int) -> None:
        insert_ignoring_conflict(
            self.session,
            tag_transaction_journal,
            {"tag_id": tag_id, "transaction_journal_id": journal_id},
            conflict_columns=("tag_id", "transaction_journal_id"),
        )

    def unlink_journal_tags_except(self, journal_id: int, keep_tag_ids: Iterable[int]) -> int:
        """Delete the journal's tag links not in ``keep_tag_ids``; empty keeps none."""
        keep = list(keep_tag_ids)
        stmt = delete(tag_transaction_journal).where(
            tag_transaction_journal.c.transaction_journal_id == journal_id
        )
        if keep:
            stmt = stmt.where(tag_transaction_journal.c.tag_id.not_in(keep))
        return self.session.execute(stmt).rowcount

    def journal_tag_ids(self, journal_id: int) -> set[int]:
        stmt = select(tag_transaction_journal.c.tag_id).where(
            tag_transaction_journal.c.transaction_journal_id == journal_id
        )
        return set(self.session.execute(stmt).scalars())

    def link_journal_category(self, journal_id: int, category_id: int) -> None:
        insert_ignoring_conflict(
            self.session,
            category_transaction_journal,
            {"category_id": category_id, "transaction_journal_id": journal_id},
            conflict_columns=("category_id", "transaction_journal_id"),
        )

    def link_journal_budget(self, journal_id: int, budget_id: int) -> None:
        insert_ignoring_conflict(
            self.session,
            budget_transaction_journal,
            {"budget_id": budget_id, "transaction_journal_id": journal_id},
            conflict_columns=("budget_id", "transaction_journal_id"),
        )

    def link_transaction_category(self, transaction_id: int, category_id: int) -> None:
        insert_ignoring_conflict(
            self.session,
            category_transaction,
            {"category_id": category_id, "transaction_id": transaction_id},
            conflict_columns=("category_id", "transaction_id"),
        )

    def link_transaction_budget(self, transaction_id: int, budget_id: int) -> None:
        insert_ignoring_conflict(
            self.session,
            budget_transaction,
            {"budget_id": budget_id, "transaction_id": transaction_id},
            conflict_columns=("budget_id", "transaction_id"),
        )

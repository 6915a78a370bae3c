"""
BudgetCategoryLinker -- conditional budget/category associations.

Rules:
    - Journal-level budget: Withdrawal journals with a positive budget id.
    - Leg-level budget: any non-Transfer journal with a positive budget id.
    - Category (by name), journal or leg level: whenever the name is
      non-empty; found-or-created per (user, name) first.

Budget and category are independent targets: a budget is only ever
written to a budget link table, a category only to a category link table.
"""

from sqlalchemy.orm import Session

from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.journal import Transaction, TransactionJournal, TransactionType
from ledger_kernel.services.label_service import LabelService

logger = get_logger("services.budget_category_linker")


class BudgetCategoryLinker:
    """Attaches budgets and categories to journals and their legs."""

    def __init__(self, session: Session, labels: LabelService | None = None):
        self._labels = labels or LabelService(session)

    def store_budget_with_journal(self, journal: TransactionJournal, budget_id: int) -> bool:
        """
        Link ``budget_id`` to a withdrawal journal.

        Returns True when a link was made.

        Raises:
            BudgetNotFoundError: the budget is not the journal owner's.
        """
        if budget_id <= 0 or journal.transaction_type != TransactionType.WITHDRAWAL:
            return False
        budget = self._labels.get_budget(journal.user_id, budget_id)
        self._labels.link_journal_budget(journal.id, budget.id)
        logger.debug("journal_budget_linked", extra={"budget_id": budget.id})
        return True

    def store_budget_with_transaction(
        self,
        transaction: Transaction,
        journal: TransactionJournal,
        budget_id: int,
    ) -> bool:
        if budget_id <= 0 or journal.transaction_type == TransactionType.TRANSFER:
            return False
        budget = self._labels.get_budget(journal.user_id, budget_id)
        self._labels.link_transaction_budget(transaction.id, budget.id)
        logger.debug(
            "transaction_budget_linked",
            extra={"transaction_id": transaction.id, "budget_id": budget.id},
        )
        return True

    def store_category_with_journal(self, journal: TransactionJournal, category: str) -> bool:
        if not category:
            return False
        found = self._labels.upsert_category(journal.user_id, category)
        self._labels.link_journal_category(journal.id, found.id)
        logger.debug("journal_category_linked", extra={"category_id": found.id})
        return True

    def store_category_with_transaction(
        self,
        transaction: Transaction,
        journal: TransactionJournal,
        category: str,
    ) -> bool:
        if not category:
            return False
        found = self._labels.upsert_category(journal.user_id, category)
        self._labels.link_transaction_category(transaction.id, found.id)
        logger.debug(
            "transaction_category_linked",
            extra={"transaction_id": transaction.id, "category_id": found.id},
        )
        return True

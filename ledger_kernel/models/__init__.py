"""ORM models for the ledger kernel."""

from ledger_kernel.models.account import Account, AccountType
from ledger_kernel.models.associations import (
    budget_transaction,
    budget_transaction_journal,
    category_transaction,
    category_transaction_journal,
    tag_transaction_journal,
)
from ledger_kernel.models.budget import Budget, BudgetLimit
from ledger_kernel.models.category import Category
from ledger_kernel.models.currency import Currency
from ledger_kernel.models.journal import Transaction, TransactionJournal, TransactionType
from ledger_kernel.models.preference import Preference
from ledger_kernel.models.tag import Tag

__all__ = [
    "Account",
    "AccountType",
    "Budget",
    "BudgetLimit",
    "Category",
    "Currency",
    "Preference",
    "Tag",
    "Transaction",
    "TransactionJournal",
    "TransactionType",
    "budget_transaction",
    "budget_transaction_journal",
    "category_transaction",
    "category_transaction_journal",
    "tag_transaction_journal",
]

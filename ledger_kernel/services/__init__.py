"""
Kernel services -- the imperative shell around the pure domain core.

Services take a SQLAlchemy session and flush; only JournalBuilder (with
auto_commit) and session_scope() ever commit.
"""

from ledger_kernel.services.account_resolver import (
    DEFAULT_CASH_ACCOUNT_NAME,
    AccountResolver,
    ResolvedAccounts,
)
from ledger_kernel.services.budget_category_linker import BudgetCategoryLinker
from ledger_kernel.services.budget_limit_service import BudgetLimitInfo, BudgetLimitService
from ledger_kernel.services.currency_service import CurrencyService
from ledger_kernel.services.help_service import (
    PLACEHOLDER,
    HelpService,
    MemoryHelpCache,
    RemoteHelpSource,
)
from ledger_kernel.services.journal_builder import JournalBuilder
from ledger_kernel.services.label_service import LabelService
from ledger_kernel.services.preference_service import PreferenceService
from ledger_kernel.services.tag_reconciler import TagReconciler

__all__ = [
    "AccountResolver",
    "BudgetCategoryLinker",
    "BudgetLimitInfo",
    "BudgetLimitService",
    "CurrencyService",
    "DEFAULT_CASH_ACCOUNT_NAME",
    "HelpService",
    "JournalBuilder",
    "LabelService",
    "MemoryHelpCache",
    "PLACEHOLDER",
    "PreferenceService",
    "RemoteHelpSource",
    "ResolvedAccounts",
    "TagReconciler",
]

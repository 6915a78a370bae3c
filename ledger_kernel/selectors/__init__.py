"""Read-only selectors."""

from ledger_kernel.selectors.journal_selector import JournalInfo, JournalSelector, LegInfo

__all__ = ["JournalInfo", "JournalSelector", "LegInfo"]

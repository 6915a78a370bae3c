"""Pure domain logic: input parsing, currency reconciliation, time."""

from ledger_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from ledger_kernel.domain.currency_reconciler import (
    CurrencyReconciler,
    NormalizedAmounts,
    account_currency,
)
from ledger_kernel.domain.transaction_input import TransactionInput

__all__ = [
    "Clock",
    "CurrencyReconciler",
    "DeterministicClock",
    "NormalizedAmounts",
    "SystemClock",
    "TransactionInput",
    "account_currency",
]

"""
Ledger Kernel

Transaction-journal construction for a personal-finance ledger:
- Account resolution with idempotent counterparty creation
- Native/foreign currency reconciliation
- Atomic two-leg journals
- Budget, category and tag associations
"""

__version__ = "0.1.0"

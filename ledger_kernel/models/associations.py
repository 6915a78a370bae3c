"""
Module: ledger_kernel.models.associations
Responsibility: Many-to-many link tables between journals/legs and their
    tags, categories and budgets.
Architecture position: Kernel > Models.

Invariants enforced:
    - Every link table has a composite primary key, so a link exists at
      most once and re-adding it is a conflict-ignored no-op.
    - Links cascade on delete of either side.
"""

from sqlalchemy import Column, ForeignKey, Table

from ledger_kernel.db.base import Base, IdType

tag_transaction_journal = Table(
    "tag_transaction_journal",
    Base.metadata,
    Column("tag_id", IdType, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "transaction_journal_id",
        IdType,
        ForeignKey("transaction_journals.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)

category_transaction_journal = Table(
    "category_transaction_journal",
    Base.metadata,
    Column("category_id", IdType, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "transaction_journal_id",
        IdType,
        ForeignKey("transaction_journals.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)

budget_transaction_journal = Table(
    "budget_transaction_journal",
    Base.metadata,
    Column("budget_id", IdType, ForeignKey("budgets.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "transaction_journal_id",
        IdType,
        ForeignKey("transaction_journals.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)

category_transaction = Table(
    "category_transaction",
    Base.metadata,
    Column("category_id", IdType, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
    Column("transaction_id", IdType, ForeignKey("transactions.id", ondelete="CASCADE"), primary_key=True),
)

budget_transaction = Table(
    "budget_transaction",
    Base.metadata,
    Column("budget_id", IdType, ForeignKey("budgets.id", ondelete="CASCADE"), primary_key=True),
    Column("transaction_id", IdType, ForeignKey("transactions.id", ondelete="CASCADE"), primary_key=True),
)

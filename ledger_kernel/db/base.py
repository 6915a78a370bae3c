"""
Declarative base for the ledger models.

Column conventions:
    int       -> BIGINT (INTEGER on SQLite, which only autoincrements that)
    Decimal   -> NUMERIC(38, 9); amounts are never stored as floats
    datetime  -> TIMESTAMP WITH TIME ZONE

Ids are exposed to callers (``source_account_id``, ``budget_id``), so every
table gets an autoincrementing integer ``id``.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, ClassVar

from sqlalchemy import BigInteger, DateTime, Integer, Numeric, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

IdType = BigInteger().with_variant(Integer(), "sqlite")

_Timestamp = DateTime(timezone=True)

class Base(DeclarativeBase):
    type_annotation_map: ClassVar[dict[Any, Any]] = {
        int: IdType,
        Decimal: Numeric(38, 9),
        datetime: _Timestamp,
    }

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)


class TrackedBase(Base):
    """Base for rows that record when they were created and last changed."""

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), onupdate=func.now())

"""Database layer - engine, base classes, upsert."""

from ledger_kernel.db.base import Base, IdType, TrackedBase
from ledger_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from ledger_kernel.db.upsert import insert_ignoring_conflict

__all__ = [
    "Base",
    "IdType",
    "TrackedBase",
    "create_tables",
    "drop_tables",
    "get_engine",
    "get_session",
    "get_session_factory",
    "init_engine_from_url",
    "insert_ignoring_conflict",
    "reset_engine",
    "session_scope",
]

"""
Module: ledger_kernel.db.upsert
Responsibility: Conflict-ignoring INSERT for find-or-create keys and
    association rows.

Invariants enforced:
    - The uniqueness key MUST be backed by a UNIQUE constraint or primary
      key named by ``conflict_columns``. Two concurrent writers both
      observing "not found" can never both insert: the loser's INSERT is a
      no-op and its follow-up SELECT returns the winner's row.

Failure modes:
    - NotImplementedError for dialects without ON CONFLICT support.
"""

from typing import Any, Sequence

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def insert_ignoring_conflict(
    session: Session,
    target: Any,
    values: dict[str, Any],
    conflict_columns: Sequence[str],
) -> None:
    """
    INSERT ``values`` into ``target`` unless the conflict key already exists.

    Args:
        session: Active session; the statement joins its transaction.
        target: Mapped class or Core ``Table``.
        values: Column values for the new row.
        conflict_columns: Columns of the unique constraint guarding the key.
    """
    dialect = session.get_bind().dialect.name
    insert = _INSERT_BY_DIALECT.get(dialect)
    if insert is None:
        raise NotImplementedError(f"ON CONFLICT insert not supported for {dialect}")

    stmt = insert(target).values(**values).on_conflict_do_nothing(
        index_elements=list(conflict_columns)
    )
    session.execute(stmt)

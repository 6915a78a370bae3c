"""
Module: ledger_kernel.selectors.base
Responsibility: Base class for read-only query selectors.

Selectors accept a Session from the caller, run read-only queries and
return frozen DTOs. They never add, delete, flush or commit.
"""

from abc import ABC

from sqlalchemy.orm import Session


class BaseSelector(ABC):
    """Read-only query access over a caller-owned session."""

    def __init__(self, session: Session):
        self.session = session

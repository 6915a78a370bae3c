"""Shared constructor for session-bound services."""

from sqlalchemy.orm import Session


class BaseService:
    """
    A service bound to a caller-owned session.

    Services write with ``session.flush()`` only. Committing or rolling back
    is left to whoever opened the session, so a journal, its legs and their
    links land or vanish together.
    """

    def __init__(self, session: Session):
        self.session = session

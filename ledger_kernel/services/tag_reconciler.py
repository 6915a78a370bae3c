"""
TagReconciler -- makes a journal's tag set equal a requested name list.

Algorithm:
    1. Find-or-create a Tag for every trimmed, non-blank requested name;
       the resulting ids form the desired set D.
    2. Delete every journal<->tag link whose tag is not in D (all links
       when D is empty).
    3. Insert the links in D that are missing (conflict-ignored).

Repeating a call with the same names changes nothing; calling with a
subset drops the links for the names no longer present.
"""

from typing import Iterable

from sqlalchemy.orm import Session

from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.journal import TransactionJournal
from ledger_kernel.services.label_service import LabelService

logger = get_logger("services.tag_reconciler")


class TagReconciler:
    """Idempotent synchronization of journal tags."""

    def __init__(self, session: Session, labels: LabelService | None = None):
        self._session = session
        self._labels = labels or LabelService(session)

    def sync_tags(self, journal: TransactionJournal, requested_names: Iterable[str]) -> bool:
        desired: dict[int, str] = {}
        for raw in requested_names:
            name = raw.strip()
            if not name:
                continue
            tag = self._labels.upsert_tag(journal.user_id, name)
            desired[tag.id] = tag.tag

        removed = self._labels.unlink_journal_tags_except(journal.id, desired)
        existing = self._labels.journal_tag_ids(journal.id)
        added = 0
        for tag_id in desired:
            if tag_id not in existing:
                self._labels.link_journal_tag(journal.id, tag_id)
                added += 1

        # journal.tags is a view over the link table
        self._session.expire(journal, ["tags"])

        logger.info(
            "tags_synchronized",
            extra={
                "journal_id": journal.id,
                "tag_count": len(desired),
                "added": added,
                "removed": removed,
            },
        )
        return True

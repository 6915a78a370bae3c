"""
Tests for TagReconciler.

Covers:
- Desired-set synchronization (add, keep, remove)
- Blank and whitespace names
- Idempotence (property-based)
"""

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st
from sqlalchemy import func, select

from ledger_kernel.models.journal import TransactionJournal
from ledger_kernel.models.tag import Tag
from ledger_kernel.selectors.journal_selector import JournalSelector
from ledger_kernel.services.tag_reconciler import TagReconciler


@pytest.fixture
def journal(session, builder, user_id, checking_eur) -> TransactionJournal:
    info = builder.build(
        user_id,
        {
            "what": "withdrawal",
            "description": "Tagged",
            "source_account_id": checking_eur.id,
            "amount": "9.99",
        },
    )
    return session.get(TransactionJournal, info.id)


class TestSyncTags:
    def test_adds_requested_tags(self, session, journal):
        assert TagReconciler(session).sync_tags(journal, ["holiday", "food"]) is True

        assert JournalSelector(session).tag_names(journal.id) == ("food", "holiday")

    def test_subset_removes_dropped_tags(self, session, journal):
        reconciler = TagReconciler(session)
        reconciler.sync_tags(journal, ["a", "b", "c"])

        reconciler.sync_tags(journal, ["b"])

        assert JournalSelector(session).tag_names(journal.id) == ("b",)

    def test_empty_list_removes_all(self, session, journal):
        reconciler = TagReconciler(session)
        reconciler.sync_tags(journal, ["a", "b"])

        reconciler.sync_tags(journal, [])

        assert JournalSelector(session).tag_names(journal.id) == ()

    def test_blank_names_are_ignored(self, session, journal):
        TagReconciler(session).sync_tags(journal, ["  ", "", " trip "])

        assert JournalSelector(session).tag_names(journal.id) == ("trip",)

    def test_tags_are_reused_not_duplicated(self, session, journal):
        reconciler = TagReconciler(session)
        reconciler.sync_tags(journal, ["x"])
        reconciler.sync_tags(journal, ["x", "x "])

        assert session.execute(select(func.count(Tag.id))).scalar_one() == 1

    def test_relationship_view_is_refreshed(self, session, journal):
        TagReconciler(session).sync_tags(journal, ["first"])
        assert [t.tag for t in journal.tags] == ["first"]

        TagReconciler(session).sync_tags(journal, ["second"])
        assert [t.tag for t in journal.tags] == ["second"]


tag_names = st.lists(
    st.text(alphabet="abcdef ", min_size=0, max_size=6),
    max_size=6,
)


class TestSyncTagsProperties:
    @settings(
        max_examples=30,
        deadline=None,
        suppress_health_check=[HealthCheck.function_scoped_fixture],
    )
    @given(first=tag_names, second=tag_names)
    def test_result_depends_only_on_last_request(self, session, journal, first, second):
        reconciler = TagReconciler(session)
        selector = JournalSelector(session)

        reconciler.sync_tags(journal, first)
        reconciler.sync_tags(journal, second)
        after_two = selector.tag_names(journal.id)
        reconciler.sync_tags(journal, second)
        after_repeat = selector.tag_names(journal.id)

        expected = {name.strip() for name in second if name.strip()}
        assert set(after_two) == expected
        assert len(after_two) == len(expected)
        assert after_repeat == after_two

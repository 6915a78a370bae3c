"""
Tests for JournalBuilder.

Covers:
- Withdrawal into an auto-created expense account
- Foreign-currency deposit and cross-currency transfer
- Category, budget and tag links on journal and legs
- Atomicity: failures leave no journal, leg or counterparty behind,
  including storage errors, collaborator errors and caller-owned transactions
- Structured log events
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from ledger_kernel.domain.currency_reconciler import CurrencyReconciler, account_currency
from ledger_kernel.exceptions import (
    BudgetNotFoundError,
    CurrencyReconciliationError,
    InvalidInputError,
    MissingAccountError,
    PersistenceError,
    UnrecognizedTypeError,
)
from ledger_kernel.models.account import Account, AccountType
from ledger_kernel.models.category import Category
from ledger_kernel.models.journal import Transaction, TransactionJournal, TransactionType
from ledger_kernel.models.tag import Tag
from ledger_kernel.selectors.journal_selector import JournalSelector
from ledger_kernel.services.journal_builder import JournalBuilder


def _count(session, column) -> int:
    return session.execute(select(func.count(column))).scalar_one()


class TestWithdrawal:
    def test_withdrawal_to_new_expense_account(self, session, builder, user_id, checking_eur, eur):
        journal = builder.build(
            user_id,
            {
                "what": "withdrawal",
                "description": "Groceries",
                "source_account_id": checking_eur.id,
                "destination_account_name": "Supermarket",
                "amount": "20.00",
                "currency_id": eur.id,
            },
        )

        expense = session.execute(
            select(Account).where(
                Account.user_id == user_id,
                Account.account_type == AccountType.EXPENSE,
                Account.name == "Supermarket",
            )
        ).scalar_one()

        assert journal.transaction_type == TransactionType.WITHDRAWAL
        assert journal.currency_id == eur.id
        assert len(journal.legs) == 2
        assert journal.source.account_id == checking_eur.id
        assert journal.source.amount == Decimal("-20.00")
        assert journal.destination.account_id == expense.id
        assert journal.destination.amount == Decimal("20.00")
        for leg in journal.legs:
            assert leg.currency_id == eur.id
            assert leg.foreign_amount is None
            assert leg.foreign_currency_id is None
        assert journal.is_balanced

    def test_date_defaults_to_clock(self, builder, user_id, checking_eur, deterministic_clock):
        journal = builder.build(
            user_id,
            {
                "what": "withdrawal",
                "description": "Coffee",
                "source_account_id": checking_eur.id,
                "amount": "3.10",
            },
        )

        assert journal.date == deterministic_clock.today()

    def test_explicit_date_is_kept(self, builder, user_id, checking_eur):
        journal = builder.build(
            user_id,
            {
                "what": "withdrawal",
                "description": "Coffee",
                "source_account_id": checking_eur.id,
                "amount": "3.10",
                "date": "2023-12-24",
            },
        )

        assert journal.date == date(2023, 12, 24)

    def test_repeated_cash_withdrawals_share_one_cash_account(
        self, session, builder, user_id, checking_eur
    ):
        payload = {
            "what": "withdrawal",
            "description": "ATM",
            "source_account_id": checking_eur.id,
            "amount": "50.00",
        }

        first = builder.build(user_id, payload)
        second = builder.build(user_id, payload)

        assert first.destination.account_id == second.destination.account_id
        cash_count = session.execute(
            select(func.count(Account.id)).where(Account.account_type == AccountType.CASH)
        ).scalar_one()
        assert cash_count == 1


class TestForeignCurrency:
    def test_deposit_in_foreign_currency(self, builder, user_id, savings_usd, eur, usd):
        journal = builder.build(
            user_id,
            {
                "what": "deposit",
                "description": "Refund from Berlin",
                "source_account_name": "Shop GmbH",
                "destination_account_id": savings_usd.id,
                "amount": "50.00",
                "native_amount": "45.00",
                "currency_id": eur.id,
            },
        )

        assert journal.currency_id == usd.id
        assert journal.destination.account_id == savings_usd.id
        assert journal.destination.amount == Decimal("45.00")
        assert journal.destination.currency_id == usd.id
        assert journal.destination.foreign_amount == Decimal("50.00")
        assert journal.destination.foreign_currency_id == eur.id
        assert journal.source.amount == Decimal("-45.00")
        assert journal.source.foreign_amount == Decimal("-50.00")
        assert journal.is_balanced

    def test_cross_currency_transfer(self, builder, user_id, checking_eur, savings_usd, eur, usd):
        journal = builder.build(
            user_id,
            {
                "what": "transfer",
                "description": "Move savings",
                "source_account_id": checking_eur.id,
                "destination_account_id": savings_usd.id,
                "source_amount": "100.00",
                "destination_amount": "92.00",
            },
        )

        assert journal.currency_id == eur.id
        assert journal.source.amount == Decimal("-100.00")
        assert journal.destination.amount == Decimal("100.00")
        assert journal.destination.currency_id == eur.id
        assert journal.destination.foreign_amount == Decimal("92.00")
        assert journal.destination.foreign_currency_id == usd.id
        assert journal.is_balanced


class TestLinks:
    def test_category_budget_and_tags(
        self, session, builder, user_id, checking_eur, create_budget
    ):
        groceries = create_budget("Groceries")

        journal = builder.build(
            user_id,
            {
                "what": "withdrawal",
                "description": "Weekly shop",
                "source_account_id": checking_eur.id,
                "destination_account_name": "Supermarket",
                "amount": "64.30",
                "category": "Food",
                "budget_id": groceries.id,
                "tags": ["weekly", " household ", ""],
            },
        )

        assert journal.category_names == ("Food",)
        assert journal.budget_ids == (groceries.id,)
        assert journal.tags == ("household", "weekly")
        for leg in journal.legs:
            assert leg.category_names == ("Food",)
            assert leg.budget_ids == (groceries.id,)

    def test_transfer_gets_no_budget(
        self, builder, user_id, checking_eur, create_asset_account, eur, create_budget
    ):
        other = create_asset_account("Other EUR", eur)
        budget = create_budget("Anything")

        journal = builder.build(
            user_id,
            {
                "what": "transfer",
                "description": "Shuffle",
                "source_account_id": checking_eur.id,
                "destination_account_id": other.id,
                "source_amount": "10.00",
                "budget_id": budget.id,
            },
        )

        assert journal.budget_ids == ()
        assert all(leg.budget_ids == () for leg in journal.legs)

    def test_deposit_budget_on_legs_only(self, builder, user_id, checking_eur, create_budget):
        budget = create_budget("Income")

        journal = builder.build(
            user_id,
            {
                "what": "deposit",
                "description": "Salary",
                "destination_account_id": checking_eur.id,
                "source_account_name": "Employer",
                "amount": "1000.00",
                "budget_id": budget.id,
            },
        )

        assert journal.budget_ids == ()
        assert all(leg.budget_ids == (budget.id,) for leg in journal.legs)

    def test_category_is_shared_between_journals(
        self, session, builder, user_id, checking_eur
    ):
        payload = {
            "what": "withdrawal",
            "description": "Lunch",
            "source_account_id": checking_eur.id,
            "amount": "12.00",
            "category": "Eating out",
        }

        builder.build(user_id, payload)
        builder.build(user_id, payload)

        assert _count(session, Category.id) == 1


class TestAtomicity:
    def test_foreign_budget_rolls_back_everything(
        self, session, builder, user_id, other_user_id, checking_eur, create_budget
    ):
        theirs = create_budget("Not mine", owner_id=other_user_id)

        with pytest.raises(BudgetNotFoundError):
            builder.build(
                user_id,
                {
                    "what": "withdrawal",
                    "description": "Sneaky",
                    "source_account_id": checking_eur.id,
                    "destination_account_name": "Brand new shop",
                    "amount": "5.00",
                    "category": "Brand new category",
                    "budget_id": theirs.id,
                },
            )

        assert _count(session, TransactionJournal.id) == 0
        assert _count(session, Transaction.id) == 0
        assert _count(session, Category.id) == 0
        expense = session.execute(
            select(Account).where(Account.name == "Brand new shop")
        ).scalar_one_or_none()
        assert expense is None

    def test_missing_native_amount_rolls_back_counterparty(
        self, session, builder, user_id, savings_usd, eur
    ):
        with pytest.raises(CurrencyReconciliationError):
            builder.build(
                user_id,
                {
                    "what": "deposit",
                    "description": "Half a payload",
                    "source_account_name": "Mystery payer",
                    "destination_account_id": savings_usd.id,
                    "amount": "50.00",
                    "currency_id": eur.id,
                },
            )

        assert _count(session, TransactionJournal.id) == 0
        payer = session.execute(
            select(Account).where(Account.name == "Mystery payer")
        ).scalar_one_or_none()
        assert payer is None

    def test_cross_user_transfer_writes_nothing(
        self, session, builder, user_id, other_user_id, checking_eur, create_asset_account, eur
    ):
        theirs = create_asset_account("Their EUR", eur, owner_id=other_user_id)

        with pytest.raises(MissingAccountError) as exc_info:
            builder.build(
                user_id,
                {
                    "what": "transfer",
                    "description": "Not allowed",
                    "source_account_id": checking_eur.id,
                    "destination_account_id": theirs.id,
                    "source_amount": "10.00",
                },
            )

        assert exc_info.value.side == "destination"
        assert _count(session, TransactionJournal.id) == 0
        assert _count(session, Transaction.id) == 0

    def test_storage_failure_is_persistence_error(self, session, builder, user_id, checking_eur):
        with pytest.raises(PersistenceError) as exc_info:
            builder.build(
                user_id,
                {
                    "what": "withdrawal",
                    "description": "Unknown foreign currency",
                    "source_account_id": checking_eur.id,
                    "destination_account_name": "Fx shop",
                    "amount": "20.00",
                    "currency_id": 9999,
                    "native_amount": "18.00",
                },
            )

        assert isinstance(exc_info.value.__cause__, IntegrityError)
        assert _count(session, TransactionJournal.id) == 0
        assert _count(session, Transaction.id) == 0
        shop = session.execute(
            select(Account).where(Account.name == "Fx shop")
        ).scalar_one_or_none()
        assert shop is None

    def test_malformed_date_is_typed_and_writes_nothing(self, session, builder, user_id, checking_eur):
        with pytest.raises(InvalidInputError):
            builder.build(
                user_id,
                {
                    "what": "withdrawal",
                    "description": "Bad date",
                    "source_account_id": checking_eur.id,
                    "amount": "1.00",
                    "date": "2024-02-30",
                },
            )

        assert _count(session, TransactionJournal.id) == 0

    def test_collaborator_failure_rolls_back_counterparty(
        self, session, user_id, checking_eur, deterministic_clock
    ):
        calls = []

        def flaky_lookup(account):
            calls.append(account.id)
            if len(calls) == 1:
                raise KeyError(account.id)
            return account_currency(account)

        builder = JournalBuilder(
            session,
            clock=deterministic_clock,
            currency_reconciler=CurrencyReconciler(flaky_lookup),
        )

        with pytest.raises(KeyError):
            builder.build(
                user_id,
                {
                    "what": "withdrawal",
                    "description": "Lookup blew up",
                    "source_account_id": checking_eur.id,
                    "destination_account_name": "Ghost shop",
                    "amount": "3.00",
                },
            )
        builder.build(
            user_id,
            {
                "what": "withdrawal",
                "description": "Fine",
                "source_account_id": checking_eur.id,
                "amount": "3.00",
            },
        )
        session.rollback()

        ghost = session.execute(
            select(Account).where(Account.name == "Ghost shop")
        ).scalar_one_or_none()
        assert ghost is None
        assert _count(session, TransactionJournal.id) == 1

    def test_unknown_type(self, session, builder, user_id):
        with pytest.raises(UnrecognizedTypeError):
            builder.build(user_id, {"what": "refund", "description": "?"})

        assert _count(session, TransactionJournal.id) == 0

    def test_builder_can_be_reused_after_failure(
        self, session, builder, user_id, checking_eur
    ):
        with pytest.raises(MissingAccountError):
            builder.build(
                user_id,
                {"what": "withdrawal", "description": "x", "source_account_id": 404, "amount": "1"},
            )

        journal = builder.build(
            user_id,
            {
                "what": "withdrawal",
                "description": "y",
                "source_account_id": checking_eur.id,
                "amount": "1",
            },
        )

        assert JournalSelector(session).count_for_user(user_id) == 1
        assert journal.is_balanced


class TestCallerOwnedTransaction:
    def test_auto_commit_off_leaves_boundary_to_caller(
        self, session, user_id, checking_eur, deterministic_clock
    ):
        builder = JournalBuilder(session, clock=deterministic_clock, auto_commit=False)

        journal = builder.build(
            user_id,
            {
                "what": "withdrawal",
                "description": "Pending",
                "source_account_id": checking_eur.id,
                "amount": "2.00",
            },
        )
        assert session.in_transaction()
        session.rollback()

        assert JournalSelector(session).get(journal.id) is None

    def test_failed_build_leaves_no_orphan_in_callers_transaction(
        self, session, user_id, other_user_id, checking_eur, create_budget, deterministic_clock
    ):
        theirs = create_budget("Not mine", owner_id=other_user_id)
        session.add(Tag(user_id=user_id, tag="caller-owned"))
        session.flush()
        builder = JournalBuilder(session, clock=deterministic_clock, auto_commit=False)

        with pytest.raises(BudgetNotFoundError):
            builder.build(
                user_id,
                {
                    "what": "withdrawal",
                    "description": "Half built",
                    "source_account_id": checking_eur.id,
                    "destination_account_name": "Orphan shop",
                    "amount": "4.00",
                    "budget_id": theirs.id,
                },
            )

        assert session.in_transaction()
        assert _count(session, TransactionJournal.id) == 0
        assert _count(session, Transaction.id) == 0

        session.commit()

        assert _count(session, TransactionJournal.id) == 0
        assert _count(session, Tag.id) == 1
        orphan_shop = session.execute(
            select(Account).where(Account.name == "Orphan shop")
        ).scalar_one_or_none()
        assert orphan_shop is None


class TestLogging:
    def test_build_events(self, captured_logs, builder, user_id, checking_eur):
        journal = builder.build(
            user_id,
            {
                "what": "withdrawal",
                "description": "Logged",
                "source_account_id": checking_eur.id,
                "amount": "1.00",
            },
        )

        logs = captured_logs()
        messages = [r["message"] for r in logs]
        assert "journal_build_started" in messages
        assert "accounts_resolved" in messages
        assert "currency_reconciled" in messages
        completed = next(r for r in logs if r["message"] == "journal_build_completed")
        assert completed["journal_id"] == journal.id
        assert completed["user_id"] == str(user_id)
        assert "correlation_id" in completed

    def test_failure_event_carries_code(self, captured_logs, builder, user_id):
        with pytest.raises(MissingAccountError):
            builder.build(
                user_id,
                {"what": "withdrawal", "description": "x", "source_account_id": 404, "amount": "1"},
            )

        failed = next(r for r in captured_logs() if r["message"] == "journal_build_failed")
        assert failed["error_code"] == "MISSING_ACCOUNT"
        assert failed["exc_side"] == "source"

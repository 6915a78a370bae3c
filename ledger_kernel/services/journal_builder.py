"""
JournalBuilder -- atomic construction of a two-leg transaction journal.

Responsibility:
    Turns a TransactionInput into a persisted TransactionJournal with exactly
    two balanced Transaction legs plus its budget, category and tag links.

Architecture position:
    Kernel > Services -- imperative shell, owns the transaction boundary
    when ``auto_commit=True``. Delegates to AccountResolver,
    CurrencyReconciler, BudgetCategoryLinker and TagReconciler, all of
    which are injectable.

Pipeline:
    1. Accounts      AccountResolver.resolve (may create counterparties)
    2. Amounts       CurrencyReconciler.reconcile
    3. Journal row   TransactionJournal, flushed for its id
    4. Links         category + budget on the journal
    5. Legs          source leg -amount, destination leg +amount; foreign
                     fields written only when set, also opposite-signed;
                     category + budget on each leg
    6. Tags          TagReconciler.sync_tags

Invariants enforced:
    - Exactly two legs with opposite-signed amounts of equal magnitude in
      one currency.
    - All of 1-6 run inside a SAVEPOINT that is rolled back on any failure,
      so no journal, leg, counterparty account or label created by a failed
      build survives, even in a transaction the caller keeps open
      (auto_commit=False). With auto_commit=True the builder also commits
      after step 6 and rolls the whole session back on failure.

Failure modes:
    - UnrecognizedTypeError, InvalidInputError, MissingAccountError,
      CurrencyReconciliationError, BudgetNotFoundError: propagated unchanged
      after rollback.
    - PersistenceError: any SQLAlchemyError during the build, after rollback.
    - Anything else (e.g. a failing injected collaborator) is rolled back
      and re-raised as is.

Non-goals:
    - No automatic retry; a client retry must resubmit the full input.
"""

import time
from typing import Any, Mapping
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.currency_reconciler import CurrencyReconciler, NormalizedAmounts
from ledger_kernel.domain.transaction_input import TransactionInput
from ledger_kernel.exceptions import LedgerKernelError, PersistenceError
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.account import Account
from ledger_kernel.models.journal import Transaction, TransactionJournal
from ledger_kernel.selectors.journal_selector import JournalInfo, JournalSelector
from ledger_kernel.services.account_resolver import (
    DEFAULT_CASH_ACCOUNT_NAME,
    AccountResolver,
)
from ledger_kernel.services.budget_category_linker import BudgetCategoryLinker
from ledger_kernel.services.label_service import LabelService
from ledger_kernel.services.tag_reconciler import TagReconciler

logger = get_logger("services.journal_builder")


class JournalBuilder:
    """
    Builds and persists transaction journals.

    Usage:
        builder = JournalBuilder(session)
        journal = builder.build(user_id, {
            "what": "withdrawal",
            "description": "Groceries",
            "source_account_id": 5,
            "destination_account_name": "Supermarket",
            "amount": "20.00",
            "currency_id": 1,
        })
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        auto_commit: bool = True,
        cash_account_name: str = DEFAULT_CASH_ACCOUNT_NAME,
        account_resolver: AccountResolver | None = None,
        currency_reconciler: CurrencyReconciler | None = None,
        linker: BudgetCategoryLinker | None = None,
        tag_reconciler: TagReconciler | None = None,
    ):
        """
        Args:
            session: SQLAlchemy session; all writes join its transaction.
            clock: Supplies the default journal date. Defaults to SystemClock.
            auto_commit: Commit on success / roll back on failure.
            cash_account_name: Name of the canonical Cash account.
            account_resolver, currency_reconciler, linker, tag_reconciler:
                Collaborator overrides; built from ``session`` when omitted.
        """
        self._session = session
        self._clock = clock or SystemClock()
        self._auto_commit = auto_commit
        labels = LabelService(session)
        self._resolver = account_resolver or AccountResolver(session, cash_account_name)
        self._reconciler = currency_reconciler or CurrencyReconciler()
        self._linker = linker or BudgetCategoryLinker(session, labels)
        self._tags = tag_reconciler or TagReconciler(session, labels)
        self._selector = JournalSelector(session)

    def build(
        self,
        user_id: int,
        data: TransactionInput | Mapping[str, Any],
    ) -> JournalInfo:
        """
        Build one journal for ``user_id``.

        Preconditions:
            - ``data`` is a TransactionInput or raw request mapping.
        Postconditions:
            - On success the journal, its two legs and its links exist (and
              are committed when auto_commit=True).
            - On failure nothing written by this call survives.

        Raises:
            UnrecognizedTypeError, InvalidInputError, MissingAccountError,
            CurrencyReconciliationError, BudgetNotFoundError, PersistenceError.
        """
        with LogContext.bind(correlation_id=str(uuid4()), user_id=str(user_id)):
            t0 = time.monotonic()
            try:
                if not isinstance(data, TransactionInput):
                    data = TransactionInput.from_mapping(data)
                logger.info(
                    "journal_build_started",
                    extra={"transaction_type": data.transaction_type.value},
                )
                # Savepoint: a failed build leaves the caller's own work intact
                with self._session.begin_nested():
                    journal = self._build(user_id, data)
                if self._auto_commit:
                    self._session.commit()
            except LedgerKernelError as exc:
                self._abort()
                logger.warning(
                    "journal_build_failed",
                    extra={"error_code": exc.code},
                    exc_info=True,
                )
                raise
            except SQLAlchemyError as exc:
                self._abort()
                logger.error(
                    "journal_build_failed",
                    extra={"error_code": PersistenceError.code},
                    exc_info=True,
                )
                raise PersistenceError("journal build", str(exc)) from exc
            except Exception:
                self._abort()
                logger.error("journal_build_failed", exc_info=True)
                raise

            info = self._selector.get(journal.id)
            logger.info(
                "journal_build_completed",
                extra={
                    "journal_id": journal.id,
                    "balanced": info.is_balanced,
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                },
            )
            return info

    def _abort(self) -> None:
        if self._auto_commit:
            self._session.rollback()

    def _build(self, user_id: int, data: TransactionInput) -> TransactionJournal:
        accounts = self._resolver.resolve(user_id, data.transaction_type, data)

        amounts = self._reconciler.reconcile(
            data.transaction_type,
            data.currency_id,
            data.amount,
            data.native_amount,
            accounts.source,
            accounts.destination,
            source_amount=data.source_amount,
            destination_amount=data.destination_amount,
        )
        logger.info(
            "currency_reconciled",
            extra={
                "amount": amounts.amount,
                "currency_id": amounts.currency_id,
                "foreign_amount": amounts.foreign_amount,
                "foreign_currency_id": amounts.foreign_currency_id,
            },
        )

        journal = TransactionJournal(
            user_id=user_id,
            transaction_type=data.transaction_type,
            currency_id=amounts.currency_id,
            description=data.description,
            date=data.date or self._clock.today(),
        )
        self._session.add(journal)
        self._session.flush()

        self._linker.store_category_with_journal(journal, data.category)
        self._linker.store_budget_with_journal(journal, data.budget_id)

        legs = (
            self._store_transaction(journal, accounts.source, amounts, negative=True),
            self._store_transaction(journal, accounts.destination, amounts, negative=False),
        )
        for leg in legs:
            self._linker.store_category_with_transaction(leg, journal, data.category)
            self._linker.store_budget_with_transaction(leg, journal, data.budget_id)

        self._tags.sync_tags(journal, data.tags)
        self._session.flush()
        return journal

    def _store_transaction(
        self,
        journal: TransactionJournal,
        account: Account,
        amounts: NormalizedAmounts,
        negative: bool,
    ) -> Transaction:
        sign = -1 if negative else 1
        fields: dict[str, Any] = {
            "journal": journal,
            "account_id": account.id,
            "amount": amounts.amount * sign,
            "transaction_currency_id": amounts.currency_id,
            "identifier": 0,
        }
        # Foreign fields are optional, not zero: leave them unset
        if amounts.foreign_amount is not None:
            fields["foreign_amount"] = amounts.foreign_amount * sign
        if amounts.foreign_currency_id is not None:
            fields["foreign_currency_id"] = amounts.foreign_currency_id

        transaction = Transaction(**fields)
        self._session.add(transaction)
        self._session.flush()
        logger.debug(
            "transaction_stored",
            extra={"transaction_id": transaction.id, "account_id": account.id},
        )
        return transaction

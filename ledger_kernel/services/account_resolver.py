"""
AccountResolver -- source/destination account resolution per transaction type.

Responsibility:
    Turns the account fields of a TransactionInput into two Account rows,
    creating Expense, Revenue or Cash counterparties on demand.

Architecture position:
    Kernel > Services -- imperative shell. Called by JournalBuilder before
    any journal row is written.

Rules:
    Withdrawal  source by id (owned); destination = Expense account named
                ``destination_account_name``, else the user's Cash account.
    Deposit     destination by id (owned); source = Revenue account named
                ``source_account_name``, else the user's Cash account.
    Transfer    both by id (owned); nothing is ever created.

Invariants enforced:
    - Every lookup is scoped by user_id; another user's account is
      indistinguishable from a missing one.
    - Counterparty find-or-create is backed by uq_account_user_type_name,
      so repeated or concurrent calls yield one account per
      (user, type, name).

Failure modes:
    - MissingAccountError when either side is unresolved.
    - UnrecognizedTypeError for any other transaction type.
"""

from typing import NamedTuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.db.upsert import insert_ignoring_conflict
from ledger_kernel.domain.transaction_input import TransactionInput
from ledger_kernel.exceptions import MissingAccountError, UnrecognizedTypeError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account, AccountType
from ledger_kernel.models.journal import TransactionType
from ledger_kernel.services.base import BaseService

logger = get_logger("services.account_resolver")

DEFAULT_CASH_ACCOUNT_NAME = "Cash account"


class ResolvedAccounts(NamedTuple):
    source: Account
    destination: Account


class AccountResolver(BaseService):
    """
    Resolves or auto-creates the account pair for a journal.

    Usage:
        resolver = AccountResolver(session)
        accounts = resolver.resolve(user_id, TransactionType.WITHDRAWAL, data)
    """

    def __init__(self, session: Session, cash_account_name: str = DEFAULT_CASH_ACCOUNT_NAME):
        super().__init__(session)
        self._cash_account_name = cash_account_name

    def resolve(
        self,
        user_id: int,
        transaction_type: TransactionType,
        data: TransactionInput,
    ) -> ResolvedAccounts:
        """
        Resolve both accounts for ``transaction_type``.

        Raises:
            MissingAccountError: a side could not be resolved.
            UnrecognizedTypeError: type is not Withdrawal, Deposit or Transfer.
        """
        logger.debug(
            "account_resolution_started",
            extra={"transaction_type": transaction_type.value},
        )

        if transaction_type == TransactionType.WITHDRAWAL:
            source = self.find_owned(user_id, data.source_account_id)
            destination = self._counterparty(
                user_id, AccountType.EXPENSE, data.destination_account_name
            )
        elif transaction_type == TransactionType.DEPOSIT:
            source = self._counterparty(
                user_id, AccountType.REVENUE, data.source_account_name
            )
            destination = self.find_owned(user_id, data.destination_account_id)
        elif transaction_type == TransactionType.TRANSFER:
            source = self.find_owned(user_id, data.source_account_id)
            destination = self.find_owned(user_id, data.destination_account_id)
        else:
            raise UnrecognizedTypeError(transaction_type.value, operation="account resolution")

        if source is None:
            logger.error(
                "source_account_missing",
                extra={"account_id": data.source_account_id},
            )
            raise MissingAccountError("source", data.source_account_id, user_id)
        if destination is None:
            logger.error(
                "destination_account_missing",
                extra={"account_id": data.destination_account_id},
            )
            raise MissingAccountError("destination", data.destination_account_id, user_id)

        logger.info(
            "accounts_resolved",
            extra={
                "source_account_id": source.id,
                "destination_account_id": destination.id,
            },
        )
        return ResolvedAccounts(source=source, destination=destination)

    def find_owned(self, user_id: int, account_id: int | None) -> Account | None:
        """Account ``account_id`` if it belongs to ``user_id``, else None."""
        if account_id is None:
            return None
        stmt = select(Account).where(Account.id == account_id, Account.user_id == user_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def find_or_create(self, user_id: int, account_type: AccountType, name: str) -> Account:
        """
        The single (user, type, name) account, created if absent.

        Postconditions: repeated calls return the same row.
        """
        insert_ignoring_conflict(
            self.session,
            Account,
            {
                "user_id": user_id,
                "account_type": account_type,
                "name": name,
                "is_active": True,
            },
            conflict_columns=("user_id", "account_type", "name"),
        )
        stmt = select(Account).where(
            Account.user_id == user_id,
            Account.account_type == account_type,
            Account.name == name,
        )
        return self.session.execute(stmt).scalar_one()

    def _counterparty(self, user_id: int, account_type: AccountType, name: str) -> Account:
        if name:
            account = self.find_or_create(user_id, account_type, name)
            logger.debug(
                "counterparty_resolved",
                extra={"account_type": account_type.value, "account_id": account.id},
            )
            return account
        logger.debug("counterparty_defaulted_to_cash")
        return self.find_or_create(user_id, AccountType.CASH, self._cash_account_name)

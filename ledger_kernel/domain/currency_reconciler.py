"""
CurrencyReconciler -- native vs. foreign amount normalization.

Responsibility:
    Decides which currency a journal is recorded in and whether the user's
    submitted figure must be preserved as a foreign amount.

Architecture position:
    Kernel > Domain -- pure functional core. No session, no I/O. The native
    currency of an account is read through an injected lookup.

Policy:
    Withdrawal / Deposit
        The reference account is the source (withdrawal) or destination
        (deposit). When its native currency differs from the submitted one,
        the submitted amount/currency move to the foreign fields and the
        primary figure becomes ``native_amount`` in the native currency.
    Transfer
        Always recorded in the source account's currency using
        ``source_amount``. When the destination's native currency differs,
        ``destination_amount`` in that currency becomes the foreign figure.

    Nothing is converted at write time: every journal keeps one native
    figure plus, optionally, exactly what the user typed.

Failure modes:
    - UnrecognizedTypeError for types other than the three above.
    - CurrencyReconciliationError when a figure the policy needs is absent
      or not positive, or a reference account has no native currency.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Protocol

from ledger_kernel.exceptions import CurrencyReconciliationError, UnrecognizedTypeError
from ledger_kernel.models.journal import TransactionType


class HasNativeCurrency(Protocol):
    id: int
    currency_id: int | None


NativeCurrencyLookup = Callable[[HasNativeCurrency], int | None]


def account_currency(account: HasNativeCurrency) -> int | None:
    """Default lookup: the account's own native currency column."""
    return account.currency_id


@dataclass(frozen=True)
class NormalizedAmounts:
    """
    Reconciled amount fields for both legs of a journal.

    All amounts are positive magnitudes; JournalBuilder applies the sign per
    leg. foreign_amount and foreign_currency_id are both set or both None.
    """

    amount: Decimal
    currency_id: int
    foreign_amount: Decimal | None = None
    foreign_currency_id: int | None = None

    @property
    def has_foreign(self) -> bool:
        return self.foreign_currency_id is not None


def _require_positive(field_name: str, value: Decimal | None) -> Decimal:
    if value is None:
        raise CurrencyReconciliationError(field_name, "value is required")
    if value <= 0:
        raise CurrencyReconciliationError(field_name, f"must be positive, got {value}")
    return value


class CurrencyReconciler:
    """Stateless reconciliation of submitted amounts against native currencies."""

    def __init__(self, native_currency: NativeCurrencyLookup | None = None):
        self._native_currency = native_currency or account_currency

    def _native_of(self, account: HasNativeCurrency, side: str) -> int:
        currency_id = self._native_currency(account)
        if currency_id is None:
            raise CurrencyReconciliationError(
                f"{side}_account", f"account #{account.id} has no native currency"
            )
        return currency_id

    def reconcile(
        self,
        transaction_type: TransactionType,
        submitted_currency_id: int | None,
        amount: Decimal | None,
        native_amount: Decimal | None,
        source: HasNativeCurrency,
        destination: HasNativeCurrency,
        source_amount: Decimal | None = None,
        destination_amount: Decimal | None = None,
    ) -> NormalizedAmounts:
        """
        Normalize the amount fields for ``transaction_type``.

        A missing ``submitted_currency_id`` means "the reference account's
        own currency".

        Raises:
            UnrecognizedTypeError: type is not Withdrawal, Deposit or Transfer.
            CurrencyReconciliationError: a required figure is missing.
        """
        if transaction_type in (TransactionType.WITHDRAWAL, TransactionType.DEPOSIT):
            if transaction_type == TransactionType.WITHDRAWAL:
                native_id = self._native_of(source, "source")
            else:
                native_id = self._native_of(destination, "destination")

            submitted = _require_positive("amount", amount)
            if submitted_currency_id is None or submitted_currency_id == native_id:
                return NormalizedAmounts(amount=submitted, currency_id=native_id)

            # Submitted in a foreign currency: keep it, record native figure
            return NormalizedAmounts(
                amount=_require_positive("native_amount", native_amount),
                currency_id=native_id,
                foreign_amount=submitted,
                foreign_currency_id=submitted_currency_id,
            )

        if transaction_type == TransactionType.TRANSFER:
            source_id = self._native_of(source, "source")
            destination_id = self._native_of(destination, "destination")
            primary = _require_positive("source_amount", source_amount)
            if source_id == destination_id:
                return NormalizedAmounts(amount=primary, currency_id=source_id)
            return NormalizedAmounts(
                amount=primary,
                currency_id=source_id,
                foreign_amount=_require_positive("destination_amount", destination_amount),
                foreign_currency_id=destination_id,
            )

        raise UnrecognizedTypeError(transaction_type.value, operation="currency reconciliation")

"""
TransactionInput -- validated, typed form of a user's money-movement request.

Raw request data arrives as a mapping of strings. ``TransactionInput.from_mapping``
turns it into an immutable value object once, at the boundary, so the
resolver, reconciler and builder never look at untyped data.

Amounts are parsed with ``Decimal`` from strings; floats are rejected since
they cannot represent most decimal amounts exactly.
"""

from dataclasses import dataclass, field
import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from ledger_kernel.exceptions import (
    CurrencyReconciliationError,
    InvalidInputError,
    UnrecognizedTypeError,
)
from ledger_kernel.models.journal import TransactionType


def parse_transaction_type(value: Any) -> TransactionType:
    """
    Map ``what`` ("withdrawal", "Deposit", ...) to a TransactionType.

    Raises:
        UnrecognizedTypeError: value names no known type.
    """
    text = str(value or "").strip()
    for member in TransactionType:
        if member.value.lower() == text.lower():
            return member
    raise UnrecognizedTypeError(text, operation="input")


def parse_amount(field_name: str, value: Any) -> Decimal | None:
    """
    Parse an optional decimal amount.

    Returns None for missing/blank values.

    Raises:
        CurrencyReconciliationError: float input, non-numeric or non-finite text.
    """
    if value is None:
        return None
    if isinstance(value, bool) or isinstance(value, float):
        raise CurrencyReconciliationError(
            field_name, f"amounts must be decimal strings, got {type(value).__name__}"
        )
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, int):
        parsed = Decimal(value)
    else:
        text = str(value).strip()
        if text == "":
            return None
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            raise CurrencyReconciliationError(field_name, f"not a decimal number: {text!r}")
    if not parsed.is_finite():
        raise CurrencyReconciliationError(field_name, "amount must be finite")
    return parsed


def parse_id(value: Any) -> int | None:
    """Parse an optional integer id; blanks and garbage become None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def parse_date(value: Any) -> dt.date | None:
    """
    Parse an optional ISO ``YYYY-MM-DD`` date; blanks become None.

    Raises:
        InvalidInputError: text that is not an ISO date, or a non-date value.
    """
    if value is None or isinstance(value, dt.date):
        return value
    if not isinstance(value, str):
        raise InvalidInputError("date", f"expected an ISO date string, got {type(value).__name__}")
    text = value.strip()
    if not text:
        return None
    try:
        return dt.date.fromisoformat(text)
    except ValueError:
        raise InvalidInputError("date", f"not an ISO date: {text!r}") from None


def parse_tags(value: Any) -> tuple[str, ...]:
    """Accept a sequence of names or a comma separated string."""
    if value is None:
        return ()
    if isinstance(value, str):
        value = value.split(",")
    return tuple(str(name) for name in value)


@dataclass(frozen=True)
class TransactionInput:
    """
    Everything needed to build one journal.

    Names mirror the request fields. Optional ids are None when absent;
    optional names are empty strings.
    """

    transaction_type: TransactionType
    description: str
    amount: Decimal | None = None
    currency_id: int | None = None
    native_amount: Decimal | None = None
    source_amount: Decimal | None = None
    destination_amount: Decimal | None = None
    source_account_id: int | None = None
    destination_account_id: int | None = None
    source_account_name: str = ""
    destination_account_name: str = ""
    date: dt.date | None = None
    category: str = ""
    budget_id: int = 0
    tags: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TransactionInput":
        """
        Build from request data.

        Raises:
            UnrecognizedTypeError: ``what`` is not a known type.
            CurrencyReconciliationError: an amount field is malformed.
            InvalidInputError: ``date`` is malformed.
        """
        return cls(
            transaction_type=parse_transaction_type(data.get("what")),
            description=str(data.get("description") or "").strip(),
            amount=parse_amount("amount", data.get("amount")),
            currency_id=parse_id(data.get("currency_id")),
            native_amount=parse_amount("native_amount", data.get("native_amount")),
            source_amount=parse_amount("source_amount", data.get("source_amount")),
            destination_amount=parse_amount("destination_amount", data.get("destination_amount")),
            source_account_id=parse_id(data.get("source_account_id")),
            destination_account_id=parse_id(data.get("destination_account_id")),
            source_account_name=str(data.get("source_account_name") or "").strip(),
            destination_account_name=str(data.get("destination_account_name") or "").strip(),
            date=parse_date(data.get("date")),
            category=str(data.get("category") or "").strip(),
            budget_id=parse_id(data.get("budget_id")) or 0,
            tags=parse_tags(data.get("tags")),
        )

"""Tests for TransactionInput parsing from request mappings."""

from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.domain.transaction_input import (
    TransactionInput,
    parse_amount,
    parse_date,
    parse_id,
    parse_tags,
    parse_transaction_type,
)
from ledger_kernel.exceptions import (
    CurrencyReconciliationError,
    InvalidInputError,
    UnrecognizedTypeError,
)
from ledger_kernel.models.journal import TransactionType


class TestParseTransactionType:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("withdrawal", TransactionType.WITHDRAWAL),
            ("Deposit", TransactionType.DEPOSIT),
            ("TRANSFER", TransactionType.TRANSFER),
        ],
    )
    def test_case_insensitive(self, raw, expected):
        assert parse_transaction_type(raw) == expected

    @pytest.mark.parametrize("raw", ["refund", "", None])
    def test_unknown_type(self, raw):
        with pytest.raises(UnrecognizedTypeError):
            parse_transaction_type(raw)


class TestParseAmount:
    def test_decimal_string(self):
        assert parse_amount("amount", "20.00") == Decimal("20.00")

    def test_blank_is_none(self):
        assert parse_amount("amount", "  ") is None
        assert parse_amount("amount", None) is None

    def test_float_rejected(self):
        with pytest.raises(CurrencyReconciliationError) as exc_info:
            parse_amount("amount", 20.0)

        assert exc_info.value.field == "amount"

    def test_garbage_rejected(self):
        with pytest.raises(CurrencyReconciliationError):
            parse_amount("native_amount", "twelve")

    def test_infinity_rejected(self):
        with pytest.raises(CurrencyReconciliationError):
            parse_amount("amount", "Infinity")


class TestParseHelpers:
    def test_parse_id(self):
        assert parse_id("5") == 5
        assert parse_id(7) == 7
        assert parse_id("") is None
        assert parse_id("abc") is None
        assert parse_id(True) is None

    def test_parse_tags_from_string(self):
        assert parse_tags("food, weekly") == ("food", " weekly")

    def test_parse_tags_from_list(self):
        assert parse_tags(["a", "b"]) == ("a", "b")
        assert parse_tags(None) == ()


class TestParseDate:
    def test_iso_string(self):
        assert parse_date(" 2024-02-29 ") == date(2024, 2, 29)

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_blank_is_none(self, raw):
        assert parse_date(raw) is None

    def test_date_passes_through(self):
        assert parse_date(date(2024, 1, 5)) == date(2024, 1, 5)

    @pytest.mark.parametrize("raw", ["2024-13-01", "yesterday", "01/02/2024", 20240101])
    def test_malformed_date_is_typed(self, raw):
        with pytest.raises(InvalidInputError) as exc_info:
            parse_date(raw)

        assert exc_info.value.code == "INVALID_INPUT"
        assert exc_info.value.field_name == "date"


class TestFromMapping:
    def test_withdrawal_payload(self):
        data = TransactionInput.from_mapping(
            {
                "what": "withdrawal",
                "description": "  Groceries ",
                "source_account_id": "5",
                "destination_account_name": "Supermarket",
                "amount": "20.00",
                "currency_id": 1,
                "date": "2024-03-01",
                "category": "Food",
                "budget_id": "3",
                "tags": ["weekly"],
            }
        )

        assert data.transaction_type == TransactionType.WITHDRAWAL
        assert data.description == "Groceries"
        assert data.source_account_id == 5
        assert data.destination_account_id is None
        assert data.destination_account_name == "Supermarket"
        assert data.amount == Decimal("20.00")
        assert data.currency_id == 1
        assert data.date == date(2024, 3, 1)
        assert data.category == "Food"
        assert data.budget_id == 3
        assert data.tags == ("weekly",)

    def test_defaults_for_absent_fields(self):
        data = TransactionInput.from_mapping({"what": "deposit", "description": "Salary"})

        assert data.source_account_name == ""
        assert data.budget_id == 0
        assert data.date is None
        assert data.tags == ()
        assert data.native_amount is None

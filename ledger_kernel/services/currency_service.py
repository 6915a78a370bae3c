"""
CurrencyService -- ISO 4217 currency rows.

Validates codes against CurrencyRegistry before they reach the
``transaction_currencies`` table, so accounts and journal legs only ever
reference real currencies.
"""

from sqlalchemy import select

from ledger_kernel.db.upsert import insert_ignoring_conflict
from ledger_kernel.domain.currency import CurrencyRegistry
from ledger_kernel.exceptions import InvalidCurrencyError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.currency import Currency
from ledger_kernel.services.base import BaseService

logger = get_logger("services.currency")


class CurrencyService(BaseService):
    """Find-or-create and lookup of currencies by ISO code."""

    def find_or_create(self, code: str) -> Currency:
        """
        The currency row for ``code``, created from the registry if absent.

        Raises:
            InvalidCurrencyError: ``code`` is not a known ISO 4217 code.
        """
        normalized = CurrencyRegistry.normalize(code)
        info = CurrencyRegistry.get_info(normalized)
        if info is None:
            raise InvalidCurrencyError(code)

        insert_ignoring_conflict(
            self.session,
            Currency,
            {"code": info.code, "name": info.name, "decimal_places": info.decimal_places},
            conflict_columns=("code",),
        )
        currency = self.get_by_code(info.code)
        logger.debug("currency_resolved", extra={"currency_code": info.code})
        return currency

    def get_by_code(self, code: str) -> Currency | None:
        stmt = select(Currency).where(Currency.code == CurrencyRegistry.normalize(code))
        return self.session.execute(stmt).scalar_one_or_none()

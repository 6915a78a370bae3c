"""Currency -- ISO 4217 code validation and precision."""

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    """Information about a single ISO 4217 currency."""

    code: str
    decimal_places: int
    name: str


class CurrencyRegistry:
    """Registry of the ISO 4217 currencies the ledger accepts."""

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        info.code: info
        for info in (
            CurrencyInfo("EUR", 2, "Euro"),
            CurrencyInfo("USD", 2, "US Dollar"),
            CurrencyInfo("GBP", 2, "British Pound"),
            CurrencyInfo("CHF", 2, "Swiss Franc"),
            CurrencyInfo("CAD", 2, "Canadian Dollar"),
            CurrencyInfo("AUD", 2, "Australian Dollar"),
            CurrencyInfo("NZD", 2, "New Zealand Dollar"),
            CurrencyInfo("SEK", 2, "Swedish Krona"),
            CurrencyInfo("NOK", 2, "Norwegian Krone"),
            CurrencyInfo("DKK", 2, "Danish Krone"),
            CurrencyInfo("PLN", 2, "Polish Zloty"),
            CurrencyInfo("CZK", 2, "Czech Koruna"),
            CurrencyInfo("HUF", 2, "Hungarian Forint"),
            CurrencyInfo("RUB", 2, "Russian Ruble"),
            CurrencyInfo("BRL", 2, "Brazilian Real"),
            CurrencyInfo("IDR", 2, "Indonesian Rupiah"),
            CurrencyInfo("INR", 2, "Indian Rupee"),
            CurrencyInfo("CNY", 2, "Chinese Yuan"),
            CurrencyInfo("MXN", 2, "Mexican Peso"),
            CurrencyInfo("ZAR", 2, "South African Rand"),
            CurrencyInfo("JPY", 0, "Japanese Yen"),
            CurrencyInfo("KRW", 0, "South Korean Won"),
            CurrencyInfo("ISK", 0, "Icelandic Krona"),
            CurrencyInfo("BHD", 3, "Bahraini Dinar"),
            CurrencyInfo("KWD", 3, "Kuwaiti Dinar"),
        )
    }

    @classmethod
    def normalize(cls, code: str | None) -> str:
        """Trim and upper-case a code without checking it."""
        return (code or "").strip().upper()

    @classmethod
    def is_valid(cls, code: str | None) -> bool:
        return cls.normalize(code) in cls._CURRENCIES

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        return cls._CURRENCIES.get(cls.normalize(code))

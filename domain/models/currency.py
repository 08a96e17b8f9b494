from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

SUPPORTED_CURRENCIES: frozenset[str] = frozenset({
    'USD', 'EUR', 'GBP', 'JPY', 'AUD', 'CAD', 'CHF', 'CNY', 'HKD', 'NZD',
    'SEK', 'KRW', 'SGD', 'NOK', 'MXN', 'INR', 'RUB', 'BRL', 'ZAR', 'TRY',
    'DKK', 'PLN', 'THB', 'MYR', 'IDR', 'HUF', 'CZK', 'ILS', 'PHP', 'CLP',
    'AED', 'SAR', 'COP', 'ARS', 'VND', 'EGP', 'NGN', 'KZT', 'PKR', 'BDT',
})


class RateSource(str, Enum):
    UPSTREAM = 'upstream'
    CACHE = 'cache'
    CACHE_FALLBACK = 'cache-fallback'
    FALLBACK = 'fallback'


@dataclass(frozen=True)
class ConversionRequest:
    from_currency: str
    to_currency: str
    amount: Decimal | None = None


@dataclass(frozen=True)
class RateTable:
    base_currency: str
    rates: Mapping[str, float]
    as_of: datetime

    def rate_for(self, currency: str) -> float | None:
        """Numeric rate for `currency`, or None when absent or not a usable number."""
        value = self.rates.get(currency)
        if isinstance(value, bool) or not isinstance(value, int | float):
            return None
        if value != value or value in (float('inf'), float('-inf')):
            return None
        return float(value)


@dataclass(frozen=True)
class CacheEntry:
    rate_table: RateTable
    stored_at: float  # monotonic clock reading


@dataclass(frozen=True)
class FallbackRate:
    rate: float
    defaulted: bool


@dataclass(frozen=True)
class RateQuote:
    rate: float
    source: RateSource
    as_of: datetime
    fallback_defaulted: bool = False  # logging only, never serialized


@dataclass(frozen=True)
class ConversionResult:
    from_currency: str
    to_currency: str
    rate: float
    converted_amount: Decimal | None
    source: RateSource
    as_of: datetime

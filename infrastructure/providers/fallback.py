from collections.abc import Mapping

from domain.models.currency import FallbackRate

# Served only when neither the upstream nor the cache can answer.
# Not every pair has both directions; never invert these.
FALLBACK_RATES: dict[str, dict[str, float]] = {
    'USD': {
        'EUR': 0.85, 'GBP': 0.73, 'JPY': 110.0, 'CAD': 1.25, 'AUD': 1.35, 'CHF': 0.92,
        'CNY': 6.45, 'INR': 75.0, 'BRL': 5.2, 'PHP': 58.2, 'KRW': 1340, 'MXN': 17.2,
    },
    'EUR': {
        'USD': 1.18, 'GBP': 0.86, 'JPY': 129.0, 'CAD': 1.47, 'AUD': 1.59, 'CHF': 1.08,
        'CNY': 7.59, 'INR': 88.0, 'BRL': 6.1, 'PHP': 63.5,
    },
    'PHP': {'USD': 0.017, 'EUR': 0.016, 'JPY': 1.9, 'GBP': 0.014, 'AUD': 0.023},
    'JPY': {'USD': 0.0091, 'EUR': 0.0077, 'GBP': 0.0067, 'PHP': 0.53, 'INR': 0.68},
}

DEFAULT_RATE = 1.0


class StaticFallbackTable:
    def __init__(self, rates: Mapping[str, Mapping[str, float]] | None = None):
        self._rates = rates if rates is not None else FALLBACK_RATES

    def lookup(self, from_currency: str, to_currency: str) -> FallbackRate:
        rate = self._rates.get(from_currency, {}).get(to_currency)
        if rate is None:
            return FallbackRate(rate=DEFAULT_RATE, defaulted=True)
        return FallbackRate(rate=float(rate), defaulted=False)

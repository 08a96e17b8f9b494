from .exchangerate_api import ExchangeRateAPIProvider
from .fallback import FALLBACK_RATES, StaticFallbackTable

__all__ = ['ExchangeRateAPIProvider', 'FALLBACK_RATES', 'StaticFallbackTable']

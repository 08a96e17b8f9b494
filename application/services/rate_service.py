import logging
from datetime import UTC, datetime
from typing import Protocol

from domain.exceptions.currency import PairUnavailableError, ProviderError, UpstreamStatusError
from domain.models.currency import RateQuote, RateSource, RateTable
from infrastructure.cache.memory_cache import RateCache
from infrastructure.providers.fallback import StaticFallbackTable

logger = logging.getLogger(__name__)


class RateTableFetcher(Protocol):
    @property
    def name(self) -> str: ...

    async def fetch_rates(self, base_currency: str) -> RateTable: ...


class RateService:
    """Resolves a pair's rate through cache, upstream, stale cache and static table.

    Once the pair has been validated this always produces a rate, except when the
    upstream answers successfully without the target currency.
    """

    def __init__(
        self,
        cache: RateCache,
        fallback_table: StaticFallbackTable,
        fetcher: RateTableFetcher | None = None,
    ):
        self.cache = cache
        self.fallback_table = fallback_table
        self.fetcher = fetcher

    @property
    def upstream_configured(self) -> bool:
        return self.fetcher is not None

    async def get_rate(self, from_currency: str, to_currency: str) -> RateQuote:
        if self.fetcher is None:
            return self._static_fallback(from_currency, to_currency, reason='no upstream API key configured')

        cached = self.cache.read(from_currency)
        rate = cached.rate_for(to_currency) if cached else None
        if cached and rate is not None:
            return RateQuote(rate=rate, source=RateSource.CACHE, as_of=cached.as_of)

        try:
            table = await self.fetcher.fetch_rates(from_currency)
        except ProviderError as e:
            self._log_upstream_failure(from_currency, to_currency, e)
            return self._degraded(from_currency, to_currency, e)

        self.cache.write(from_currency, table)

        rate = table.rate_for(to_currency)
        if rate is None:
            logger.warning(
                f'Rate missing for pair {from_currency}->{to_currency}',
                extra={'extra_data': {'available': len(table.rates)}},
            )
            raise PairUnavailableError(from_currency, to_currency)

        return RateQuote(rate=rate, source=RateSource.UPSTREAM, as_of=table.as_of)

    def _degraded(self, from_currency: str, to_currency: str, error: ProviderError) -> RateQuote:
        stale = self.cache.read(from_currency, allow_stale=True)
        rate = stale.rate_for(to_currency) if stale else None
        if stale and rate is not None:
            logger.warning(f'Using cached data for {from_currency}->{to_currency} due to upstream failure')
            return RateQuote(rate=rate, source=RateSource.CACHE_FALLBACK, as_of=stale.as_of)

        return self._static_fallback(from_currency, to_currency, reason=f'upstream failure: {error}')

    def _static_fallback(self, from_currency: str, to_currency: str, reason: str) -> RateQuote:
        fallback = self.fallback_table.lookup(from_currency, to_currency)
        logger.warning(
            f'Serving fallback rate for {from_currency}->{to_currency} ({reason})',
            extra={'extra_data': {'fallback_defaulted': fallback.defaulted}},
        )
        return RateQuote(
            rate=fallback.rate,
            source=RateSource.FALLBACK,
            as_of=datetime.now(UTC),
            fallback_defaulted=fallback.defaulted,
        )

    def _log_upstream_failure(self, from_currency: str, to_currency: str, error: ProviderError) -> None:
        provider = self.fetcher.name if self.fetcher else 'upstream'
        if isinstance(error, UpstreamStatusError) and error.is_permanent:
            logger.error(f'Provider {provider} rejected {from_currency} request permanently: {error}')
        else:
            logger.warning(f'Provider {provider} failed for {from_currency}->{to_currency}: {error}')

import logging
from typing import Annotated

from fastapi import Depends

from application.services import ConversionService, RateService
from config.settings import RetrievalConfig, get_settings
from infrastructure.cache.memory_cache import RateCache
from infrastructure.providers import ExchangeRateAPIProvider, StaticFallbackTable

logger = logging.getLogger(__name__)


class AppDependencies:
	"""Container for application-wide singleton dependencies."""

	config: RetrievalConfig | None = None
	rate_cache: RateCache | None = None
	provider: ExchangeRateAPIProvider | None = None
	rate_service: RateService | None = None


deps = AppDependencies()


def init_dependencies(config: RetrievalConfig | None = None) -> None:
	"""Initialize all singleton dependencies. Called at app startup."""
	logger.info('Initializing dependencies...')
	config = config or get_settings().retrieval_config()

	deps.config = config
	deps.rate_cache = RateCache(ttl_seconds=config.cache_ttl)

	deps.provider = None
	if config.api_key:
		deps.provider = ExchangeRateAPIProvider(
			api_key=config.api_key,
			base_url=config.base_url,
			timeout=config.timeout,
			retries=config.retries,
			backoff_base=config.backoff_base,
		)
	else:
		logger.warning('EXCHANGE_RATE_API_KEY is not configured; all conversions will use fallback data')

	deps.rate_service = RateService(
		cache=deps.rate_cache,
		fallback_table=StaticFallbackTable(),
		fetcher=deps.provider,
	)
	logger.info('Dependencies initialized')


async def cleanup_dependencies() -> None:
	logger.info('Cleaning up dependencies...')

	if deps.provider:
		await deps.provider.close()
	deps.provider = None
	deps.rate_service = None
	deps.rate_cache = None

	logger.info('Cleanup complete')


def get_rate_cache() -> RateCache:
	if deps.rate_cache is None:
		raise RuntimeError('Rate cache not initialized')
	return deps.rate_cache


def get_rate_service() -> RateService:
	if deps.rate_service is None:
		raise RuntimeError('Rate service not initialized')
	return deps.rate_service


async def get_conversion_service(
	rate_service: Annotated[RateService, Depends(get_rate_service)],
) -> ConversionService:
	return ConversionService(rate_service=rate_service)

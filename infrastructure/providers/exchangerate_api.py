import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from enum import Enum
from types import MappingProxyType
from urllib.parse import quote

import httpx
from tenacity import AsyncRetrying, RetryCallState, retry_if_result, stop_after_attempt, wait_exponential

from domain.exceptions.currency import (
	MalformedPayloadError,
	ProviderError,
	UpstreamNetworkError,
	UpstreamStatusError,
	UpstreamTimeoutError,
)
from domain.models.currency import RateTable

logger = logging.getLogger(__name__)


class AttemptKind(Enum):
	SUCCESS = 'success'
	RETRYABLE = 'retryable'
	FATAL = 'fatal'


@dataclass(frozen=True)
class AttemptOutcome:
	kind: AttemptKind
	table: RateTable | None = None
	error: ProviderError | None = None

	@classmethod
	def success(cls, table: RateTable) -> 'AttemptOutcome':
		return cls(kind=AttemptKind.SUCCESS, table=table)

	@classmethod
	def failure(cls, error: ProviderError) -> 'AttemptOutcome':
		kind = AttemptKind.RETRYABLE if error.retryable else AttemptKind.FATAL
		return cls(kind=kind, error=error)


class ExchangeRateAPIProvider:
	"""Fetches the full `latest` rate table for one base currency.

	Every call is a fresh set of attempts: one initial try plus up to `retries`
	more for timeouts, network errors, 429/5xx and malformed payloads, with an
	exponential pause of `backoff_base`, 2 * `backoff_base`, ... between them.
	"""

	BASE_URL = 'https://v6.exchangerate-api.com/v6'

	def __init__(
		self,
		api_key: str,
		base_url: str | None = None,
		timeout: float = 8.0,
		retries: int = 1,
		backoff_base: float = 0.2,
		client: httpx.AsyncClient | None = None,
		sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
	):
		self.api_key = api_key
		self.base_url = (base_url or self.BASE_URL).rstrip('/')
		self.timeout = timeout
		self.retries = retries
		self.backoff_base = backoff_base
		self._client = client or httpx.AsyncClient(timeout=timeout)
		self._sleep = sleep

	@property
	def name(self) -> str:
		return 'exchangerate-api'

	def _build_url(self, base_currency: str) -> str:
		return f'{self.base_url}/{quote(self.api_key, safe="")}/latest/{quote(base_currency, safe="")}'

	async def _request(self, base_currency: str) -> RateTable:
		url = self._build_url(base_currency)
		try:
			async with asyncio.timeout(self.timeout):
				response = await self._client.get(url)
		except (TimeoutError, httpx.TimeoutException) as e:
			raise UpstreamTimeoutError(
				f'{self.name} request timed out after {self.timeout}s'
			) from e
		except httpx.RequestError as e:
			raise UpstreamNetworkError(f'{self.name} request failed: {e.__class__.__name__}') from e

		if not 200 <= response.status_code < 300:
			# the URL carries the API key, so only status and body are logged
			logger.warning(
				f'{self.name} returned HTTP {response.status_code} for {base_currency}',
				extra={'extra_data': {'status': response.status_code, 'body': response.text[:2000]}},
			)
			raise UpstreamStatusError(response.status_code)

		try:
			data = response.json()
		except ValueError as e:
			raise MalformedPayloadError(f'{self.name} response parsing error: {str(e)}') from e

		return self._parse_rate_table(base_currency, data)

	def _parse_rate_table(self, base_currency: str, data: object) -> RateTable:
		if not isinstance(data, dict) or data.get('result') != 'success':
			raise MalformedPayloadError(f'Unexpected {self.name} payload for {base_currency}')

		rates = data.get('conversion_rates')
		if not isinstance(rates, dict) or not rates:
			raise MalformedPayloadError(f'{self.name} payload has no conversion rates for {base_currency}')

		return RateTable(
			base_currency=base_currency,
			rates=MappingProxyType(dict(rates)),
			as_of=self._parse_timestamp(data.get('time_last_update_utc')),
		)

	@staticmethod
	def _parse_timestamp(value: object) -> datetime:
		if isinstance(value, str):
			try:
				parsed = parsedate_to_datetime(value)
			except (TypeError, ValueError):
				parsed = None
			if parsed is not None:
				return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
		return datetime.now(UTC)

	async def _attempt(self, base_currency: str) -> AttemptOutcome:
		try:
			return AttemptOutcome.success(await self._request(base_currency))
		except ProviderError as e:
			return AttemptOutcome.failure(e)

	def _log_retry(self, retry_state: RetryCallState) -> None:
		outcome: AttemptOutcome = retry_state.outcome.result()
		delay = retry_state.next_action.sleep if retry_state.next_action else 0
		logger.warning(
			f'{self.name} attempt {retry_state.attempt_number} failed ({outcome.error}); '
			f'retrying in {delay:.2f}s'
		)

	async def fetch_rates(self, base_currency: str) -> RateTable:
		retrying = AsyncRetrying(
			stop=stop_after_attempt(self.retries + 1),
			wait=wait_exponential(multiplier=self.backoff_base),
			retry=retry_if_result(lambda outcome: outcome.kind is AttemptKind.RETRYABLE),
			retry_error_callback=lambda retry_state: retry_state.outcome.result(),
			before_sleep=self._log_retry,
			sleep=self._sleep,
		)
		outcome: AttemptOutcome = await retrying(self._attempt, base_currency)

		if outcome.kind is AttemptKind.SUCCESS and outcome.table is not None:
			return outcome.table

		raise outcome.error

	async def close(self) -> None:
		await self._client.aclose()

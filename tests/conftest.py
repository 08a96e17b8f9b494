"""
Shared test configuration and fixtures.
"""

import copy
from datetime import UTC, datetime
from types import MappingProxyType
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from domain.models.currency import RateTable
from infrastructure.cache.memory_cache import RateCache
from infrastructure.providers.exchangerate_api import ExchangeRateAPIProvider

TEST_API_KEY = 'test_api_key_12345'

SUCCESS_PAYLOAD = {
    'result': 'success',
    'base_code': 'USD',
    'time_last_update_utc': 'Fri, 27 Mar 2020 00:00:01 +0000',
    'conversion_rates': {'USD': 1, 'EUR': 0.85, 'GBP': 0.73, 'JPY': 110.5},
}


class FakeClock:
    """Monotonic clock the tests can move forward by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_response(payload=None, status_code: int = 200, text: str | None = None) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.text = text if text is not None else str(payload)
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


def make_rate_table(base: str = 'USD', rates: dict | None = None) -> RateTable:
    return RateTable(
        base_currency=base,
        rates=MappingProxyType(dict(rates if rates is not None else SUCCESS_PAYLOAD['conversion_rates'])),
        as_of=datetime(2020, 3, 27, 0, 0, 1, tzinfo=UTC),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rate_cache(clock):
    return RateCache(ttl_seconds=300, clock=clock)


@pytest.fixture
def mock_http_client():
    return AsyncMock(spec=httpx.AsyncClient)


@pytest.fixture
def mock_sleep():
    return AsyncMock()


@pytest.fixture
def provider_factory(mock_http_client, mock_sleep):
    def build(**kwargs) -> ExchangeRateAPIProvider:
        kwargs.setdefault('api_key', TEST_API_KEY)
        kwargs.setdefault('client', mock_http_client)
        kwargs.setdefault('sleep', mock_sleep)
        return ExchangeRateAPIProvider(**kwargs)

    return build


@pytest.fixture
def mock_fetcher():
    fetcher = AsyncMock(spec=ExchangeRateAPIProvider)
    fetcher.name = 'exchangerate-api'
    fetcher.fetch_rates.return_value = make_rate_table()
    return fetcher


@pytest.fixture
def success_payload():
    return copy.deepcopy(SUCCESS_PAYLOAD)


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def rate_table_factory():
    return make_rate_table

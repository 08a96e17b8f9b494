from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_conversion_service
from api.main import app
from application.services import ConversionService, RateService
from domain.exceptions.currency import UpstreamStatusError
from infrastructure.providers.fallback import StaticFallbackTable


@pytest.fixture
def rate_service(rate_cache, mock_fetcher):
    return RateService(cache=rate_cache, fallback_table=StaticFallbackTable(), fetcher=mock_fetcher)


@pytest.fixture
def client(rate_service):
    # Override the real dependency with one wired to mocks
    app.dependency_overrides[get_conversion_service] = lambda: ConversionService(rate_service=rate_service)
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


def test_convert_currency_success(client, mock_fetcher):
    response = client.get('/api/convert', params={'from': 'USD', 'to': 'EUR', 'amount': '100'})

    assert response.status_code == 200
    data = response.json()

    assert data['success'] is True
    assert data['rate'] == 0.85
    assert data['convertedAmount'] == 85.0
    assert data['from'] == 'USD'
    assert data['to'] == 'EUR'
    assert data['source'] == 'upstream'
    assert data['lastUpdated'].startswith('2020-03-27T00:00:01')
    assert 'fallback_defaulted' not in data and 'defaulted' not in data

    mock_fetcher.fetch_rates.assert_awaited_once_with('USD')


def test_convert_without_amount_returns_null(client):
    response = client.get('/api/convert', params={'from': 'USD', 'to': 'JPY'})

    assert response.status_code == 200
    assert response.json()['convertedAmount'] is None
    assert response.json()['rate'] == 110.5


def test_convert_lowercase_currencies_normalized(client, mock_fetcher):
    response = client.get('/api/convert', params={'from': 'usd', 'to': 'eur', 'amount': '1'})

    assert response.status_code == 200
    assert response.json()['from'] == 'USD'
    assert response.json()['to'] == 'EUR'
    mock_fetcher.fetch_rates.assert_awaited_once_with('USD')


def test_second_request_is_served_from_cache(client, mock_fetcher):
    first = client.get('/api/convert', params={'from': 'USD', 'to': 'EUR'}).json()
    second = client.get('/api/convert', params={'from': 'USD', 'to': 'EUR'}).json()

    assert first['source'] == 'upstream'
    assert second['source'] == 'cache'
    assert second['rate'] == first['rate']
    mock_fetcher.fetch_rates.assert_awaited_once()


def test_same_currency_bypasses_cache_and_upstream(client, mock_fetcher, rate_cache):
    response = client.get('/api/convert', params={'from': 'GBP', 'to': 'GBP', 'amount': '12.5'})

    assert response.status_code == 200
    data = response.json()
    assert data['rate'] == 1
    assert data['convertedAmount'] == 12.5
    mock_fetcher.fetch_rates.assert_not_awaited()
    assert len(rate_cache) == 0


@pytest.mark.parametrize('amount', ['1e3', '12.123456789', '-5', 'ten', '', '99999999999999'])
def test_invalid_amount_is_rejected_before_any_lookup(client, mock_fetcher, rate_cache, amount):
    response = client.get('/api/convert', params={'from': 'USD', 'to': 'EUR', 'amount': amount})

    assert response.status_code == 400
    assert response.json()['success'] is False
    mock_fetcher.fetch_rates.assert_not_awaited()
    assert len(rate_cache) == 0


def test_decimal_precision_error_message(client):
    response = client.get('/api/convert', params={'from': 'USD', 'to': 'EUR', 'amount': '12.123456789'})

    assert response.json() == {'success': False, 'error': '"amount" may have at most 8 decimal places.'}


def test_unsupported_currency(client, mock_fetcher, rate_cache):
    response = client.get('/api/convert', params={'from': 'USD', 'to': 'XYZ'})

    assert response.status_code == 400
    assert response.json() == {
        'success': False,
        'error': 'Currency not supported. Use a standard ISO 4217 currency code.',
    }
    mock_fetcher.fetch_rates.assert_not_awaited()
    assert len(rate_cache) == 0


def test_unexpected_parameter_is_rejected(client, mock_fetcher):
    response = client.get('/api/convert', params={'from': 'USD', 'to': 'EUR', 'debug': '1'})

    assert response.status_code == 400
    assert response.json()['error'] == "Unexpected parameter 'debug'."
    mock_fetcher.fetch_rates.assert_not_awaited()


def test_missing_parameters(client):
    response = client.get('/api/convert')

    assert response.status_code == 400
    assert response.json()['error'] == 'Missing required query parameters "from" and "to".'


def test_pair_not_available(client, mock_fetcher):
    response = client.get('/api/convert', params={'from': 'USD', 'to': 'NGN'})

    assert response.status_code == 400
    assert response.json() == {'success': False, 'error': 'Exchange rate from USD to NGN not available.'}


def test_upstream_outage_serves_fallback_without_error_details(client, mock_fetcher):
    mock_fetcher.fetch_rates.side_effect = UpstreamStatusError(503, 'Upstream status 503: maintenance window')

    response = client.get('/api/convert', params={'from': 'EUR', 'to': 'GBP', 'amount': '10'})

    assert response.status_code == 200
    data = response.json()
    assert data['source'] == 'fallback'
    assert data['rate'] == 0.86
    assert data['convertedAmount'] == 8.6
    assert 'maintenance' not in response.text


def test_post_is_not_allowed(client):
    response = client.post('/api/convert', params={'from': 'USD', 'to': 'EUR'})

    assert response.status_code == 405
    assert response.json() == {'success': False, 'error': 'Method Not Allowed. Use GET.'}


def test_unexpected_error_returns_generic_500():
    failing = AsyncMock(spec=ConversionService)
    failing.convert.side_effect = RuntimeError('boom')
    app.dependency_overrides[get_conversion_service] = lambda: failing
    try:
        client = TestClient(app, raise_server_exceptions=False)
        response = client.get('/api/convert', params={'from': 'USD', 'to': 'EUR'})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {'success': False, 'error': 'Internal server error'}

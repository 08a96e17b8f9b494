from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from api.dependencies import get_conversion_service, get_rate_cache, get_rate_service
from api.schemas import ConversionResponse, ErrorResponse, HealthResponse, SupportedCurrenciesResponse
from application.services import ConversionService, RateService, validate_conversion_query
from domain.models.currency import SUPPORTED_CURRENCIES
from infrastructure.cache.memory_cache import RateCache

router = APIRouter(prefix='/api', tags=['currency'])


@router.get(
	'/convert',
	response_model=ConversionResponse,
	status_code=status.HTTP_200_OK,
	responses={
		400: {'model': ErrorResponse, 'description': 'Invalid parameters or unavailable pair'},
		405: {'model': ErrorResponse, 'description': 'Only GET is allowed'},
	},
	summary='Convert currency amount',
)
async def convert_currency(
	request: Request,
	service: Annotated[ConversionService, Depends(get_conversion_service)],
) -> ConversionResponse:
	"""
	Query parameters `from`, `to` and optional `amount`; anything else is rejected.
	Example: GET /api/convert?from=USD&to=EUR&amount=100
	"""
	conversion = validate_conversion_query(request.query_params)
	result = await service.convert(conversion)
	return ConversionResponse.from_result(result)


@router.get(
	'/currencies',
	response_model=SupportedCurrenciesResponse,
	status_code=status.HTTP_200_OK,
	summary='List supported currencies',
)
async def get_supported_currencies() -> SupportedCurrenciesResponse:
	return SupportedCurrenciesResponse(currencies=sorted(SUPPORTED_CURRENCIES))


@router.get(
	'/health',
	response_model=HealthResponse,
	status_code=status.HTTP_200_OK,
	summary='Health check',
)
async def health(
	rate_service: Annotated[RateService, Depends(get_rate_service)],
	cache: Annotated[RateCache, Depends(get_rate_cache)],
) -> HealthResponse:
	return HealthResponse(
		status='ok',
		message='Currency converter API is healthy.',
		timestamp=datetime.now(UTC),
		upstream_configured=rate_service.upstream_configured,
		cached_bases=cache.cached_bases(),
	)

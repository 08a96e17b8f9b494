from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from domain.models.currency import ConversionResult, RateSource


class ConversionResponse(BaseModel):
	model_config = ConfigDict(
		populate_by_name=True,
		json_schema_extra={
			'example': {
				'success': True,
				'rate': 0.85,
				'convertedAmount': 85.0,
				'from': 'USD',
				'to': 'EUR',
				'lastUpdated': '2025-09-27T00:00:01+00:00',
				'source': 'upstream',
			}
		},
	)

	success: Literal[True] = True
	rate: float = Field(..., description='Units of the target currency per unit of the source')
	converted_amount: float | None = Field(
		None, alias='convertedAmount', description='Converted amount, null when no amount was given'
	)
	from_currency: str = Field(..., alias='from', description='Source currency code')
	to_currency: str = Field(..., alias='to', description='Target currency code')
	last_updated: datetime = Field(..., alias='lastUpdated', description='When the rate was published')
	source: RateSource = Field(..., description='Which stage of the retrieval chain produced the rate')

	@classmethod
	def from_result(cls, result: ConversionResult) -> 'ConversionResponse':
		return cls(
			rate=result.rate,
			converted_amount=float(result.converted_amount) if result.converted_amount is not None else None,
			from_currency=result.from_currency,
			to_currency=result.to_currency,
			last_updated=result.as_of,
			source=result.source,
		)


class ErrorResponse(BaseModel):
	model_config = ConfigDict(
		json_schema_extra={'example': {'success': False, 'error': 'Currency codes must be 3-letter ISO codes (A-Z).'}}
	)

	success: Literal[False] = False
	error: str = Field(..., description='Human-readable error message')


class SupportedCurrenciesResponse(BaseModel):
	currencies: list[str] = Field(description='List of currency codes')

	model_config = ConfigDict(json_schema_extra={'examples': [{'currencies': ['EUR', 'GBP', 'JPY', 'USD']}]})


class HealthResponse(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	status: str = Field(..., description='Overall service status')
	message: str
	timestamp: datetime
	upstream_configured: bool = Field(..., alias='upstreamConfigured')
	cached_bases: list[str] = Field(..., alias='cachedBases')

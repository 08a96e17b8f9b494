from .responses import ConversionResponse, ErrorResponse, HealthResponse, SupportedCurrenciesResponse

__all__ = [
	'ConversionResponse',
	'ErrorResponse',
	'HealthResponse',
	'SupportedCurrenciesResponse',
]

from .conversion_service import ConversionService
from .query_validator import validate_conversion_query
from .rate_service import RateService

__all__ = ['ConversionService', 'RateService', 'validate_conversion_query']

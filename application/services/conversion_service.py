from collections.abc import Callable
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

from application.services.rate_service import RateService
from domain.models.currency import ConversionRequest, ConversionResult, RateSource

CONVERTED_AMOUNT_QUANTUM = Decimal('0.000001')


def _utcnow() -> datetime:
	return datetime.now(UTC)


class ConversionService:
	def __init__(self, rate_service: RateService, clock: Callable[[], datetime] = _utcnow):
		self.rate_service = rate_service
		self._clock = clock

	async def convert(self, request: ConversionRequest) -> ConversionResult:
		if request.from_currency == request.to_currency:
			# identity pair: answered in-process, never from cache or upstream
			return ConversionResult(
				from_currency=request.from_currency,
				to_currency=request.to_currency,
				rate=1.0,
				converted_amount=request.amount,
				source=RateSource.CACHE,
				as_of=self._clock(),
			)

		quote = await self.rate_service.get_rate(request.from_currency, request.to_currency)

		converted_amount = None
		if request.amount is not None:
			# ROUND_HALF_UP rounds ties away from zero
			converted_amount = (request.amount * Decimal(str(quote.rate))).quantize(
				CONVERTED_AMOUNT_QUANTUM, rounding=ROUND_HALF_UP
			)

		return ConversionResult(
			from_currency=request.from_currency,
			to_currency=request.to_currency,
			rate=quote.rate,
			converted_amount=converted_amount,
			source=quote.source,
			as_of=quote.as_of,
		)

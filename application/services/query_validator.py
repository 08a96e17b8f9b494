import re
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation

from domain.exceptions.currency import QueryValidationError
from domain.models.currency import SUPPORTED_CURRENCIES, ConversionRequest

ALLOWED_QUERY_PARAMS = frozenset({'from', 'to', 'amount'})
ISO_CURRENCY_PATTERN = re.compile(r'[A-Z]{3}', re.ASCII)
AMOUNT_PATTERN = re.compile(r'[+-]?\d+(\.\d+)?', re.ASCII)
MAX_AMOUNT = Decimal(10) ** 12
MAX_DECIMALS = 8


def _param_count(params: Mapping[str, str], key: str) -> int:
	# starlette's QueryParams keeps every value of a repeated key
	getlist = getattr(params, 'getlist', None)
	return len(getlist(key)) if getlist is not None else 1


def _parse_amount(raw: str) -> Decimal:
	raw = raw.strip()
	if not raw:
		raise QueryValidationError('If provided, "amount" must not be empty.')
	if not AMOUNT_PATTERN.fullmatch(raw):
		raise QueryValidationError('"amount" must be a plain decimal number without exponent.')

	try:
		amount = Decimal(raw)
	except InvalidOperation as e:
		raise QueryValidationError('Invalid numeric value for "amount".') from e
	if not amount.is_finite():
		raise QueryValidationError('Invalid numeric value for "amount".')

	if abs(amount) > MAX_AMOUNT:
		raise QueryValidationError('"amount" is out of allowed range.')
	if amount < 0:
		raise QueryValidationError('"amount" must be zero or a positive value.')

	fraction = raw.partition('.')[2]
	if len(fraction) > MAX_DECIMALS:
		raise QueryValidationError(f'"amount" may have at most {MAX_DECIMALS} decimal places.')

	return amount


def validate_conversion_query(params: Mapping[str, str]) -> ConversionRequest:
	"""Turn raw query parameters into a ConversionRequest.

	Raises QueryValidationError on the first failing check. Unknown parameter
	names are rejected rather than ignored.
	"""
	for key in params:
		if key not in ALLOWED_QUERY_PARAMS:
			raise QueryValidationError(f"Unexpected parameter '{key}'.")
		if _param_count(params, key) > 1:
			raise QueryValidationError(f"Parameter '{key}' may only be provided once.")

	raw_from = params.get('from')
	raw_to = params.get('to')
	if not raw_from or not raw_to:
		raise QueryValidationError('Missing required query parameters "from" and "to".')

	from_currency = str(raw_from).upper()
	to_currency = str(raw_to).upper()

	if not ISO_CURRENCY_PATTERN.fullmatch(from_currency) or not ISO_CURRENCY_PATTERN.fullmatch(to_currency):
		raise QueryValidationError('Currency codes must be 3-letter ISO codes (A-Z).')

	if from_currency not in SUPPORTED_CURRENCIES or to_currency not in SUPPORTED_CURRENCIES:
		raise QueryValidationError('Currency not supported. Use a standard ISO 4217 currency code.')

	amount = None
	if 'amount' in params:
		amount = _parse_amount(str(params['amount']))

	return ConversionRequest(from_currency=from_currency, to_currency=to_currency, amount=amount)

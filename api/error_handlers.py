import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from domain.exceptions.currency import PairUnavailableError, ProviderError, QueryValidationError

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
	return JSONResponse(status_code=status_code, content={'success': False, 'error': message})


def register_exception_handlers(app: FastAPI) -> None:
	@app.exception_handler(QueryValidationError)
	async def validation_error_handler(request: Request, exc: QueryValidationError):
		logger.warning(
			f'Validation failed for {request.url.path}: {exc.message}',
			extra={'extra_data': {'params': list(request.query_params.keys())}},
		)
		return _error(status.HTTP_400_BAD_REQUEST, exc.message)

	@app.exception_handler(PairUnavailableError)
	async def pair_unavailable_handler(request: Request, exc: PairUnavailableError):
		return _error(status.HTTP_400_BAD_REQUEST, str(exc))

	@app.exception_handler(ProviderError)
	async def provider_error_handler(request: Request, exc: ProviderError):
		# the rate service absorbs provider failures; reaching here is a bug
		logger.error(f'Provider error escaped the fallback chain: {exc}', exc_info=exc)
		return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, 'Internal server error')

	@app.exception_handler(StarletteHTTPException)
	async def http_exception_handler(request: Request, exc: StarletteHTTPException):
		if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
			return _error(exc.status_code, 'Method Not Allowed. Use GET.')
		return _error(exc.status_code, str(exc.detail))

	@app.exception_handler(Exception)
	async def global_exception_handler(request: Request, exc: Exception):
		logger.error(f'Unhandled exception: {exc}', exc_info=exc)
		return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, 'Internal server error')

class CurrencyException(Exception):
    pass


class QueryValidationError(CurrencyException):
    """Bad client input. The message is safe to show to the caller."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class PairUnavailableError(CurrencyException):
    def __init__(self, from_currency: str, to_currency: str):
        self.from_currency = from_currency
        self.to_currency = to_currency
        super().__init__(f'Exchange rate from {from_currency} to {to_currency} not available.')


class ProviderError(CurrencyException):
    retryable = False


class UpstreamTimeoutError(ProviderError):
    retryable = True


class UpstreamNetworkError(ProviderError):
    retryable = True


class MalformedPayloadError(ProviderError):
    retryable = True


class UpstreamStatusError(ProviderError):
    def __init__(self, status_code: int, message: str | None = None):
        self.status_code = status_code
        super().__init__(message or f'Upstream status {status_code}')

    @property
    def retryable(self) -> bool:
        return self.status_code == 429 or self.status_code >= 500

    @property
    def is_permanent(self) -> bool:
        return not self.retryable

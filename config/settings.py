from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class RetrievalConfig:
	"""Upstream and cache tuning, resolved once at startup. Durations are seconds."""

	api_key: str | None
	base_url: str
	cache_ttl: float
	timeout: float
	retries: int
	backoff_base: float

	@property
	def upstream_configured(self) -> bool:
		return bool(self.api_key)


class Settings(BaseSettings):
	EXCHANGE_RATE_API_KEY: str = ''
	EXCHANGE_API_BASE: str = 'https://v6.exchangerate-api.com/v6'

	# Upstream behaviour
	UPSTREAM_CACHE_TTL_MS: int = Field(default=300_000, ge=0)
	UPSTREAM_TIMEOUT_MS: int = Field(default=8_000, gt=0)
	UPSTREAM_RETRIES: int = Field(default=1, ge=0)
	UPSTREAM_BACKOFF_MS: int = Field(default=200, ge=0)

	# Application
	APP_NAME: str = 'Currency Converter API'
	DEBUG: bool = False
	LOG_LEVEL: str = 'INFO'
	LOG_JSON: bool = False

	model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')

	def retrieval_config(self) -> RetrievalConfig:
		return RetrievalConfig(
			api_key=self.EXCHANGE_RATE_API_KEY.strip() or None,
			base_url=self.EXCHANGE_API_BASE.rstrip('/'),
			cache_ttl=self.UPSTREAM_CACHE_TTL_MS / 1000,
			timeout=self.UPSTREAM_TIMEOUT_MS / 1000,
			retries=self.UPSTREAM_RETRIES,
			backoff_base=self.UPSTREAM_BACKOFF_MS / 1000,
		)


@lru_cache
def get_settings() -> Settings:
	return Settings()

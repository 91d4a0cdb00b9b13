"""Centralized backend configuration and environment-driven settings definitions."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	"""Application settings loaded from environment variables."""

	model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

	DATABASE_URL: str = Field(default="sqlite:///./rate_aggregator.db")
	ENVIRONMENT: Literal["development", "staging", "production", "test"] = Field(default="production")

	MIN_RATE: float = Field(default=5.0)
	MAX_RATE: float = Field(default=500.0)
	MAX_YEARS_EXPERIENCE: int = Field(default=60)
	BUCKET_WIDTH: float = Field(default=10.0)
	GEO_TOP_N: int = Field(default=5)

	RATE_LIMIT_MAX_SUBMISSIONS: int = Field(default=3)
	RATE_LIMIT_WINDOW_HOURS: int = Field(default=24)
	RATE_LIMIT_HARD_CAP: int = Field(default=20)
	OUTLIER_MIN_SAMPLES: int = Field(default=10)
	FRAUD_AUTO_REJECT_THRESHOLD: float | None = Field(default=1.0)

	SEED_REFERENCE_DATA: bool = Field(default=True)
	SEED_DEMO_SUBMISSIONS: int = Field(default=0)

	app_name: str = Field(default="PriceIQ Rate Aggregation Service")
	app_version: str = Field(default="1.0.0")
	app_description: str = Field(
		default=(
			"Crowdsourced freelance rate aggregation API serving percentile market statistics, "
			"distributions, trends, and geographic rankings from moderated submissions."
		)
	)
	debug: bool = Field(default=False)

	api_prefix: str = Field(default="/api/v1")
	frontend_origin: str = Field(default="http://localhost:3000")
	cors_origins: str = Field(default="http://localhost:3000,http://127.0.0.1:3000")

	log_level: str = Field(default="INFO")

	@field_validator("MIN_RATE", "MAX_RATE", "BUCKET_WIDTH")
	@classmethod
	def validate_positive_amount(cls, value: float) -> float:
		"""Validate rate bounds and bucket widths are strictly positive."""
		if value <= 0:
			raise ValueError("Rate bounds and bucket width must be greater than zero.")
		return value

	@field_validator("RATE_LIMIT_MAX_SUBMISSIONS", "RATE_LIMIT_WINDOW_HOURS", "RATE_LIMIT_HARD_CAP", "GEO_TOP_N")
	@classmethod
	def validate_positive_count(cls, value: int) -> int:
		"""Validate limit counters are at least one."""
		if value < 1:
			raise ValueError("Rate limit counters, windows, and top-N sizes must be at least 1.")
		return value

	@field_validator("FRAUD_AUTO_REJECT_THRESHOLD")
	@classmethod
	def validate_reject_threshold(cls, value: float | None) -> float | None:
		"""Validate auto-reject threshold lies in the fraud score range."""
		if value is not None and not 0.0 < value <= 1.0:
			raise ValueError("FRAUD_AUTO_REJECT_THRESHOLD must be in (0, 1] or unset.")
		return value

	@model_validator(mode="after")
	def validate_rate_bounds(self) -> "Settings":
		"""Validate the plausible rate window and rate limit ordering."""
		if self.MIN_RATE >= self.MAX_RATE:
			raise ValueError("MIN_RATE must be lower than MAX_RATE.")
		if self.RATE_LIMIT_HARD_CAP < self.RATE_LIMIT_MAX_SUBMISSIONS:
			raise ValueError("RATE_LIMIT_HARD_CAP cannot be lower than RATE_LIMIT_MAX_SUBMISSIONS.")
		return self

	@property
	def database_url(self) -> str:
		"""Backward-compatible lowercase accessor for database URL."""
		return self.DATABASE_URL

	@property
	def environment(self) -> str:
		"""Backward-compatible lowercase accessor for deployment environment."""
		return self.ENVIRONMENT

	@property
	def allowed_cors_origins(self) -> List[str]:
		"""Return normalized CORS origins list."""
		raw_origins = [item.strip() for item in self.cors_origins.split(",")]
		merged = [origin for origin in raw_origins if origin]
		if self.frontend_origin and self.frontend_origin not in merged:
			merged.append(self.frontend_origin)
		return merged


@lru_cache(maxsize=1)
def get_settings() -> Settings:
	"""Return cached settings instance for dependency injection."""
	return Settings()

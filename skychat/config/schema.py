"""Pydantic v2 configuration schema with strict validation."""

from pydantic import BaseModel, Field

from skychat.models.common import Language


class CacheConfig(BaseModel):
    model_config = {"extra": "forbid"}

    ttl_seconds: float = Field(default=600.0, gt=0.0)
    key_precision: int = Field(default=3, ge=0, le=6)


class ForecastConfig(BaseModel):
    model_config = {"extra": "forbid"}

    max_days: int = Field(default=5, ge=1, le=5)
    default_language: Language = Language.EN
    units: str = "metric"
    source: str = "openweathermap-forecast"


class UpstreamConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = "https://api.openweathermap.org"
    timeout_seconds: float = Field(default=10.0, gt=0.0)
    max_retries: int = Field(default=2, ge=0)
    retry_base_delay: float = Field(default=1.0, ge=0.0)
    user_agent: str = "skychat/0.1.0"
    api_key_env: str = "OPENWEATHER_API_KEY"


class AppConfig(BaseModel):
    model_config = {"extra": "forbid"}

    cache: CacheConfig = CacheConfig()
    forecast: ForecastConfig = ForecastConfig()
    upstream: UpstreamConfig = UpstreamConfig()

"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

Every setting has a local-development default so the service boots against a
local MongoDB with no configuration at all. Sub-configs are composed onto
AppSettings by a model_validator, so one AppSettings() call reads everything.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str = "mongodb://localhost:27017/"
    db_name: str = "tracking-links"


class RedisSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Optional; without Redis the geolocation cache is simply disabled
    redis_uri: Optional[str] = None


class GeoLocationSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # {ip} is substituted with the normalised client address
    geo_api_url: str = "http://ip-api.com/json/{ip}"
    geo_timeout_seconds: float = Field(default=2.0, gt=0)
    geo_cache_ttl_seconds: int = Field(default=3600, ge=0)
    geo_max_concurrent_lookups: int = Field(default=10, ge=1)


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production

    # Sampling rate (0.0–1.0) for the per-click redirect log line
    sample_rate_redirect: float = 1.0


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1
    sentry_profile_sample_rate: float = 0.05


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    env: str = "development"
    app_name: str = "tracking-links"
    host: str = "0.0.0.0"
    port: int = 3000

    # Base used when building tracking URLs; request host is used when empty
    public_base_url: str = ""

    cors_origins: list[str] = ["*"]

    # "redirect" answers /track/<id> with a plain HTTP redirect;
    # "interstitial" renders a page that collects client data first
    tracking_mode: Literal["redirect", "interstitial"] = "redirect"
    redirect_status_code: Literal[302, 303] = 302

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    redis: Optional[RedisSettings] = None
    geo: Optional[GeoLocationSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        if self.db is None:
            self.db = DatabaseSettings()
        if self.redis is None:
            self.redis = RedisSettings()
        if self.geo is None:
            self.geo = GeoLocationSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()
        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"

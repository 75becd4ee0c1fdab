"""Application configuration via pydantic settings."""

from functools import lru_cache
from pathlib import Path

from typing import Any

from pydantic import AliasChoices, Field
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed application configuration."""

    app_env: str = Field("local", alias="APP_ENV")
    app_name: str = "MedBuddy API"
    api_v1_prefix: str = "/api/v1"
    app_base_url: str = Field("http://localhost:5173", alias="APP_BASE_URL")
    app_timezone: str = Field("UTC", alias="APP_TIMEZONE")

    database_url: str = Field(..., alias="DATABASE_URL")
    sync_database_url: str | None = Field(default=None, alias="SYNC_DATABASE_URL")

    secret_key: str = Field(..., alias="SECRET_KEY")
    jwt_secret_key: str = Field(default="", alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    redis_url: str | None = Field(default=None, alias="REDIS_URL")

    email_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("EMAIL_API_KEY", "RESEND_API_KEY"),
    )
    email_api_url: str = Field("https://api.resend.com/emails", alias="EMAIL_API_URL")
    email_from: str = Field(
        "MedBuddy <notifications@medbuddy.app>", alias="EMAIL_FROM"
    )
    email_timeout_seconds: float = Field(10.0, alias="EMAIL_TIMEOUT_SECONDS")

    escalation_enabled: bool = Field(True, alias="ESCALATION_ENABLED")
    escalation_interval_seconds: float = Field(300, alias="ESCALATION_INTERVAL_SECONDS")
    escalation_initial_delay_seconds: float = Field(
        5, alias="ESCALATION_INITIAL_DELAY_SECONDS"
    )
    escalation_catch_up: bool = Field(False, alias="ESCALATION_CATCH_UP")
    missed_grace_minutes: int = Field(30, alias="MISSED_GRACE_MINUTES")

    cors_allow_credentials: bool = Field(default=False, alias="CORS_ALLOW_CREDENTIALS")
    cors_allowlist: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"], alias="CORS_ALLOWLIST"
    )

    rate_limit_default: str = Field("100/minute", alias="RATE_LIMIT_DEFAULT")
    rate_limit_login: str = Field("10/minute", alias="RATE_LIMIT_LOGIN")

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[3] / ".env",
        case_sensitive=False,
        populate_by_name=True,
    )

    def model_post_init(self, __context: Any) -> None:
        """Populate JWT secret from the generic secret when not provided."""

        if not self.jwt_secret_key:
            object.__setattr__(self, "jwt_secret_key", self.secret_key)

    @field_validator("cors_allowlist", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()  # type: ignore[call-arg]

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    env: str = Field(default="dev", description="Deployment environment")
    app_name: str = "HR Payroll API"
    database_url: str = Field(
        default="postgresql://postgres:postgres@db:5432/hrpayroll",
        description="Database connection string",
    )
    cors_origins: str = Field(default="", description="Comma separated list of allowed origins")
    log_level: str = "INFO"
    sentry_dsn: str | None = Field(default=None, description="Sentry DSN for error monitoring")
    sentry_traces_sample_rate: float = 0.2
    otlp_endpoint: str | None = Field(default=None, description="OTLP endpoint for traces/metrics")

    allow_negative_net_pay: bool = Field(
        default=True, description="Allow paying payroll lines whose net salary is negative"
    )
    default_payment_method: str = "bank_transfer"

    model_config = SettingsConfigDict(env_prefix="HRPAYROLL_", extra="ignore")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings(_env_file=get_settings_env_file())


def get_settings_env_file() -> str | None:
    """Resolve environment-specific env file if it exists."""
    env = os.getenv("HRPAYROLL_ENV", "dev")
    env_file = BASE_DIR / f".env.{env}"
    default_file = BASE_DIR / ".env"
    if env_file.exists():
        return str(env_file)
    if default_file.exists():
        return str(default_file)
    return None


settings = get_settings()

"""Application configuration via Pydantic settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration object loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field("PurrfectCare Clinic API", alias="APP_NAME")
    debug: bool = False
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    database_url: str = Field(..., alias="DATABASE_URL")
    jwt_secret: str = Field(..., alias="JWT_SECRET")
    jwt_algorithm: str = "HS256"

    clinic_name: str = Field("PURRFECTCARE", alias="CLINIC_NAME")
    clinic_timezone: str = Field("Asia/Manila", alias="CLINIC_TIMEZONE")

    sms_api_url: str = Field("https://api.semaphore.co/api/v4/messages", alias="SMS_API_URL")
    sms_api_key: str = Field("", alias="SMS_API_KEY")
    sms_sender_name: str = Field("FixUp", alias="SMS_SENDER_NAME")
    sms_timeout_seconds: float = Field(10.0, alias="SMS_TIMEOUT_SECONDS")

    reminder_sweep_enabled: bool = Field(False, alias="REMINDER_SWEEP_ENABLED")
    reminder_sweep_interval_seconds: int = Field(3600, alias="REMINDER_SWEEP_INTERVAL_SECONDS", gt=0)
    cron_secret: str | None = Field(None, alias="CRON_SECRET")

    allow_unknown_inventory_items: bool = Field(False, alias="ALLOW_UNKNOWN_INVENTORY_ITEMS")


@lru_cache(1)
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()


settings = get_settings()

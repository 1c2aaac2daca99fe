"""Application configuration via pydantic-settings."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from charitypay.gateways.base import Environment, ProviderConfig, ProviderType

IYZICO_SANDBOX_URL = "https://sandbox-api.iyzipay.com"
IYZICO_PRODUCTION_URL = "https://api.iyzipay.com"
PAYTR_URL = "https://www.paytr.com"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Charity Payments"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"
    app_url: str = "http://localhost:8000"
    # Donor landing page after a hosted checkout; defaults to /payments/result
    payment_return_url: Optional[str] = None
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Payment environment shared by all processors
    payment_environment: Environment = Environment.SANDBOX
    gateway_timeout_seconds: float = Field(default=30.0, gt=0)
    verify_retries: int = Field(default=2, ge=0)
    allow_placeholder_buyer: bool = True

    # iyzico
    iyzico_api_key: Optional[str] = None
    iyzico_secret_key: Optional[str] = None
    iyzico_base_url: Optional[str] = None

    # PayTR
    paytr_merchant_id: Optional[str] = None
    paytr_merchant_key: Optional[str] = None
    paytr_merchant_salt: Optional[str] = None
    paytr_base_url: Optional[str] = None

    # Currencies offered to donors
    currencies: List[str] = ["TRY", "USD", "EUR"]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def provider_configs(settings: Settings) -> dict[ProviderType, ProviderConfig]:
    """Build one ProviderConfig per processor from settings.

    Configs are returned even when credentials are missing; the registry
    builder decides which of them are complete enough to register.
    """
    environment = settings.payment_environment

    # Environment safety: never hit production processors outside production
    if settings.environment != "production":
        environment = Environment.SANDBOX

    iyzico_url = settings.iyzico_base_url or (
        IYZICO_PRODUCTION_URL
        if environment is Environment.PRODUCTION
        else IYZICO_SANDBOX_URL
    )

    return {
        ProviderType.IYZICO: ProviderConfig(
            merchant_id="",
            secret_key=settings.iyzico_secret_key or "",
            api_key=settings.iyzico_api_key or "",
            base_url=iyzico_url,
            environment=environment,
        ),
        # PayTR has a single host; sandbox is selected with the test_mode flag
        ProviderType.PAYTR: ProviderConfig(
            merchant_id=settings.paytr_merchant_id or "",
            secret_key=settings.paytr_merchant_key or "",
            api_key=settings.paytr_merchant_salt or "",
            base_url=settings.paytr_base_url or PAYTR_URL,
            environment=environment,
        ),
    }

"""Конфигурация приложения."""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from compliance.config import ComplianceConfig


class Settings(BaseSettings):
    """Настройки приложения."""

    model_config = SettingsConfigDict(env_file=".env", extra="allow")

    # Supabase
    management_api_base: str = "https://api.supabase.com/v1"
    vendor_domain: str = "supabase.co"

    # HTTP
    http_timeout_seconds: float = 30.0
    check_timeout_seconds: Optional[float] = None  # Без дедлайна по умолчанию

    # API
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"

    def to_compliance_config(self) -> ComplianceConfig:
        return ComplianceConfig(
            management_api_base=self.management_api_base,
            vendor_domain=self.vendor_domain,
            http_timeout_seconds=self.http_timeout_seconds,
            check_timeout_seconds=self.check_timeout_seconds,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()

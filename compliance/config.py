"""
Configuration for the compliance checker.
"""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ComplianceConfig:
    """Конфигурация проверок."""

    # === Supabase endpoints ===
    management_api_base: str = field(
        default_factory=lambda: os.getenv("SUPABASE_MANAGEMENT_API_BASE", "https://api.supabase.com/v1")
    )
    vendor_domain: str = "supabase.co"

    # === Key prefixes (form validation) ===
    data_plane_key_prefix: str = "eyJ"
    management_key_prefix: str = "sbp_"

    # === Execution Settings ===
    http_timeout_seconds: float = 30.0
    # None = без дедлайна на проверку
    check_timeout_seconds: Optional[float] = None

    def __post_init__(self):
        """Validate configuration."""
        self.management_api_base = self.management_api_base.rstrip("/")

        if self.http_timeout_seconds <= 0:
            raise ValueError("http_timeout_seconds must be positive")
        if self.check_timeout_seconds is not None and self.check_timeout_seconds <= 0:
            raise ValueError("check_timeout_seconds must be positive or None")


def get_default_config() -> ComplianceConfig:
    """Получить конфигурацию по умолчанию."""
    return ComplianceConfig()

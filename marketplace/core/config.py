"""Marketplace Configuration"""

from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    model_config = SettingsConfigDict(
        env_prefix="MARKETPLACE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Marketplace"
    environment: str = "development"
    log_level: str = "INFO"

    # Money
    currency: str = "USD"
    money_quantum: Decimal = Decimal("0.01")

    # Inventory
    low_stock_threshold: int = 5

    # Pagination
    default_page_size: int = 10
    max_page_size: int = 100

    # Coupons
    coupon_code_min_length: int = 6
    coupon_code_max_length: int = 20

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()

"""
Market Price Settings
=====================
Service, transport and logging configuration as Pydantic Settings models.
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import Optional
from enum import Enum

from ...domain.repositories.currency_repository import DEFAULT_PAGE_SIZE
from ..exchanges.retry_policy import DEFAULT_CLOSE_RETRY_INTERVAL_SECONDS


DEFAULT_OKX_STREAM_URL = "wss://ws.okx.com:8443/ws/v5/public"
DEFAULT_OKX_REST_URL = "https://www.okx.com/api/v5/public/instruments?instType="


class LogLevel(str, Enum):
    """Logging levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


# === MARKET PRICE CONFIGURATION ===

class MarketPriceSettings(BaseSettings):
    """Market price service configuration"""
    verbose: bool = Field(default=True, description="Log subscription lifecycle events")
    stream_url: str = Field(default=DEFAULT_OKX_STREAM_URL, description="OKX public WebSocket URL")
    rest_url: str = Field(default=DEFAULT_OKX_REST_URL, description="OKX instruments URL, market type is appended")
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, description="Instruments per subscription page")

    # Close retry policy
    close_retry_interval_seconds: float = Field(
        default=DEFAULT_CLOSE_RETRY_INTERVAL_SECONDS,
        description="Fixed delay between attempts to close the active subscription"
    )
    close_retry_max_attempts: Optional[int] = Field(
        default=None,
        description="Maximum close attempts, None retries forever"
    )

    # Transport
    request_timeout_seconds: float = Field(default=10.0, description="REST request timeout")
    ping_interval_seconds: Optional[float] = Field(default=20.0)
    ping_timeout_seconds: Optional[float] = Field(default=30.0)

    @field_validator('page_size')
    @classmethod
    def validate_page_size(cls, v):
        if v < 0:
            raise ValueError(f"page_size must be >= 0, got {v}")
        return v

    @field_validator('close_retry_interval_seconds')
    @classmethod
    def validate_retry_interval(cls, v):
        if v < 0:
            raise ValueError(f"close_retry_interval_seconds must be >= 0, got {v}")
        return v

    @field_validator('close_retry_max_attempts')
    @classmethod
    def validate_max_attempts(cls, v):
        if v is not None and v < 1:
            raise ValueError(f"close_retry_max_attempts must be >= 1 or None, got {v}")
        return v

    class Config:
        env_prefix = "MARKET_PRICE_"


# === SYSTEM CONFIGURATION ===

class LoggingSettings(BaseSettings):
    """Logging configuration"""
    level: LogLevel = Field(default=LogLevel.INFO)
    file_enabled: bool = Field(default=False)
    console_enabled: bool = Field(default=True)
    structured_logging: bool = Field(default=True)
    log_dir: str = Field(default="logs")
    max_file_size_mb: int = Field(default=100)
    backup_count: int = Field(default=5)

    class Config:
        env_prefix = "LOG_"


class AppSettings(BaseSettings):
    """Main application settings"""
    app_name: str = Field(default="Market Price Service")
    version: str = Field(default="1.0.0")

    market_price: MarketPriceSettings = Field(default_factory=MarketPriceSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    class Config:
        env_file = ".env"
        env_nested_delimiter = "__"  # Allows MARKET_PRICE__PAGE_SIZE=20
        case_sensitive = False
        extra = "ignore"

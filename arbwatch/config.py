"""
Configuration management for the arbitrage monitor.
Uses Pydantic settings, read from the environment and an optional .env file.
"""

from decimal import Decimal
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from arbwatch.errors import ConfigurationError
from arbwatch.models import EngineConfig


class StrategyConfig(BaseSettings):
    """Cross-exchange strategy parameters."""

    trading_pair: str = Field("BTC-USDT", alias="TRADING_PAIR")
    interval_ms: int = Field(1000, alias="INTERVAL_MS")
    slippage: Decimal = Field(Decimal("0.0005"), alias="SLIPPAGE")
    # Unset means wait for the first quotes forever
    ready_timeout_s: Optional[float] = Field(None, alias="READY_TIMEOUT_S")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("interval_ms")
    @classmethod
    def validate_interval(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Interval must be a positive number of milliseconds")
        return v

    @field_validator("slippage")
    @classmethod
    def validate_slippage(cls, v: Decimal) -> Decimal:
        if not Decimal(0) <= v < Decimal(1):
            raise ValueError("Slippage must be between 0.0 and 1.0")
        return v

    @property
    def interval(self) -> float:
        """Tick interval in seconds."""
        return self.interval_ms / 1000


class FeedConfig(BaseSettings):
    """Settings shared by both feed sections."""

    name: str = "simulated"
    fees: Decimal = Decimal("0.001")  # per transaction
    testing: bool = False
    api_key: str = ""
    api_secret: str = ""

    @field_validator("fees")
    @classmethod
    def validate_fees(cls, v: Decimal) -> Decimal:
        if not Decimal(0) <= v < Decimal(1):
            raise ValueError("Fee rate must be between 0.0 and 1.0")
        return v

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        return v.strip().lower()


class FeedAConfig(FeedConfig):
    """First exchange (FEED_A_*)."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="FEED_A_", extra="ignore")


class FeedBConfig(FeedConfig):
    """Second exchange (FEED_B_*)."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="FEED_B_", extra="ignore")


class MonitoringConfig(BaseSettings):
    """Logging and notification configuration."""

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    enable_notifications: bool = Field(False, alias="ENABLE_NOTIFICATIONS")
    discord_webhook_url: str = Field("", alias="DISCORD_WEBHOOK_URL")
    telegram_bot_token: str = Field("", alias="TELEGRAM_BOT_TOKEN")
    telegram_chat_id: str = Field("", alias="TELEGRAM_CHAT_ID")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class DevelopmentConfig(BaseSettings):
    """Development configuration."""

    debug_mode: bool = Field(False, alias="DEBUG_MODE")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class AppConfig:
    """Master configuration class that aggregates all config sections."""

    def __init__(self):
        try:
            self.strategy = StrategyConfig()
            self.feed_a = FeedAConfig()
            self.feed_b = FeedBConfig()
            self.monitoring = MonitoringConfig()
            self.development = DevelopmentConfig()
        except ValidationError as e:
            raise ConfigurationError(f"invalid configuration: {e}") from e

    @property
    def is_debug(self) -> bool:
        return self.development.debug_mode

    def engine_config(self, feed_a, feed_b) -> EngineConfig:
        """Build the immutable engine settings around two constructed feeds."""
        return EngineConfig(
            trading_pair=self.strategy.trading_pair,
            interval=self.strategy.interval,
            slippage=self.strategy.slippage,
            ready_timeout=self.strategy.ready_timeout_s,
            feed_a=feed_a,
            feed_b=feed_b,
        )


# Global config instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config


def reload_config() -> AppConfig:
    """Force reload configuration from environment."""
    global _config
    _config = AppConfig()
    return _config

"""
Configuration management for Shop Insights.

Provides centralized configuration loading and validation using Pydantic
settings. Values come from environment variables and an optional .env file.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any, List

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shop_insights.utils.exceptions import ConfigurationError
from shop_insights.utils.logger import get_logger


logger = get_logger(__name__)

DEFAULT_FRONTEND_ORIGIN = "http://localhost:3000"


class ShopAPIConfig(BaseModel):
    """Commerce platform API configuration."""

    api_version: str = Field(default="2024-01", description="Admin API version segment")
    timeout: float = Field(default=15.0, description="Per-request timeout in seconds")


class SchedulerConfig(BaseModel):
    """Periodic sync configuration."""

    interval_minutes: int = Field(default=10, description="Minutes between sync cycles")
    enabled: bool = Field(default=True, description="Run the periodic sync")

    @property
    def interval_seconds(self) -> float:
        return self.interval_minutes * 60.0


class Settings(BaseSettings):
    """Main application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    database_url: str = Field(default="sqlite:///./shop_insights.db")
    database_echo: bool = Field(default=False)

    shop_api_version: str = Field(default="2024-01")
    shop_api_timeout: float = Field(default=15.0)

    sync_interval_minutes: int = Field(default=10)
    auto_sync_enabled: bool = Field(default=True)

    environment: str = Field(default="development")
    frontend_origin: Optional[str] = Field(default=None)

    log_level: str = Field(default="INFO")
    log_dir: str = Field(default="./logs")
    log_to_file: bool = Field(default=True)
    debug_mode: bool = Field(default=False)

    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=4000)

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator('shop_api_timeout')
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v

    @field_validator('sync_interval_minutes')
    @classmethod
    def validate_interval(cls, v):
        if v <= 0:
            raise ValueError("Sync interval must be positive")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def allowed_origins(self) -> List[str]:
        """Origins accepted by CORS in production."""
        return [o for o in (DEFAULT_FRONTEND_ORIGIN, self.frontend_origin) if o]

    @property
    def shop_api(self) -> ShopAPIConfig:
        return ShopAPIConfig(
            api_version=self.shop_api_version,
            timeout=self.shop_api_timeout,
        )

    @property
    def scheduler(self) -> SchedulerConfig:
        return SchedulerConfig(
            interval_minutes=self.sync_interval_minutes,
            enabled=self.auto_sync_enabled,
        )


_config: Optional[Settings] = None


def get_config() -> Settings:
    """
    Get the global configuration instance.

    Returns:
        Settings: Validated configuration instance.

    Raises:
        ConfigurationError: If configuration validation fails.
    """
    global _config

    if _config is None:
        try:
            _config = Settings()
        except Exception as e:
            raise ConfigurationError(f"Configuration validation failed: {e}")

    return _config


def reload_config() -> Settings:
    """Reload configuration from environment variables."""
    global _config
    _config = None
    return get_config()


def describe_configuration() -> Dict[str, Any]:
    """
    Summarize the active configuration without secrets.

    Returns:
        Dict with a validity flag and a sanitized summary.
    """
    try:
        config = get_config()
    except ConfigurationError as e:
        return {
            "valid": False,
            "error": str(e),
            "timestamp": datetime.now().isoformat(),
        }

    return {
        "valid": True,
        "timestamp": datetime.now().isoformat(),
        "summary": {
            "database": {
                "url_scheme": config.database_url.split(":", 1)[0],
                "sqlite_file_exists": (
                    Path(config.database_url.replace("sqlite:///", "")).exists()
                    if config.database_url.startswith("sqlite:///") else None
                ),
            },
            "shop_api": config.shop_api.model_dump(),
            "scheduler": config.scheduler.model_dump(),
            "application": {
                "environment": config.environment,
                "allowed_origins": config.allowed_origins,
                "log_level": config.log_level,
                "debug_mode": config.debug_mode,
            },
        },
    }

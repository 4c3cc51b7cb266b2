"""
Environment-aware configuration settings for the state machine builder.

Supports dev, test, and prod environments with appropriate defaults.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Supported deployment environments."""

    DEV = "dev"
    TEST = "test"
    PROD = "prod"


class RetrySettings(BaseSettings):
    """Default retry policy applied by ``StateChain.default_retry()``."""

    model_config = SettingsConfigDict(env_prefix="RETRY_")

    interval_seconds: int = Field(default=1, ge=1, description="Delay before the first retry (seconds)")
    max_attempts: int = Field(default=3, ge=0, description="Maximum retry attempts")
    backoff_rate: float = Field(default=2.0, ge=1.0, description="Multiplier applied to the interval per attempt")


class RenderSettings(BaseSettings):
    """JSON output settings for rendered definitions."""

    model_config = SettingsConfigDict(env_prefix="RENDER_")

    indent: int = Field(default=2, ge=0, description="JSON indentation (0 renders compact output)")
    sort_keys: bool = Field(default=False, description="Sort keys in rendered JSON")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="CHAINFLOW_",
        case_sensitive=False,  # CHAINFLOW_LOG_LEVEL and chainflow_log_level both work
        extra="ignore",        # Ignore unknown environment variables
    )

    # Application
    app_name: str = Field(default="chainflow")
    environment: Environment = Field(default=Environment.DEV)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Sub-settings
    retry: RetrySettings = Field(default_factory=RetrySettings)
    render: RenderSettings = Field(default_factory=RenderSettings)

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: str | Environment) -> Environment:
        """Validate and convert environment string to enum."""
        if isinstance(v, Environment):
            return v
        return Environment(v.lower())

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == Environment.DEV

    @property
    def is_testing(self) -> bool:
        """Check if running in test mode."""
        return self.environment == Environment.TEST

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PROD


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()

"""Configuration management."""

from chainflow.config.settings import (
    Environment,
    RenderSettings,
    RetrySettings,
    Settings,
    get_settings,
)

__all__ = ["Environment", "RenderSettings", "RetrySettings", "Settings", "get_settings"]

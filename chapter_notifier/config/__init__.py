"""Configuration package exports."""

from .loader import ConfigError, ConfigLocator, ConfigRepository, apply_env_overrides
from .models import (
    AppConfig,
    DiscordConfig,
    LoggingConfig,
    SourceConfig,
    SourceSelectors,
)

__all__ = [
    "AppConfig",
    "ConfigError",
    "ConfigLocator",
    "ConfigRepository",
    "DiscordConfig",
    "LoggingConfig",
    "SourceConfig",
    "SourceSelectors",
    "apply_env_overrides",
]

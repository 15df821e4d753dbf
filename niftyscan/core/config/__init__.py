"""Configuration management module."""

from niftyscan.core.config.settings import (
    ChartinkConfig,
    ConfigManager,
    EmailConfig,
    EnrichmentConfig,
    LoggingConfig,
    MarketConfig,
    NiftyScanConfig,
    SchedulerConfig,
    ServerConfig,
    load_config_from_env,
    validate_config,
)

__all__ = [
    "ConfigManager",
    "NiftyScanConfig",
    "ChartinkConfig",
    "MarketConfig",
    "EnrichmentConfig",
    "EmailConfig",
    "SchedulerConfig",
    "ServerConfig",
    "LoggingConfig",
    "load_config_from_env",
    "validate_config",
]

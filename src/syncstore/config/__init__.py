"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_int, optional_env_str, optional_env_tuple
from .errors import ConfigurationError, InvalidConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .pricing import PricingConfig, get_pricing_config
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)
from .sync import SyncConfig, get_sync_config
from .validation import ValidationConfig, get_validation_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "InvalidConfigurationError",
    "PricingConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "SyncConfig",
    "ValidationConfig",
    "configure_logging",
    "get_database_config",
    "get_database_uri",
    "get_pricing_config",
    "get_storage_config",
    "get_sync_config",
    "get_validation_config",
    "optional_env_int",
    "optional_env_str",
    "optional_env_tuple",
]

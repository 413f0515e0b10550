"""
Configuration package for the allocation engine.

Contains:
- settings: Environment-based configuration
- retry_policies: Retry configurations for data provider calls
- logging_config: Root logger and Datadog forwarding setup
"""

from talent_allocation.config.settings import Settings, get_settings, load_settings_from_env
from talent_allocation.config.retry_policies import (
    RetryConfig,
    create_custom_retry_policy,
    get_no_retry_policy,
    get_persistence_retry_policy,
    get_provider_retry_policy,
)
from talent_allocation.config.logging_config import DatadogLogHandler, setup_logging

__all__ = [
    "Settings",
    "get_settings",
    "load_settings_from_env",
    "RetryConfig",
    "create_custom_retry_policy",
    "get_no_retry_policy",
    "get_persistence_retry_policy",
    "get_provider_retry_policy",
    "DatadogLogHandler",
    "setup_logging",
]

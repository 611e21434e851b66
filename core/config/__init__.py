"""
Runtime Configuration Module

Provides configuration loading and management for allow-list commitments
and transfer signing.
"""

from .runtime import (
    ApiConfig,
    LoggingConfig,
    RuntimeConfig,
    SigningDomainConfig,
    StorageConfig,
    TreeConfig,
    get_default_config,
    set_default_config,
)

__all__ = [
    "ApiConfig",
    "LoggingConfig",
    "RuntimeConfig",
    "SigningDomainConfig",
    "StorageConfig",
    "TreeConfig",
    "get_default_config",
    "set_default_config",
]

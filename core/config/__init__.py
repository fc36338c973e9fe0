"""
Runtime Configuration Module

Provides configuration loading and management for Lean IMT tooling.
"""

from .runtime import (
    ENV_PREFIX,
    LoggingConfig,
    RuntimeConfig,
    TreeConfig,
    get_default_config_template,
)

__all__ = [
    "ENV_PREFIX",
    "LoggingConfig",
    "RuntimeConfig",
    "TreeConfig",
    "get_default_config_template",
]

"""Application configuration helpers."""

from __future__ import annotations

from .authorization import get_denied_action
from .env import float_env_var, optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging
from .salesforce import PasswordCredentials, SalesforceConfig, get_salesforce_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "PasswordCredentials",
    "SalesforceConfig",
    "StorageConfig",
    "configure_logging",
    "float_env_var",
    "get_database_config",
    "get_denied_action",
    "get_salesforce_config",
    "get_storage_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]

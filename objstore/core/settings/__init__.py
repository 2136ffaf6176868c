"""Pydantic Settings v2 configuration.

Settings are split by domain (storage, logging), frozen once loaded, and
read from init kwargs, environment variables and an optional .env file.

Import settings via cached loaders:
    from objstore.core.settings import get_storage_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables (STORAGE_*, LOG_*)
    3. .env file
"""

from __future__ import annotations

from .loader import clear_all_caches, get_logging_settings, get_storage_settings
from .logs import LoggingSettings
from .storage import DEFAULT_PRESIGNED_URL_EXPIRY_SECONDS, StorageSettings

__all__ = [
    "DEFAULT_PRESIGNED_URL_EXPIRY_SECONDS",
    "LoggingSettings",
    "StorageSettings",
    "clear_all_caches",
    "get_logging_settings",
    "get_storage_settings",
]

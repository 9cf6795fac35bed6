"""
App package - Application configuration and core utilities.
Contains settings, exceptions, and foundational application code.
"""

from app.config import settings, Settings, StorageMode
from app.exceptions import (
    ServiceValidationError,
    NotFoundError,
    UnauthorizedError,
    ConfigurationError,
    StorageError,
    LocalStorageFullError,
    RemoteQuotaError,
    SchemaMissingError,
    AccessDeniedError,
    RemoteStorageError,
    MigrationError,
    classify_remote_error,
)

__all__ = [
    "settings",
    "Settings",
    "StorageMode",
    "ServiceValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ConfigurationError",
    "StorageError",
    "LocalStorageFullError",
    "RemoteQuotaError",
    "SchemaMissingError",
    "AccessDeniedError",
    "RemoteStorageError",
    "MigrationError",
    "classify_remote_error",
]

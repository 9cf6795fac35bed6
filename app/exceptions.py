from typing import Any, Mapping, Optional


class ServiceValidationError(Exception):
    """Raised when input data is invalid or a precondition for a service call is not met.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, validation info)
        code: optional machine-readable error code
        http_status: suggested HTTP status code for handlers (400)
    """

    http_status = 400

    def __init__(self, message: str = "Invalid input", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class NotFoundError(Exception):
    """Raised when a requested resource was not found.

    Attributes are similar to ServiceValidationError. http_status is 404.
    """

    http_status = 404

    def __init__(self, message: str = "Not found", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class UnauthorizedError(Exception):
    """Raised when no user is signed in for an operation that needs one.

    Attributes are similar to ServiceValidationError. http_status is 401.
    """

    http_status = 401

    def __init__(self, message: str = "Unauthorized", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class ConfigurationError(Exception):
    """Raised when the runtime setup does not allow an operation (wrong backend mode, etc).

    http_status is 409.
    """

    http_status = 409

    def __init__(self, message: str = "Invalid configuration", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = "configuration"):
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Storage error taxonomy
# ---------------------------------------------------------------------------


class StorageError(Exception):
    """Base for every user-facing persistence failure.

    Attributes:
        message: human-readable message shown to the user
        details: optional mapping with extra context (operation, raw backend text)
        code: machine-readable kind
        retryable: whether retrying without user action can succeed
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_message = "Storage operation failed"
    default_code = "storage_error"
    retryable = False

    def __init__(self, message: Optional[str] = None, details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {
            "message": self.message,
            "code": self.code,
            "retryable": self.retryable,
        }
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class LocalStorageFullError(StorageError):
    """The device-local store hit its capacity. Never retried automatically."""

    http_status = 507
    default_code = "local_storage_full"
    default_message = (
        "Local Storage Full: your local history (with photos) has reached the "
        "storage limit. Delete some old entries or connect a cloud backend."
    )
    retryable = False


class RemoteQuotaError(StorageError):
    """The remote backend reported a plan or usage limit."""

    http_status = 507
    default_code = "remote_quota_exceeded"
    default_message = (
        "Cloud Quota Reached: your cloud storage limit has been exceeded. "
        "Try deleting old entries."
    )
    retryable = True


class SchemaMissingError(StorageError):
    """An expected remote table or column does not exist."""

    http_status = 503
    default_code = "schema_missing"
    default_message = (
        "Database Setup Required: the meal log tables are missing in the cloud "
        "database. Run the setup script before saving."
    )
    retryable = False


class AccessDeniedError(StorageError):
    """The backend's access-control rules rejected the operation."""

    http_status = 403
    default_code = "access_denied"
    default_message = (
        "Permission Denied: the database access policies are blocking this "
        "operation. Authenticated users need read and write access."
    )
    retryable = False


class RemoteStorageError(StorageError):
    """Any remote failure that does not match a known fingerprint."""

    http_status = 502
    default_code = "remote_failure"
    default_message = "Cloud Save Failed"
    retryable = True


class MigrationError(Exception):
    """Raised when moving local data to the remote backend stops part way.

    details carries ``item_index`` (1-based index of the first entry in the
    failing batch) and ``batch`` so the caller can tell the user where it stopped.
    """

    http_status = 502

    def __init__(self, message: str = "Sync failed", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = "migration_failed", cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code
        self.cause = cause

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


# SQLSTATE classes (PostgreSQL): 42P01 undefined_table, 42703 undefined_column,
# 42501 insufficient_privilege, 53xxx insufficient_resources, 54000 program_limit.
_SCHEMA_SQLSTATES = {"42P01", "42703", "3F000"}
_ACCESS_SQLSTATES = {"42501", "28000"}
_QUOTA_SQLSTATES = {"53100", "53200", "53400", "54000"}

_QUOTA_MARKERS = ("quota", "limit", "tier", "disk full", "database or disk is full")
_SCHEMA_MARKERS = (
    "relation",
    "column",
    "does not exist",
    "no such table",
    "no such column",
    "undefined table",
)
_ACCESS_MARKERS = (
    "policy",
    "permission",
    "row-level security",
    "access denied",
    "not authorized",
    "readonly database",
)


def _backend_message(exc: BaseException) -> str:
    # SQLAlchemy wraps the driver exception; its own str() includes the SQL text,
    # which must not be fingerprinted (a statement may contain LIMIT).
    orig = getattr(exc, "orig", None)
    source = orig if orig is not None else exc
    return str(getattr(source, "message", None) or source or "")


def _sqlstate(exc: BaseException) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    for candidate in (orig, exc):
        if candidate is None:
            continue
        code = getattr(candidate, "pgcode", None) or getattr(candidate, "sqlstate", None)
        if code:
            return str(code)
    return None


def classify_remote_error(exc: BaseException, operation: str) -> StorageError:
    """Map a remote backend failure onto one of the four remote error kinds."""
    if isinstance(exc, StorageError):
        return exc

    raw = _backend_message(exc)
    low = raw.lower()
    state = _sqlstate(exc)
    details = {"operation": operation, "backend_message": raw}
    if state:
        details["sqlstate"] = state

    if state in _SCHEMA_SQLSTATES:
        return SchemaMissingError(details=details)
    if state in _ACCESS_SQLSTATES:
        return AccessDeniedError(details=details)
    if state in _QUOTA_SQLSTATES:
        return RemoteQuotaError(details=details)

    if any(marker in low for marker in _QUOTA_MARKERS):
        return RemoteQuotaError(details=details)
    if any(marker in low for marker in _SCHEMA_MARKERS):
        return SchemaMissingError(details=details)
    if any(marker in low for marker in _ACCESS_MARKERS):
        return AccessDeniedError(details=details)

    return RemoteStorageError(f"Cloud Save Failed: {raw}", details=details)

"""
Error taxonomy and classification tests.

This test suite covers how backend failures reach callers:
- SQLSTATE codes take priority over message text
- Driver message fingerprints (quota, schema, access)
- SQL statement text is never fingerprinted
- Unknown failures become the retryable generic remote error
- Every kind carries a code, retryable flag and HTTP status
"""

import pytest
from sqlalchemy.exc import OperationalError, ProgrammingError

from app.exceptions import (
    AccessDeniedError,
    ConfigurationError,
    LocalStorageFullError,
    MigrationError,
    RemoteQuotaError,
    RemoteStorageError,
    SchemaMissingError,
    StorageError,
    classify_remote_error,
)


class FakeDriverError(Exception):
    """Stands in for a psycopg2 error carrying a SQLSTATE"""

    def __init__(self, message: str, pgcode: str = None):
        super().__init__(message)
        self.pgcode = pgcode


def wrapped(message: str, pgcode: str = None, statement: str = "SELECT 1"):
    return ProgrammingError(statement, {}, FakeDriverError(message, pgcode))


# =============================================================================
# SQLSTATE CLASSIFICATION
# =============================================================================


@pytest.mark.parametrize(
    "pgcode, expected",
    [
        ("42P01", SchemaMissingError),
        ("42703", SchemaMissingError),
        ("42501", AccessDeniedError),
        ("53100", RemoteQuotaError),
        ("54000", RemoteQuotaError),
    ],
)
def test_sqlstate_decides_kind(pgcode, expected):
    error = classify_remote_error(wrapped("something odd happened", pgcode), "Save Entry")

    assert isinstance(error, expected)
    assert error.details["sqlstate"] == pgcode
    assert error.details["operation"] == "Save Entry"


def test_sqlstate_wins_over_message_text():
    # Message mentions a column, but the code says permissions
    error = classify_remote_error(
        wrapped('permission denied for column "calories"', "42501"), "Save Entry"
    )
    assert isinstance(error, AccessDeniedError)


# =============================================================================
# MESSAGE FINGERPRINTS
# =============================================================================


@pytest.mark.parametrize(
    "message, expected",
    [
        ("Storage quota exceeded for project", RemoteQuotaError),
        ("free tier row limit reached", RemoteQuotaError),
        ("database or disk is full", RemoteQuotaError),
        ('relation "food_entries" does not exist', SchemaMissingError),
        ("no such table: daily_summaries", SchemaMissingError),
        ("new row violates row-level security policy", AccessDeniedError),
        ("attempt to write a readonly database", AccessDeniedError),
    ],
)
def test_driver_message_fingerprints(message, expected):
    error = classify_remote_error(OperationalError("INSERT ...", {}, Exception(message)), "op")
    assert isinstance(error, expected)


def test_sql_text_is_not_fingerprinted():
    """
    Verifies:
    - A LIMIT clause in the failing statement does not look like a quota error
    - The unknown failure keeps the backend text in its message
    """
    error = classify_remote_error(
        OperationalError(
            "SELECT id FROM food_entries ORDER BY timestamp DESC LIMIT 200",
            {},
            Exception("server closed the connection unexpectedly"),
        ),
        "Fetch Entries",
    )

    assert type(error) is RemoteStorageError
    assert error.retryable is True
    assert error.message == "Cloud Save Failed: server closed the connection unexpectedly"


def test_already_classified_error_passes_through():
    original = SchemaMissingError()
    assert classify_remote_error(original, "op") is original


# =============================================================================
# ERROR KINDS
# =============================================================================


@pytest.mark.parametrize(
    "error_cls, retryable, status",
    [
        (LocalStorageFullError, False, 507),
        (RemoteQuotaError, True, 507),
        (SchemaMissingError, False, 503),
        (AccessDeniedError, False, 403),
        (RemoteStorageError, True, 502),
    ],
)
def test_error_kind_contract(error_cls, retryable, status):
    error = error_cls()

    assert isinstance(error, StorageError)
    assert error.retryable is retryable
    assert error.http_status == status
    assert error.message
    assert error.to_dict()["code"] == error_cls.default_code


def test_local_full_message_is_distinct_from_remote_quota():
    assert "Local Storage Full" in str(LocalStorageFullError())
    assert "Cloud Quota" in str(RemoteQuotaError())


def test_migration_and_configuration_errors_to_dict():
    cause = RemoteQuotaError()
    error = MigrationError("Sync failed at item 6", details={"item_index": 6}, cause=cause)

    assert error.cause is cause
    assert error.to_dict() == {
        "message": "Sync failed at item 6",
        "code": "migration_failed",
        "details": {"item_index": 6},
    }
    assert ConfigurationError("Must be in cloud mode to sync.").http_status == 409

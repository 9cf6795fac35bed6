"""
Domain mappers package.
Handles transformation between backend rows and DTOs (Data Transfer Objects).
"""

from domain.mappers.entry_mapper import (
    EntryMapper,
    FULL_COLUMNS,
    LITE_COLUMNS,
    AGGREGATE_COLUMNS,
    PROFILE_FIELDS,
    summary_id,
)

__all__ = [
    "EntryMapper",
    "FULL_COLUMNS",
    "LITE_COLUMNS",
    "AGGREGATE_COLUMNS",
    "PROFILE_FIELDS",
    "summary_id",
]

"""
Services package - Business logic layer.
"""

from services.food_log_service import FoodLogService
from services.summary_service import SummaryService, merge_summaries
from services.cleanup_service import CleanupService
from services.migration_service import MigrationService

__all__ = [
    "FoodLogService",
    "SummaryService",
    "merge_summaries",
    "CleanupService",
    "MigrationService",
]

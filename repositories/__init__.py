"""
Repositories package - Data access layer.
"""

from repositories.base import FoodLogRepository
from repositories.local_repository import LocalFoodLogRepository
from repositories.remote_repository import RemoteFoodLogRepository

__all__ = [
    "FoodLogRepository",
    "LocalFoodLogRepository",
    "RemoteFoodLogRepository",
]

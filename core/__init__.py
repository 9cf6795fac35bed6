"""
Core package - Shared infrastructure.
Contains the read cache, the service base class, and storage wiring.
"""

from core.cache import TTLCache, CacheKeys, cached

__all__ = [
    "TTLCache",
    "CacheKeys",
    "cached",
]

"""API routes package"""

from . import entries, summaries, settings, sync, health

__all__ = ["entries", "summaries", "settings", "sync", "health"]

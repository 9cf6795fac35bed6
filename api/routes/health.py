"""Health check and utility routes"""

from fastapi import APIRouter, Depends

from api.dependencies import get_container
from core.dependencies import StorageContainer

router = APIRouter(tags=["Health"])


@router.get("/health-check")
def health_check(container: StorageContainer = Depends(get_container)):
    """Basic health check endpoint"""
    return {
        "status": "ok",
        "service": container.settings.app_name,
        "backend": container.repository.backend_name,
    }


@router.get("/cache/stats")
def cache_stats(container: StorageContainer = Depends(get_container)):
    """Number and names of live cache keys"""
    return container.cache.stats()

"""Local-to-cloud sync, archival and schema diagnostics routes"""

import logging

from fastapi import APIRouter, Depends

from api.dependencies import get_cleanup, get_food_log, get_migration
from domain.schemas import CleanupReport, LocalDataStatus, MigrationStatus, SchemaCheckResult
from services import CleanupService, FoodLogService, MigrationService

router = APIRouter(prefix="/sync", tags=["Sync"])
logger = logging.getLogger("snapcal.api.sync")


@router.get("/local-data", response_model=LocalDataStatus)
async def local_data_status(service: MigrationService = Depends(get_migration)):
    """Whether the device still holds entries that were never uploaded"""
    return await service.local_data_status()


@router.post("/migrate", response_model=MigrationStatus)
async def sync_local_data_to_remote(service: MigrationService = Depends(get_migration)):
    """Upload every local entry, settings and profile, then clear local data"""
    return await service.sync_local_data_to_remote()


@router.get("/status", response_model=MigrationStatus)
async def migration_status(service: MigrationService = Depends(get_migration)):
    return service.status


@router.post("/cleanup", response_model=CleanupReport)
async def perform_data_cleanup(service: CleanupService = Depends(get_cleanup)):
    """Run the archival sweep for the caller now; failures are reported, not raised"""
    report = await service.perform_data_cleanup()
    logger.info(f"Cleanup archived {len(report.archived_dates)} dates")
    return report


@router.get("/schema", response_model=SchemaCheckResult)
async def check_database_schema(service: FoodLogService = Depends(get_food_log)):
    return await service.check_database_schema()

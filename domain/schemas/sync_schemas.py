from pydantic import BaseModel
from typing import Optional

from domain.enums import MigrationState


class SchemaCheckResult(BaseModel):
    """Whether the remote tables the app needs are present"""

    ok: bool
    missing_tables: bool = False
    error: Optional[str] = None


class MigrationStatus(BaseModel):
    state: MigrationState = MigrationState.IDLE
    batch_index: int = 0  # 1-based batch currently (or last) uploading
    total_batches: int = 0
    uploaded_entries: int = 0
    reason: Optional[str] = None


class LocalDataStatus(BaseModel):
    has_local_data: bool
    entry_count: int

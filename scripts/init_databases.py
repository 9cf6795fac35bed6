#!/usr/bin/env python3
"""
Initialize the remote meal log database
Creates the food_entries, daily_summaries, user_settings and user_profiles
tables, then verifies them the same way the app's schema health check does.
"""

import sys
import logging
from pathlib import Path
from typing import Optional

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import inspect

logger = logging.getLogger("snapcal.init_databases")


def init_remote(url: str) -> bool:
    """Create the meal log tables and list what exists afterwards"""
    logger.info("=" * 60)
    logger.info("Initializing remote database...")
    logger.info("=" * 60)

    from domain.models import create_remote_engine, init_database

    engine = create_remote_engine(url)
    try:
        init_database(engine)
        tables = inspect(engine).get_table_names()
        logger.info(f"✓ Found {len(tables)} tables: {', '.join(sorted(tables))}")

        from repositories.remote_repository import REQUIRED_TABLES

        missing = [m.__tablename__ for m in REQUIRED_TABLES if m.__tablename__ not in tables]
        if missing:
            logger.error(f"✗ Tables still missing: {', '.join(missing)}")
            return False
        return True
    except Exception as e:
        logger.exception(f"✗ Failed to initialize remote database: {e}")
        return False
    finally:
        engine.dispose()


def main(url: Optional[str] = None) -> int:
    """Run the initialization; returns a process exit code"""
    from app.config import settings

    url = url or settings.remote_database_url
    if not url:
        logger.error("✗ REMOTE_DATABASE_URL is not set; nothing to initialize")
        return 1

    if init_remote(url):
        logger.info("✓ Remote database ready")
        return 0
    logger.error("✗ Remote database initialization failed")
    return 1


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else None))

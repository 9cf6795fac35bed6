"""
Database configuration and session management for the remote backend.
"""

import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger("snapcal.database")

# Create SQLAlchemy Base
Base = declarative_base()


def create_remote_engine(url: str, echo: bool = False) -> Engine:
    """Create the engine for the remote backend.

    In-memory SQLite URLs get a single shared connection so worker threads
    see the same database.
    """
    if url.startswith("sqlite") and (":memory:" in url or url.rstrip("/") == "sqlite:"):
        return create_engine(
            url,
            echo=echo,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, echo=echo, future=True, pool_pre_ping=True)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create session factory bound to ``engine``"""
    return sessionmaker(bind=engine, future=True, expire_on_commit=False)


def init_database(engine: Engine, tables: Optional[list] = None):
    """Initialize database schema"""
    with engine.begin() as conn:
        Base.metadata.create_all(bind=conn, tables=tables)
        logger.info("Database tables created successfully")

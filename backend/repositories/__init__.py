"""
Repository Pattern - Storage abstraction layer

Repositories hide storage details (PostgreSQL) from the search engine.
Consumers work with domain models and plain ID lists, not asyncpg records.

Storage Split:
- CalibrationRepository: calibrations, fossils, images, age/era search
- PhylogenyRepository: taxonomy names, multitree procedures, tree links
"""
import asyncpg

from config import create_postgres_pool

from .calibration_repository import CalibrationRepository
from .phylogeny_repository import PhylogenyRepository

# Shared database connection pool (initialized on first use)
db_pool = None


async def get_db_pool() -> asyncpg.Pool:
    """Get or create shared database connection pool"""
    global db_pool
    if db_pool is None:
        db_pool = await create_postgres_pool()
    return db_pool


async def close_db_pool():
    """Close the shared pool (application shutdown)"""
    global db_pool
    if db_pool is not None:
        await db_pool.close()
        db_pool = None


__all__ = [
    'CalibrationRepository',
    'PhylogenyRepository',
    'db_pool',
    'get_db_pool',
    'close_db_pool',
]

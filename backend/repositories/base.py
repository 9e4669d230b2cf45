"""
Base repository - shared query plumbing over the asyncpg pool

All store access in the search engine goes through these helpers, so
every query is parameterized and every driver failure surfaces as an
UpstreamError instead of a raw asyncpg exception.
"""
import asyncio
import logging
from typing import Any, List, Optional

import asyncpg

from services.errors import UpstreamError

logger = logging.getLogger(__name__)

# Failures of the store or the connection to it
STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


class PostgresRepository:
    """Read-only repository over a shared asyncpg pool."""

    def __init__(self, db_pool: asyncpg.Pool):
        self.db_pool = db_pool

    async def _fetch(self, operation: str, query: str, *args) -> List[asyncpg.Record]:
        """Run a parameterized query and return all rows"""
        try:
            async with self.db_pool.acquire() as conn:
                return await conn.fetch(query, *args)
        except STORE_ERRORS as e:
            logger.error(f"❌ {operation} failed: {e}")
            raise UpstreamError(f"{operation} failed: {e}") from e

    async def _fetchrow(self, operation: str, query: str, *args) -> Optional[asyncpg.Record]:
        """Run a parameterized query and return the first row (or None)"""
        try:
            async with self.db_pool.acquire() as conn:
                return await conn.fetchrow(query, *args)
        except STORE_ERRORS as e:
            logger.error(f"❌ {operation} failed: {e}")
            raise UpstreamError(f"{operation} failed: {e}") from e

    async def _fetchval(self, operation: str, query: str, *args) -> Any:
        """Run a parameterized query and return the first column of the first row"""
        try:
            async with self.db_pool.acquire() as conn:
                return await conn.fetchval(query, *args)
        except STORE_ERRORS as e:
            logger.error(f"❌ {operation} failed: {e}")
            raise UpstreamError(f"{operation} failed: {e}") from e

"""Async Postgres connection pool using asyncpg."""
from __future__ import annotations

import json
import logging
from typing import Optional

import asyncpg

from ..errors import StoreError
from ..settings import settings

logger = logging.getLogger(__name__)

_pool: Optional[asyncpg.Pool] = None


async def _init_connection(conn) -> None:
    # jsonb columns (product images/metadata) round-trip as Python objects
    await conn.set_type_codec(
        "jsonb", encoder=json.dumps, decoder=json.loads, schema="pg_catalog"
    )


async def get_pool() -> asyncpg.Pool:
    """Return (and lazily create) the asyncpg connection pool."""
    global _pool
    if _pool is None:
        if not settings.database_url:
            raise StoreError(
                "DATABASE_URL is not set. "
                "Postgres is required."
            )
        _pool = await asyncpg.create_pool(
            dsn=settings.database_url,
            min_size=settings.db_pool_min,
            max_size=settings.db_pool_max,
            init=_init_connection,
        )
        logger.info("postgres pool ready (min=%s max=%s)", settings.db_pool_min, settings.db_pool_max)
    return _pool


async def close_pool() -> None:
    """Shut down the connection pool (call on app shutdown)."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None

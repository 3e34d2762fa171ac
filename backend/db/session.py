"""Async engine and sessions for the map configuration datastore."""

import logging
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from core.config import DATABASE_URL

logger = logging.getLogger(__name__)

ASYNC_DRIVER = "postgresql+psycopg://"
_SYNC_SCHEMES = ("postgis://", "postgresql://", "postgres://")


def make_async_url(url: str) -> Optional[str]:
    """Rewrite a PostgreSQL URL to use the async psycopg driver.

    Returns None for SQLite, which the store does not support.
    """
    for scheme in _SYNC_SCHEMES:
        if url.startswith(scheme):
            return ASYNC_DRIVER + url[len(scheme):]
    if url.startswith("sqlite"):
        return None
    return url


engine: Optional[AsyncEngine] = None
AsyncSessionLocal = None

if DATABASE_URL:
    async_url = make_async_url(DATABASE_URL)
    if async_url:
        engine = create_async_engine(async_url, echo=False, pool_pre_ping=True)
        AsyncSessionLocal = sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
    else:
        logger.warning("DATABASE_URL scheme is not supported; map configs are unavailable")
else:
    logger.info("DATABASE_URL not set; map configuration endpoints will return 500")


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a read session for the map_configs tables."""
    if AsyncSessionLocal is None:
        raise RuntimeError("Map configuration datastore is not configured; set DATABASE_URL")
    async with AsyncSessionLocal() as session:
        yield session


async def dispose_engine() -> None:
    """Close pooled connections on shutdown."""
    if engine is not None:
        await engine.dispose()

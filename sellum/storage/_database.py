"""
Database setup.

    session_factory, engine = await create_database(settings.database_url)
"""

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from sellum.logging_config import get_logger
from sellum.storage._tables import Base

log = get_logger(__name__)


def _engine(url: str) -> AsyncEngine:
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:"):
        # An in-memory database lives inside one connection; every session must share it.
        return create_async_engine(url, poolclass=StaticPool)
    return create_async_engine(url)


async def create_database(
    url: str,
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Connect, create missing tables, and hand back `(session_factory, engine)`."""
    engine = _engine(url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    log.debug(f"Schema ready on {engine.url.render_as_string(hide_password=True)}")
    # Rows are mapped to domain objects after commit, so they must stay loaded.
    return async_sessionmaker(engine, expire_on_commit=False), engine


__all__ = ("create_database",)

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool
from sqlmodel.ext.asyncio.session import AsyncSession

from pitchdeck.core.config import settings

logger = logging.getLogger(__name__)

# Pool configuration for managed Postgres
DB_POOL_SIZE = 5
MAX_OVERFLOW = 10
POOL_RECYCLE = 300  # Recycle connections after 5 minutes
POOL_PRE_PING = True  # Check connection health before using


def build_engine(database_uri: str) -> AsyncEngine:
    """Pooled engine for Postgres; SQLite (local runs, tests) keeps the driver's default pool."""
    url = make_url(database_uri)
    if url.get_backend_name() == "sqlite":
        return create_async_engine(url, echo=False)

    logger.debug("Creating pooled engine for %s", url.render_as_string(hide_password=True))
    return create_async_engine(
        url,
        echo=False,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=DB_POOL_SIZE,
        max_overflow=MAX_OVERFLOW,
        pool_recycle=POOL_RECYCLE,
        pool_pre_ping=POOL_PRE_PING,
    )


engine = build_engine(str(settings.ASYNC_DATABASE_URI))

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request, committed on success."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

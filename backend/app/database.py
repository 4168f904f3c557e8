"""
Recipe Book Backend — Database Session Management
==================================================

What:  Async SQLAlchemy engine, session factory, FastAPI dependency, and
       lifecycle helpers (startup ping, health probe, shutdown dispose).
Why:   The store connection is a process-wide, long-lived resource. It is
       opened once, handed to each request as a session, and closed on
       shutdown.
How:   One engine (connection pool) per process. Each request gets its own
       AsyncSession that commits on success and rolls back on error.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20, max_overflow=10, pool_pre_ping, pool_recycle=3600.
    SQLite (tests, local hacking) uses SQLAlchemy's default pool for the
    dialect, which rejects the sizing arguments, so they are omitted there.
"""

import logging
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from tenacity import (
    before_sleep_log,
    retry,
    stop_after_attempt,
    wait_exponential_jitter,
)

from app.config import Settings, settings

logger = logging.getLogger(__name__)


# ── Engine Configuration ──────────────────────────────────────────────────
def build_engine(config: Settings) -> AsyncEngine:
    """Create the async engine with dialect-appropriate pool options."""
    kwargs = {
        "pool_pre_ping": config.db_pool_pre_ping,
        "echo": config.log_level == "DEBUG",
    }
    if not config.is_sqlite:
        kwargs.update(
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_recycle=3600,
        )
    if "+asyncpg" in config.database_url:
        kwargs["connect_args"] = {"timeout": config.db_connect_timeout}
    return create_async_engine(config.database_url, **kwargs)


engine = build_engine(settings)

# expire_on_commit=False: response models are built from ORM objects after
# the handler returns; expired attributes would trigger IO outside the session.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models (shared metadata for Alembic)."""
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handler
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/api/recipes")
        async def list_recipes(db: AsyncSession = Depends(get_db_session)):
            return await recipe_service.list_all(db)
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def check_database() -> bool:
    """
    Lightweight connectivity probe used by GET /health.

    Returns False instead of raising so the health endpoint can report
    "disconnected" while still answering 200.
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning("Health check: database unreachable: %s", str(e))
        return False


@retry(
    stop=stop_after_attempt(settings.db_connect_max_attempts),
    wait=wait_exponential_jitter(
        initial=settings.retry_min_wait,
        max=settings.retry_max_wait,
        jitter=1,
    ),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def connect_database() -> None:
    """
    Open the pool and verify the database answers before serving traffic.

    When:    Once, from the application lifespan.
    Raises:  The last driver error after all attempts; the lifespan lets it
             propagate so the server refuses to start.
    """
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info("Connected to database (%s)", engine.url.render_as_string(hide_password=True))


async def dispose_engine() -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()

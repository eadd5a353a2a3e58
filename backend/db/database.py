"""SQLAlchemy async database setup and engine configuration."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.config import get_settings

settings = get_settings()


def create_db_engine(database_url: str = None) -> AsyncEngine:
    """Create and configure async SQLAlchemy engine.

    Postgres gets a pooled engine; SQLite (development and tests) uses the
    driver defaults.
    """
    url = database_url or settings.DATABASE_URL
    kwargs = dict(echo=settings.SQLALCHEMY_ECHO)
    if not url.startswith("sqlite"):
        kwargs.update(
            pool_pre_ping=True,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
        )
    return create_async_engine(url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Create async session factory bound to ``engine``."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# Global engine and session factory instances
engine = create_db_engine()
AsyncSessionLocal = create_session_factory(engine)


async def create_tables(bind: AsyncEngine) -> None:
    """Create every registered table on ``bind``."""
    from db.base import Base
    import db.models  # noqa: F401  registers the mappers

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_db():
    """Initialize database tables.

    This should be called once at application startup.
    """
    await create_tables(engine)


async def close_db():
    """Close database connections.

    This should be called at application shutdown.
    """
    await engine.dispose()

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from libs.common.config import Settings, get_settings

settings = get_settings()


def engine_options(settings: Settings) -> dict:
    """Build engine keyword arguments for the configured database."""
    options = {
        "echo": settings.SQL_ECHO,
        "future": True,
        "pool_pre_ping": True,  # Test connections before using
    }
    # SQLite (tests, local tooling) does not take queue pool sizing
    if not settings.DATABASE_URL.startswith("sqlite"):
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
        )
    return options


engine = create_async_engine(settings.DATABASE_URL, **engine_options(settings))

AsyncSessionLocal = async_sessionmaker(
    bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

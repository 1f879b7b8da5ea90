"""Database configuration and connection management."""

from typing import AsyncGenerator

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from campus_connect import config


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""

    pass


# Create async engine; command_timeout bounds every statement on asyncpg
engine = create_async_engine(
    config.DATABASE_URL,
    echo=config.SQL_DEBUG,
    future=True,
    pool_pre_ping=True,
    connect_args={"command_timeout": config.DB_COMMAND_TIMEOUT},
)

# Create session factory
AsyncSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


def pair_lock_key(scope: str, user_a: str, user_b: str) -> str:
    """Key shared by both orderings of the same user pair."""
    first, second = sorted((user_a, user_b))
    return f"{scope}:{first}:{second}"


async def lock_user_pair(
    session: AsyncSession, scope: str, user_a: str, user_b: str
) -> None:
    """Take a transaction-scoped advisory lock on an unordered user pair.

    Released automatically on commit or rollback.
    """
    key = pair_lock_key(scope, user_a, user_b)
    await session.execute(
        select(func.pg_advisory_xact_lock(func.hashtextextended(key, 0)))
    )


async def init_db() -> None:
    """Initialize database connection on startup."""
    # Schema is owned by alembic migrations
    pass


async def close_db() -> None:
    """Close database connections on shutdown."""
    await engine.dispose()

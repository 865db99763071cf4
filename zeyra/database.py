"""Database setup with SQLAlchemy async."""

from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from zeyra.config import get_settings

settings = get_settings()

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
    pool_size=5,
    max_overflow=10,
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def check_db_ready() -> None:
    """
    Verify database connectivity and expected schema.

    Checks that the unit table and the sync log table exist.
    """
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))

        tables = await conn.execute(
            text(
                "SELECT "
                "to_regclass('public.maternity_units') AS maternity_units, "
                "to_regclass('public.sync_metadata') AS sync_metadata"
            )
        )
        row = tables.first()
        if row is None or any(value is None for value in row):
            missing = []
            if row is None or row.maternity_units is None:
                missing.append("maternity_units")
            if row is None or row.sync_metadata is None:
                missing.append("sync_metadata")

            raise RuntimeError(
                f"Database schema is missing tables: {', '.join(missing)} "
                "(run migrations)."
            )

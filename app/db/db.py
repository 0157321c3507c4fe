"""Database connection management using SQLModel with asyncpg / aiosqlite."""

from typing import AsyncGenerator, Optional
from urllib.parse import urlparse, urlunparse

from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from app.config.settings import settings
from app.config.logger import app_logger
from app.utils.errors import ConflictError, TransportError

_engine: Optional[AsyncEngine] = None
_session_maker: Optional[async_sessionmaker] = None


def get_db_url() -> str:
    """Get database URL for SQLAlchemy with an async driver."""
    db_url = settings.effective_database_url
    if not db_url:
        raise ValueError("DATABASE_URL not configured")
    if db_url.startswith("sqlite"):
        if db_url.startswith("sqlite://"):
            db_url = db_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return db_url

    # asyncpg takes SSL via connect_args, not the sslmode query parameter
    parsed = urlparse(db_url)
    query_parts = [p for p in parsed.query.split("&") if not p.startswith("sslmode=") and p]
    query = "&".join(query_parts)
    clean_url = urlunparse(
        (
            parsed.scheme,
            parsed.netloc,
            parsed.path,
            parsed.params,
            query,
            parsed.fragment,
        )
    )

    if clean_url.startswith("postgresql://"):
        clean_url = clean_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif clean_url.startswith("postgres://"):
        clean_url = clean_url.replace("postgres://", "postgresql+asyncpg://", 1)

    return clean_url


def build_engine(db_url: str) -> AsyncEngine:
    """Create an async engine with pool settings suited to the backend."""
    if db_url.startswith("sqlite"):
        return create_async_engine(db_url, echo=False)
    return create_async_engine(
        db_url,
        echo=False,
        pool_size=20,
        max_overflow=0,
        pool_pre_ping=True,
    )


async def create_tables(engine: AsyncEngine) -> None:
    # Import all models to register them with SQLModel
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def init_db() -> None:
    """Initialize the database engine and create tables."""
    global _engine, _session_maker

    db_url = get_db_url()
    app_logger.info("Initializing database connection")

    _engine = build_engine(db_url)
    _session_maker = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    await create_tables(_engine)
    app_logger.info("Database initialized successfully")


async def close_db() -> None:
    """Close the database engine."""
    global _engine, _session_maker

    if _engine:
        await _engine.dispose()
        _engine = None
        _session_maker = None
        app_logger.info("Database connection closed")


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get a database session."""
    if not _session_maker:
        raise TransportError("Database unavailable. The server has no initialized database connection.")

    async with _session_maker() as session:
        yield session


@asynccontextmanager
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Async context manager for startup tasks and scripts."""
    if not _session_maker:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    async with _session_maker() as session:
        yield session


async def flush_or_raise(session: AsyncSession, conflict_detail: str) -> None:
    """Flush pending writes, mapping store errors onto domain errors.

    A uniqueness violation becomes ConflictError; any other store failure
    becomes TransportError. The transaction is rolled back in both cases so no
    partial write survives.
    """
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        app_logger.warning(f"Integrity error, rolled back: {exc.orig}")
        raise ConflictError(conflict_detail) from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        app_logger.error(f"Database write failed, rolled back: {exc}")
        raise TransportError("Database write failed") from exc


async def commit_or_raise(session: AsyncSession, conflict_detail: str) -> None:
    """Commit the current transaction with the same error mapping as flush_or_raise."""
    await flush_or_raise(session, conflict_detail)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError(conflict_detail) from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        app_logger.error(f"Database commit failed, rolled back: {exc}")
        raise TransportError("Database commit failed") from exc


async def ping_database() -> tuple[bool, str]:
    """Run a lightweight health query against the database."""
    if not _engine or not _session_maker:
        return False, "Database not initialized"

    try:
        async with _session_maker() as session:
            result = await session.execute(text("SELECT 1"))
            row = result.scalar()
            if row == 1:
                return True, "Database connection healthy"
            return False, f"Unexpected response: {row}"
    except Exception as e:
        return False, f"Database query failed: {str(e)}"

"""Async database engine, session factory and declarative base."""

from typing import AsyncGenerator, Tuple

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from teachback.core.config import Settings


class Base(DeclarativeBase):
    pass


def create_database(
    settings: Settings,
) -> Tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """
    Create the async engine and session factory for the configured database.

    The sync DATABASE_URL is converted to the asyncpg driver with make_url.
    asyncpg does not understand libpq's ``sslmode`` query parameter, so it is
    moved into the ``ssl`` connect argument.

    Args:
        settings: Application settings

    Returns:
        Tuple of (engine, session factory)
    """
    url = make_url(settings.DATABASE_URL)
    connect_args = {}

    if url.drivername in ("postgresql", "postgres", "postgresql+psycopg2"):
        url = url.set(drivername="postgresql+asyncpg")

    if "sslmode" in url.query:
        connect_args["ssl"] = url.query["sslmode"]
        url = url.difference_update_query(["sslmode"])

    engine = create_async_engine(
        url,
        echo=False,
        connect_args=connect_args,
    )
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    return engine, session_factory


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get async database session for FastAPI dependency injection."""
    async with request.app.state.session_factory() as session:
        yield session

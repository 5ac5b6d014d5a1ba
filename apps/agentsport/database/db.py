"""
Async SQLAlchemy engine, session factory and declarative base for AgentSport.
"""

import os
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncSession,
    async_sessionmaker,
    AsyncEngine
)
from sqlalchemy.orm import DeclarativeBase
from dotenv import load_dotenv

load_dotenv()


def _default_database_url() -> str:
    """postgresql+asyncpg URL assembled from the POSTGRES_* variables."""
    user = os.getenv("POSTGRES_USER", "agentsport")
    password = os.getenv("POSTGRES_PASSWORD", "agentsport")
    host = os.getenv("POSTGRES_HOST", "localhost")
    port = os.getenv("POSTGRES_PORT", "5432")
    name = os.getenv("POSTGRES_DB", "agentsport")
    return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{name}"


# DATABASE_URL wins over the POSTGRES_* parts
DATABASE_URL = os.getenv("DATABASE_URL") or _default_database_url()

engine: AsyncEngine = create_async_engine(
    DATABASE_URL,
    echo=os.getenv("SQL_ECHO", "false").lower() == "true",
    pool_pre_ping=True,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    """Declarative base shared by every AgentSport model."""


# Registers the models on Base.metadata; must come after Base
from agentsport.database import models  # noqa: F401, E402


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session for FastAPI routes.

    Commits when the request finishes cleanly, rolls back if it raised.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_database():
    """Create any missing tables (local runs without migrations)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

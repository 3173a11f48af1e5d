import asyncio
import logging
import os
from typing import AsyncGenerator, Awaitable, TypeVar

from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from errors import InternalError

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

T = TypeVar("T")

DATABASE_URL = os.getenv("DATABASE_URL")

if not DATABASE_URL:
    raise ValueError("DATABASE_URL environment variable is not set")

SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")
STORE_TIMEOUT_SECONDS = float(os.getenv("STORE_TIMEOUT_SECONDS", "10"))

# Create engine
engine = create_async_engine(DATABASE_URL, echo=SQL_ECHO)


async def create_db_and_tables():
    """Create all tables in the database"""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session - used as FastAPI dependency"""
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


async def with_timeout(awaitable: Awaitable[T]) -> T:
    """
    Await a store round trip, bounded by STORE_TIMEOUT_SECONDS

    Raises:
        InternalError: If the store does not answer in time
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=STORE_TIMEOUT_SECONDS)
    except asyncio.TimeoutError as exc:
        logger.error("Store operation timed out after %.1fs", STORE_TIMEOUT_SECONDS)
        raise InternalError("Store operation timed out") from exc

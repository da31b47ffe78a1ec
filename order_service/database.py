from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from . import config
from .config import DATABASE_URL
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_engine_and_factory(url: str = DATABASE_URL, echo: bool = config.DATABASE_ECHO):
    """Builds the async engine plus a session factory bound to it."""
    try:
        logger.info(f"Attempting to create engine with URL: {url.replace(config.DATABASE_PASSWORD, '***')}") # Hide password
        engine = create_async_engine(url, echo=echo, pool_pre_ping=True)
        # expire_on_commit=False keeps loaded orders usable after the submission commits
        session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        logger.info("Async database engine and session factory created successfully.")
    except Exception as e:
        logger.error(f"FATAL: Failed to create database engine or session factory: {e}")
        raise RuntimeError(f"Could not initialize database connection: {e}") from e
    return engine, session_factory


async def create_tables(engine) -> None:
    """Creates missing tables. Development convenience only, not a migration tool."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables check complete.")

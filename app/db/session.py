import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from app.core.config import settings
from app.core.errors import TransientIOError

logger = logging.getLogger(__name__)

engine = create_async_engine(str(settings.DATABASE_URL))
AsyncSessionLocal = async_sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)

async def get_db():
    async with AsyncSessionLocal() as session:
        yield session

@asynccontextmanager
async def storage_errors():
    """
    Translate connectivity failures from the driver into TransientIOError.

    Integrity violations pass through untouched; callers translate those
    into domain errors themselves.
    """
    try:
        yield
    except OperationalError as e:
        logger.error(f"Database unavailable: {e}")
        raise TransientIOError("Storage temporarily unavailable") from e
    except DBAPIError as e:
        if e.connection_invalidated:
            logger.error(f"Database connection lost: {e}")
            raise TransientIOError("Storage connection lost") from e
        raise

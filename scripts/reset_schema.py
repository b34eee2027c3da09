import asyncio
import logging
from sqlmodel import SQLModel
from app.db.session import engine
from app import models  # noqa: F401

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

async def reset_schema():
    """
    Drop and recreate every table known to the models.
    """
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
    await engine.dispose()
    logger.info("Schema reset.")

if __name__ == "__main__":
    asyncio.run(reset_schema())

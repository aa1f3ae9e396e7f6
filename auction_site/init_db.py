#!/usr/bin/env python3
"""Create (or reset) the auction site tables and check the store is reachable."""
import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError

from auction_site.core.database import Database, database
from auction_site.core.errors import StoreUnavailableError
from auction_site.core.log import configure_logging

logger = logging.getLogger(__name__)


async def create_host(db: Database) -> None:
    """Drop every table and create the schema from scratch"""
    await db.connect()
    try:
        await db.drop_all()
        await db.create_all()
    except (SQLAlchemyError, OSError) as e:
        raise StoreUnavailableError(f"cannot initialise entity store: {e}") from e
    logger.info("Entity store initialised at %s", db.url)


async def load_host(db: Database) -> Database:
    """Connect to an existing store, failing fast when it cannot be reached"""
    await db.connect()
    await db.check()
    return db


async def main() -> None:
    configure_logging()
    logger.info("Initializing database...")
    try:
        await create_host(database)
    except StoreUnavailableError as e:
        logger.error("Database initialization failed: %s", e)
        return
    finally:
        await database.disconnect()
    logger.info("Database tables created successfully")


if __name__ == "__main__":
    asyncio.run(main())

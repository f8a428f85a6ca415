import logging
from databases import Database
from atrium.modules.config import (
    DEFAULT_DATABASE_URL,
    ConfigurationError,
    resolve_database_url,
    settings,
)

logger = logging.getLogger("atrium.database")


def _database_url() -> str:
    try:
        return resolve_database_url(settings)
    except ConfigurationError as e:
        logger.warning(f"{e} Falling back to {DEFAULT_DATABASE_URL}")
        return DEFAULT_DATABASE_URL


DATABASE_URL = _database_url()

# Create the database instance
database = Database(DATABASE_URL)


async def connect_to_db():
    await database.connect()
    logger.info("Address store connected")


async def disconnect_from_db():
    await database.disconnect()
    logger.info("Address store disconnected")


async def ping() -> bool:
    """Cheap liveness probe used by the health endpoint."""
    if not database.is_connected:
        return False
    try:
        await database.fetch_val("SELECT 1")
        return True
    except Exception as e:
        logger.warning(f"Database ping failed: {e}")
        return False

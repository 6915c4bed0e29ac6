# pocketpet/core/database.py
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pocketpet.core.settings import Settings
import structlog

log = structlog.get_logger(__name__)


class MongoDBConnection:
    client: Optional[AsyncIOMotorClient] = None
    db: Optional[AsyncIOMotorDatabase] = None


db_connection = MongoDBConnection()


async def connect_to_mongo(settings: Settings):
    if not settings.MONGO_CONNECTION_URI:
        raise RuntimeError("MONGO_CONNECTION_URI must be set for the mongo storage backend.")
    log.info("Connecting to MongoDB...", database=settings.MONGO_DATABASE_NAME)
    db_connection.client = AsyncIOMotorClient(settings.MONGO_CONNECTION_URI)
    db_connection.db = db_connection.client[settings.MONGO_DATABASE_NAME]
    try:
        # The ping command is cheap and does not require auth.
        await db_connection.client.admin.command('ping')
        log.info("Successfully connected to MongoDB.")
    except Exception as e:
        log.error("Failed to connect to MongoDB", error=str(e))
        raise


async def close_mongo_connection():
    log.info("Closing MongoDB connection...")
    if db_connection.client:
        db_connection.client.close()
        db_connection.client = None
        db_connection.db = None
        log.info("MongoDB connection closed.")


def get_database() -> AsyncIOMotorDatabase:
    if db_connection.db is None:
        log.error("Database not initialized. Call connect_to_mongo first.")
        raise RuntimeError("Database not initialized.")
    return db_connection.db


def get_pets_collection() -> AsyncIOMotorCollection:
    return get_database()[PETS_COLLECTION]


# Collection names
PETS_COLLECTION = "pets"

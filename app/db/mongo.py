"""
app/db/mongo.py

Purpose: Motor client lifecycle and collection access

- One client per process, opened in the app lifespan
- Startup retries with doubling delay (MONGODB_CONNECT_RETRIES / MONGODB_RETRY_DELAY)
- Tests and scripts can inject their own database via use_database()
"""

import asyncio
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure, PyMongoError

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

USERS_COLLECTION = "users"

_client: Optional[AsyncIOMotorClient] = None
_database: Optional[AsyncIOMotorDatabase] = None


def _open_client() -> AsyncIOMotorClient:
    return AsyncIOMotorClient(
        settings.MONGODB_URL,
        maxPoolSize=settings.MONGODB_MAX_POOL_SIZE,
        serverSelectionTimeoutMS=5000,
        connectTimeoutMS=10000,
        retryWrites=True,
        tz_aware=True,
    )


async def connect_to_mongo():
    """
    Opens the client and pings the server, retrying on connection failures.

    Raises:
        ConnectionError: when every attempt failed
    """
    global _client, _database

    if _client is not None:
        logger.warning("MongoDB client already initialized")
        return

    attempts = settings.MONGODB_CONNECT_RETRIES
    delay = settings.MONGODB_RETRY_DELAY

    for attempt in range(1, attempts + 1):
        client = _open_client()
        try:
            await client.admin.command("ping")
        except ConnectionFailure as e:
            client.close()
            logger.error(f"MongoDB ping failed (attempt {attempt}/{attempts}): {e}")
            if attempt == attempts:
                logger.critical("Giving up on MongoDB")
                raise ConnectionError("Could not establish MongoDB connection") from e
            await asyncio.sleep(delay)
            delay *= 2
            continue

        _client = client
        _database = client[settings.MONGODB_DB_NAME]
        logger.info(f"✅ Connected to MongoDB database '{settings.MONGODB_DB_NAME}'")
        return


async def close_mongo_connection():
    global _client, _database

    if _client is None:
        return
    _client.close()
    _client = None
    _database = None
    logger.info("MongoDB connection closed")


def use_database(database: Optional[AsyncIOMotorDatabase]):
    """Points collection accessors at a database handle built elsewhere."""
    global _database
    _database = database


async def check_database_health() -> bool:
    """
    Pings through the active database handle.

    Returns:
        True when the server answered, False otherwise
    """
    if _database is None:
        logger.error("MongoDB database not initialized")
        return False
    try:
        await _database.command("ping")
    except PyMongoError as e:
        logger.error(f"Database health check failed: {e}")
        return False
    return True


def get_database() -> AsyncIOMotorDatabase:
    if _database is None:
        raise RuntimeError("Database not initialized. Call connect_to_mongo() during startup.")
    return _database


def get_users_collection() -> AsyncIOMotorCollection:
    """
    One document per applicant:

    - name, email (lowercase, unique), phone, country
    - password: passlib hash, or legacy plaintext until the next login
    - pin: admin-issued, removed once verified
    - plan, status (step1 | step2 | step3 | completed)
    - approved_steps: subset of pin | plan | idcard, in approval order
    - version: bumped by every onboarding-state write
    - created_at, updated_at, last_login_at
    """
    return get_database()[USERS_COLLECTION]

"""
app/db/indexes.py

Purpose: Index management for the users collection

- Unique email index backs registration uniqueness (emails are stored lowercase)
- Status and created_at indexes serve the admin listing
"""

from pymongo import ASCENDING, DESCENDING, IndexModel

from app.db.mongo import get_users_collection
from app.core.logging import get_logger

logger = get_logger(__name__)

USER_INDEXES = [
    IndexModel([("email", ASCENDING)], name="email_unique", unique=True),
    IndexModel([("status", ASCENDING)], name="status_idx"),
    IndexModel([("created_at", DESCENDING)], name="created_at_idx"),
]


async def create_indexes():
    """
    Creates the users indexes. Idempotent: existing indexes with the
    same definition are left alone.
    """
    users = get_users_collection()
    try:
        names = await users.create_indexes(USER_INDEXES)
    except Exception as e:
        logger.error(f"Failed to create indexes: {str(e)}", exc_info=True)
        raise

    logger.info(f"✅ Users indexes ready: {', '.join(names)}")
    return names

import pytest
from pymongo.errors import DuplicateKeyError

from app.db import mongo
from app.db.indexes import create_indexes


@pytest.mark.asyncio
async def test_create_indexes_is_idempotent(db):
    first = await create_indexes()
    second = await create_indexes()
    assert first == second == ["email_unique", "status_idx", "created_at_idx"]

    info = await db["users"].index_information()
    assert info["email_unique"]["unique"] is True


@pytest.mark.asyncio
async def test_email_index_rejects_duplicates(db):
    await create_indexes()
    await db["users"].insert_one({"email": "a@x.com"})
    with pytest.raises(DuplicateKeyError):
        await db["users"].insert_one({"email": "a@x.com"})


def test_users_collection_requires_database():
    mongo.use_database(None)
    with pytest.raises(RuntimeError):
        mongo.get_users_collection()


@pytest.mark.asyncio
async def test_health_check_without_database():
    mongo.use_database(None)
    assert await mongo.check_database_health() is False

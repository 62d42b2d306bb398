"""
app/services/user_service.py

Purpose: User data management (credential store)

- Create user records with hashed passwords
- Email-normalized lookups
- Password verification with one-way legacy plaintext migration
- Admin PIN assignment
- Version-checked writes for onboarding state changes
"""

from app.db.mongo import get_users_collection
from app.flow.states import OnboardingStatus
from app.models.user import UserRecord
from app.core.exceptions import (
    ConcurrentUpdateError,
    DuplicateEmailError,
    ResourceNotFoundError,
)
from app.core.logging import get_logger, LogContext
from app.core.security import (
    hash_password,
    is_password_hash,
    password_needs_rehash,
    verify_legacy_plaintext,
    verify_password as verify_password_hash,
)
from utils.constants import ERR_EMAIL_IN_USE, ERR_USER_NOT_FOUND
from utils.time_utils import utcnow
from utils.validation_utils import normalize_email
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError
from typing import Optional, Dict, Any, List, Iterable

logger = get_logger(__name__)


def _object_id(user_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(str(user_id))
    except (InvalidId, TypeError):
        return None


async def create_user(
    name: str,
    email: str,
    phone: str,
    country: str,
    raw_password: str,
) -> UserRecord:
    """
    Registers a new applicant at step1.

    Args:
        name: Display name
        email: Email (normalized before the uniqueness check)
        phone: Phone number
        country: Country
        raw_password: Plain password; only its hash is stored

    Returns:
        The stored user record

    Raises:
        DuplicateEmailError: an account with the same normalized email exists
    """
    normalized = normalize_email(email)
    users = get_users_collection()

    if await users.find_one({"email": normalized}, {"_id": 1}):
        logger.info("Registration rejected: email already in use")
        raise DuplicateEmailError(ERR_EMAIL_IN_USE)

    now = utcnow()
    doc: Dict[str, Any] = {
        "name": name,
        "email": normalized,
        "phone": phone,
        "country": country,
        "password": hash_password(raw_password),
        "status": OnboardingStatus.STEP1.value,
        "plan": None,
        "approved_steps": [],
        "version": 0,
        "created_at": now,
        "updated_at": now,
    }

    try:
        result = await users.insert_one(doc)
    except DuplicateKeyError:
        # Lost a race with a concurrent registration for the same email
        raise DuplicateEmailError(ERR_EMAIL_IN_USE)

    doc["_id"] = result.inserted_id
    user = UserRecord.from_document(doc)
    logger.info("New user created", extra={"user_id": user.id})
    return user


async def get_user_by_email(email: str) -> Optional[UserRecord]:
    normalized = normalize_email(email)
    if not normalized:
        return None
    doc = await get_users_collection().find_one({"email": normalized})
    return UserRecord.from_document(doc) if doc else None


async def get_user_by_id(user_id: str) -> Optional[UserRecord]:
    """
    Retrieves a user by ID.

    Args:
        user_id: String form of the user's ObjectId

    Returns:
        User record or None if not found (malformed ids are never found)
    """
    oid = _object_id(user_id)
    if oid is None:
        return None
    doc = await get_users_collection().find_one({"_id": oid})
    return UserRecord.from_document(doc) if doc else None


async def require_user(user_id: str) -> UserRecord:
    user = await get_user_by_id(user_id)
    if user is None:
        raise ResourceNotFoundError(ERR_USER_NOT_FOUND)
    return user


async def verify_password(user: UserRecord, attempt: str) -> bool:
    """
    Checks a login attempt against the stored credential.

    Hashed credentials are checked with passlib. Anything without a known
    hash marker is a legacy plaintext value: it is compared directly and,
    on a match, replaced by a hash so the row never holds plaintext again.

    Args:
        user: User record holding the stored credential
        attempt: Password supplied by the client

    Returns:
        True if the attempt matches
    """
    stored = user.password

    if is_password_hash(stored):
        if not verify_password_hash(attempt, stored):
            return False
        if password_needs_rehash(stored):
            await _replace_credential(user, stored, hash_password(attempt), reason="rehash")
        return True

    if not verify_legacy_plaintext(attempt, stored):
        return False

    await _replace_credential(user, stored, hash_password(attempt), reason="legacy_plaintext")
    return True


async def _replace_credential(user: UserRecord, old_value: str, new_hash: str, reason: str) -> None:
    # Matching on the old value keeps the migration one-way under concurrent logins.
    with LogContext(user_id=user.id):
        result = await get_users_collection().update_one(
            {"_id": user.object_id, "password": old_value},
            {"$set": {"password": new_hash, "updated_at": utcnow()}}
        )
        if result.modified_count > 0:
            logger.info(f"Stored credential upgraded ({reason})")
        user.password = new_hash


async def set_pin(user_id: str, pin: str) -> UserRecord:
    """
    Stores an admin-issued PIN, overwriting any previous one.

    Raises:
        ResourceNotFoundError: no such user
    """
    oid = _object_id(user_id)
    if oid is None:
        raise ResourceNotFoundError(ERR_USER_NOT_FOUND)

    doc = await get_users_collection().find_one_and_update(
        {"_id": oid},
        {
            "$set": {"pin": pin, "updated_at": utcnow()},
            "$inc": {"version": 1},
        },
        return_document=ReturnDocument.AFTER
    )
    if doc is None:
        raise ResourceNotFoundError(ERR_USER_NOT_FOUND)

    logger.info("PIN set by admin", extra={"user_id": user_id})
    return UserRecord.from_document(doc)


async def save_changes(
    user: UserRecord,
    changes: Dict[str, Any],
    unset: Iterable[str] = (),
) -> UserRecord:
    """
    Writes onboarding changes if the record is still at the version read.

    There is no retry: a lost race is reported and the caller resubmits.

    Args:
        user: Record as read at the start of the request
        changes: Fields to set
        unset: Fields to remove

    Returns:
        The record after the write

    Raises:
        ConcurrentUpdateError: the stored version moved since ``user`` was read
        ResourceNotFoundError: the user no longer exists
    """
    if user.version is None:
        version_filter: Any = {"$exists": False}
    else:
        version_filter = user.version

    update: Dict[str, Any] = {
        "$set": {**changes, "updated_at": utcnow()},
        "$inc": {"version": 1},
    }
    unset = list(unset)
    if unset:
        update["$unset"] = {field: "" for field in unset}

    users = get_users_collection()
    doc = await users.find_one_and_update(
        {"_id": user.object_id, "version": version_filter},
        update,
        return_document=ReturnDocument.AFTER
    )

    if doc is None:
        if await users.find_one({"_id": user.object_id}, {"_id": 1}) is None:
            raise ResourceNotFoundError(ERR_USER_NOT_FOUND)
        logger.warning(
            "Version conflict on user write",
            extra={"user_id": user.id, "status": user.status.value}
        )
        raise ConcurrentUpdateError()

    return UserRecord.from_document(doc)


async def touch_last_login(user: UserRecord) -> None:
    await get_users_collection().update_one(
        {"_id": user.object_id},
        {"$set": {"last_login_at": utcnow()}}
    )


async def list_users(skip: int = 0, limit: Optional[int] = None) -> List[UserRecord]:
    """
    Lists users, newest first.

    Args:
        skip: Number of users to pass over
        limit: Page size; None returns every remaining user
    """
    cursor = get_users_collection().find({}).sort([("created_at", -1), ("_id", -1)])
    if skip:
        cursor = cursor.skip(skip)
    if limit:
        cursor = cursor.limit(limit)
    docs = await cursor.to_list(length=None)
    return [UserRecord.from_document(doc) for doc in docs]


async def search_users(email: str) -> List[UserRecord]:
    """
    Finds users whose normalized email equals the query.
    """
    normalized = normalize_email(email)
    if not normalized:
        return []
    docs = await get_users_collection().find({"email": normalized}).to_list(length=None)
    return [UserRecord.from_document(doc) for doc in docs]

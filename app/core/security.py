"""
app/core/security.py

Purpose: Password hashing primitives

- One CryptContext for every stored credential
- Recognizes hashed vs legacy plaintext values
- Constant-time comparison for both encodings
"""

from __future__ import annotations

import hmac

from passlib.context import CryptContext

from app.core.config import settings


# bcrypt hashes written by earlier deployments still verify, but are rehashed on login.
_pwd = CryptContext(
    schemes=["pbkdf2_sha256", "bcrypt"],
    deprecated=["bcrypt"],
    pbkdf2_sha256__default_rounds=settings.PASSWORD_HASH_ROUNDS,
)


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("password_blank")
    return _pwd.hash(password)


def is_password_hash(value: str | None) -> bool:
    """True when ``value`` carries a hash marker the context recognizes."""
    if not value:
        return False
    return _pwd.identify(value, required=False) is not None


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return _pwd.verify(password, password_hash)
    except ValueError:
        return False


def password_needs_rehash(password_hash: str) -> bool:
    return _pwd.needs_update(password_hash)


def verify_legacy_plaintext(password: str, stored: str) -> bool:
    if not password or not stored:
        return False
    return hmac.compare_digest(password.encode("utf-8"), stored.encode("utf-8"))


def verify_shared_secret(supplied: str | None, expected: str | None) -> bool:
    """Constant-time check of a configured identity/secret value."""
    if not supplied or not expected:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def is_admin_credential(identity: str | None, secret: str | None) -> bool:
    """
    Compares a login pair against the configured admin pair.
    Always False when no admin pair is configured.
    """
    if not settings.admin_configured:
        return False
    user_ok = verify_shared_secret(identity, settings.ADMIN_USER)
    pass_ok = verify_shared_secret(secret, settings.ADMIN_PASS)
    return user_ok and pass_ok

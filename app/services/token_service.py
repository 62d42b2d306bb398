"""
app/services/token_service.py

Purpose: Stateless access tokens

- Admin tokens: {role: admin}
- Applicant tokens: {sub: user id, status: snapshot at issuance}
- HS256 signature, expiry enforced on decode
- No server-side session store, no refresh
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import jwt

from app.core.config import settings
from app.core.exceptions import TokenExpiredError, TokenInvalidError
from app.flow.states import OnboardingStatus
from app.models.user import UserRecord
from utils.time_utils import calculate_expiry, utcnow


_JWT_ALG = "HS256"

ROLE_ADMIN = "admin"
ROLE_APPLICANT = "applicant"


@dataclass(frozen=True)
class TokenClaims:
    role: str
    subject: Optional[str] = None
    status: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def _encode(payload: Dict[str, Any], secret: Optional[str], expires_minutes: Optional[int]) -> str:
    secret = secret or settings.JWT_SECRET_KEY
    if not secret:
        raise ValueError("jwt_secret_blank")

    now = utcnow()
    exp = calculate_expiry(now, expires_minutes or settings.JWT_EXPIRE_MINUTES)
    payload = {
        **payload,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=_JWT_ALG)


def issue_admin_token(*, secret: Optional[str] = None, expires_minutes: Optional[int] = None) -> str:
    return _encode({"role": ROLE_ADMIN}, secret, expires_minutes)


def issue_applicant_token(
    user: UserRecord,
    *,
    secret: Optional[str] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    """
    Mints an applicant token. The status claim is informational only and
    goes stale as soon as the user's status changes.
    """
    return _encode(
        {"sub": user.id, "status": user.status.value, "role": ROLE_APPLICANT},
        secret,
        expires_minutes,
    )


def decode_token(token: str, *, secret: Optional[str] = None) -> TokenClaims:
    """
    Verifies a token and returns its claims.

    Raises:
        TokenExpiredError: past the exp claim
        TokenInvalidError: bad signature, malformed token, or claims that
            describe neither an admin nor an applicant
    """
    if not token:
        raise TokenInvalidError()

    try:
        payload = jwt.decode(
            token,
            secret or settings.JWT_SECRET_KEY,
            algorithms=[_JWT_ALG],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError()
    except jwt.InvalidTokenError:
        raise TokenInvalidError()

    role = payload.get("role")
    if role == ROLE_ADMIN:
        return TokenClaims(role=ROLE_ADMIN)

    if role == ROLE_APPLICANT:
        sub = payload.get("sub")
        status = payload.get("status")
        if not sub or not isinstance(sub, str):
            raise TokenInvalidError("Token missing subject")
        if status not in {s.value for s in OnboardingStatus}:
            raise TokenInvalidError("Token carries an unknown status")
        return TokenClaims(role=ROLE_APPLICANT, subject=sub, status=status)

    raise TokenInvalidError("Token carries an unknown role")

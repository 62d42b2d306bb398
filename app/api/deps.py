"""
app/api/deps.py

Purpose: Authorization gate

- Extracts the bearer token and verifies it (401 on any failure)
- Attaches the decoded principal to the request
- Narrower gates check the principal kind (403 when it doesn't match)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.exceptions import AuthenticationError, ForbiddenError
from app.flow.states import OnboardingStatus
from app.services.token_service import decode_token
from utils.constants import ERR_ADMIN_REQUIRED, ERR_APPLICANT_REQUIRED, ERR_NO_TOKEN


_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AdminPrincipal:
    """The single operator identity, produced only by the shared-secret login."""

    kind: str = "admin"


@dataclass(frozen=True)
class ApplicantPrincipal:
    user_id: str
    # Snapshot from token issuance; handlers re-read the user for live status.
    status_claim: OnboardingStatus
    kind: str = "applicant"


Principal = Union[AdminPrincipal, ApplicantPrincipal]


def get_current_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Principal:
    """
    Authenticates a request from its ``Authorization: Bearer`` header.

    Raises:
        AuthenticationError: missing header or token
        TokenExpiredError / TokenInvalidError: token fails verification
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(ERR_NO_TOKEN, code="MISSING_TOKEN")

    claims = decode_token(credentials.credentials)

    principal: Principal
    if claims.is_admin:
        principal = AdminPrincipal()
    else:
        principal = ApplicantPrincipal(
            user_id=claims.subject,
            status_claim=OnboardingStatus(claims.status),
        )

    request.state.principal = principal
    return principal


def require_admin(principal: Principal = Depends(get_current_principal)) -> AdminPrincipal:
    if not isinstance(principal, AdminPrincipal):
        raise ForbiddenError(ERR_ADMIN_REQUIRED)
    return principal


def require_applicant(principal: Principal = Depends(get_current_principal)) -> ApplicantPrincipal:
    if not isinstance(principal, ApplicantPrincipal):
        raise ForbiddenError(ERR_APPLICANT_REQUIRED)
    return principal

"""
app/flow/handlers/registration.py

Handles: registration and login

- Creates the applicant at step1 and returns an applicant token
- Login accepts either the shared admin pair or an applicant's credentials
- Notifies the admin about registrations and logins
"""

from typing import Dict, Any

from app.core.security import is_admin_credential
from app.core.exceptions import AuthenticationError
from app.core.logging import get_logger, LogContext
from app.services import user_service
from app.services.notification_service import EventKind, notify
from app.services.token_service import issue_admin_token, issue_applicant_token
from utils.constants import ERR_INVALID_ADMIN_CREDENTIALS, ERR_INVALID_CREDENTIALS

logger = get_logger(__name__)


async def handle_registration(
    name: str,
    email: str,
    phone: str,
    country: str,
    password: str,
) -> Dict[str, Any]:
    """
    Registers a new applicant.

    Returns:
        {"token": ..., "status": "step1"}
    """
    user = await user_service.create_user(
        name=name,
        email=email,
        phone=phone,
        country=country,
        raw_password=password,
    )

    with LogContext(user_id=user.id, status=user.status.value):
        logger.info("Applicant registered")
        notify(EventKind.REGISTERED, user, name=name, phone=phone, country=country)

    return {"token": issue_applicant_token(user), "status": user.status.value}


async def handle_login(email: str, password: str) -> Dict[str, Any]:
    """
    Logs in an applicant, or the admin when the shared pair matches.

    Raises:
        AuthenticationError: unknown email or wrong password
    """
    if is_admin_credential(email, password):
        logger.info("Admin logged in via applicant login")
        return {"token": issue_admin_token(), "is_admin": True}

    user = await user_service.get_user_by_email(email)
    if user is None or not await user_service.verify_password(user, password):
        logger.info("Login rejected: invalid credentials")
        raise AuthenticationError(ERR_INVALID_CREDENTIALS)

    await user_service.touch_last_login(user)

    with LogContext(user_id=user.id, status=user.status.value):
        logger.info("Applicant logged in")
        notify(EventKind.LOGIN, user, status=user.status.value)

    return {"token": issue_applicant_token(user), "status": user.status.value}


async def handle_admin_login(email: str, password: str) -> Dict[str, Any]:
    if not is_admin_credential(email, password):
        logger.info("Admin login rejected")
        raise AuthenticationError(ERR_INVALID_ADMIN_CREDENTIALS)

    logger.info("Admin logged in")
    return {"token": issue_admin_token()}

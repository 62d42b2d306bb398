"""
app/flow/handlers/pin.py

Handles: STEP 1 -> STEP 2 – PIN possession proof

- Admin issues a 5-character PIN out of band (set-pin)
- Applicant submits it; a match self-approves the pin step
- A mismatch changes nothing and may be retried without limit
- The PIN is removed once it has been used
"""

from typing import Dict, Any

from app.core.exceptions import InvalidPinError
from app.core.logging import get_logger, LogContext
from app.core.security import verify_shared_secret
from app.flow.states import Action, apply_transition
from app.services import user_service
from app.services.notification_service import EventKind, notify
from utils.constants import ERR_INVALID_PIN, MSG_PIN_SET, MSG_PIN_VERIFIED

logger = get_logger(__name__)


async def handle_pin_submission(user_id: str, pin: str) -> Dict[str, Any]:
    """
    Checks a submitted PIN and advances the applicant to step2.

    Args:
        user_id: Applicant's user id (from the token subject)
        pin: PIN typed by the applicant

    Returns:
        {"message": "PIN verified", "status": <new status>}

    Raises:
        InvalidPinError: no PIN issued, or the PIN does not match
    """
    user = await user_service.require_user(user_id)

    with LogContext(user_id=user.id, status=user.status.value, step="pin"):
        if not verify_shared_secret(pin, user.pin):
            logger.info("PIN mismatch")
            raise InvalidPinError(ERR_INVALID_PIN)

        transition = apply_transition(user.status, user.approved_steps, Action.SUBMIT_PIN)
        user = await user_service.save_changes(
            user,
            {
                "status": transition.to_status.value,
                "approved_steps": [s.value for s in transition.approved_steps],
            },
            unset=["pin"],
        )
        logger.info(f"PIN verified: {transition.from_status.value} -> {transition.to_status.value}")

        notify(EventKind.PIN_VERIFIED, user)

    return {"message": MSG_PIN_VERIFIED, "status": user.status.value}


async def handle_set_pin(user_id: str, pin: str) -> Dict[str, Any]:
    """
    Admin: issues (or replaces) a user's PIN. Status is untouched.
    """
    await user_service.set_pin(user_id, pin)
    return {"message": MSG_PIN_SET}

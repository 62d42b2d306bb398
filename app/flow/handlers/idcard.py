"""
app/flow/handlers/idcard.py

Handles: STEP 3 – ID card receipt submission

- Only allowed while the applicant is at step3
- Nothing is stored; the admin is told and completes the user by approving "idcard"
"""

from typing import Dict, Any

from app.core.exceptions import InvalidTransitionError
from app.core.logging import get_logger, LogContext
from app.flow.states import Action, can_apply
from app.services import user_service
from app.services.notification_service import EventKind, notify
from utils.constants import ERR_PLAN_NOT_APPROVED, MSG_IDCARD_REQUESTED

logger = get_logger(__name__)


async def handle_idcard_submission(user_id: str) -> Dict[str, Any]:
    user = await user_service.require_user(user_id)

    with LogContext(user_id=user.id, status=user.status.value, step="idcard"):
        if not can_apply(user.status, Action.SUBMIT_IDCARD):
            logger.info("ID card submission rejected: wrong step")
            raise InvalidTransitionError(
                ERR_PLAN_NOT_APPROVED,
                details={"status": user.status.value}
            )

        logger.info("ID card receipt submitted")
        notify(EventKind.IDCARD_REQUESTED, user)

    return {"message": MSG_IDCARD_REQUESTED, "status": user.status.value}

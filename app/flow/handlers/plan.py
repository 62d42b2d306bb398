"""
app/flow/handlers/plan.py

Handles: STEP 2 – Plan selection request

- Only allowed while the applicant is at step2
- Stores the chosen plan; status stays at step2 until an admin approves "plan"
"""

from typing import Dict, Any

from app.core.exceptions import InvalidTransitionError
from app.core.logging import get_logger, LogContext
from app.flow.states import Action, can_apply
from app.services import user_service
from app.services.notification_service import EventKind, notify
from utils.constants import ERR_PIN_NOT_VERIFIED, MSG_PLAN_REQUESTED
from utils.validation_utils import sanitize_input

logger = get_logger(__name__)


async def handle_plan_selection(user_id: str, plan: str) -> Dict[str, Any]:
    """
    Records the applicant's plan request.

    Raises:
        InvalidTransitionError: applicant is not at step2
    """
    user = await user_service.require_user(user_id)

    with LogContext(user_id=user.id, status=user.status.value, step="plan"):
        if not can_apply(user.status, Action.SELECT_PLAN):
            logger.info("Plan selection rejected: wrong step")
            raise InvalidTransitionError(
                ERR_PIN_NOT_VERIFIED,
                details={"status": user.status.value}
            )

        plan = sanitize_input(plan)
        user = await user_service.save_changes(user, {"plan": plan})
        logger.info(f"Plan requested: {plan}")

        notify(EventKind.PLAN_REQUESTED, user, plan=plan)

    return {"message": MSG_PLAN_REQUESTED, "status": user.status.value}

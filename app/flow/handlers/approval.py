"""
app/flow/handlers/approval.py

Handles: admin approvals (pin, plan, idcard)

- Admin approvals skip the applicant-side status preconditions
- Status still never moves backwards
- Each step is recorded in approved_steps at most once
- Unknown step identifiers are rejected
"""

from typing import Dict, Any

from app.core.logging import get_logger, LogContext
from app.flow.states import apply_transition, approval_action, parse_step
from app.services import user_service
from utils.constants import MSG_APPROVED

logger = get_logger(__name__)


async def handle_approval(user_id: str, step: str) -> Dict[str, Any]:
    """
    Approves an onboarding step for a user.

    Args:
        user_id: Target user id
        step: "pin", "plan" or "idcard"

    Returns:
        {"message": "Approved <step>", "status": <new status>}

    Raises:
        ValidationError: unknown step
        ResourceNotFoundError: no such user
        ConcurrentUpdateError: the user changed while the approval was applied
    """
    step = parse_step(step)
    user = await user_service.require_user(user_id)

    with LogContext(user_id=user.id, status=user.status.value, step=step.value):
        transition = apply_transition(user.status, user.approved_steps, approval_action(step))

        if transition.status_changed or list(transition.approved_steps) != user.approved_steps:
            user = await user_service.save_changes(
                user,
                {
                    "status": transition.to_status.value,
                    "approved_steps": [s.value for s in transition.approved_steps],
                },
            )
            logger.info(
                f"Approved {step.value}: {transition.from_status.value} -> {transition.to_status.value}"
            )
        else:
            logger.info(f"Approval of {step.value} already applied, nothing to write")

    return {"message": MSG_APPROVED.format(step=step.value), "status": user.status.value}

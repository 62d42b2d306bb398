"""
app/flow/states.py

Purpose: Defines the onboarding statuses and the transition table

- Enum for each onboarding stage (step1, step2, step3, completed)
- Single source of truth for which action moves a user where
- Transition function is total: undefined (status, action) pairs are rejected
- Metadata for each status (display name, what the applicant waits for)
"""

from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple
from dataclasses import dataclass

from app.core.exceptions import InvalidTransitionError, ValidationError


class OnboardingStatus(str, Enum):
    """
    Onboarding stages, in the order an applicant passes through them.
    """

    STEP1 = "step1"
    STEP2 = "step2"
    STEP3 = "step3"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        return STATUS_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, OnboardingStatus):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, OnboardingStatus):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, OnboardingStatus):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, OnboardingStatus):
            return NotImplemented
        return self.rank >= other.rank


STATUS_ORDER: Tuple[OnboardingStatus, ...] = (
    OnboardingStatus.STEP1,
    OnboardingStatus.STEP2,
    OnboardingStatus.STEP3,
    OnboardingStatus.COMPLETED,
)


class Step(str, Enum):
    """Onboarding milestones an admin can approve."""

    PIN = "pin"
    PLAN = "plan"
    IDCARD = "idcard"


class Action(str, Enum):
    """Everything that can be done to a user's onboarding record."""

    SUBMIT_PIN = "submit_pin"
    SELECT_PLAN = "select_plan"
    SUBMIT_IDCARD = "submit_idcard"
    APPROVE_PIN = "approve_pin"
    APPROVE_PLAN = "approve_plan"
    APPROVE_IDCARD = "approve_idcard"


@dataclass(frozen=True)
class TransitionRule:
    """
    One row of the transition table.

    allowed_from: statuses the action may be taken in (None = any status)
    target: status the action moves to (None = status unchanged)
    records: step appended to approved_steps on success
    """
    action: Action
    allowed_from: Optional[Tuple[OnboardingStatus, ...]]
    target: Optional[OnboardingStatus]
    records: Optional[Step] = None
    admin_only: bool = False


TRANSITIONS: Dict[Action, TransitionRule] = {
    # Possession of the admin-issued PIN is self-service proof
    Action.SUBMIT_PIN: TransitionRule(
        action=Action.SUBMIT_PIN,
        allowed_from=None,
        target=OnboardingStatus.STEP2,
        records=Step.PIN,
    ),
    # Request only: status waits for APPROVE_PLAN
    Action.SELECT_PLAN: TransitionRule(
        action=Action.SELECT_PLAN,
        allowed_from=(OnboardingStatus.STEP2,),
        target=None,
    ),
    # Request only: status waits for APPROVE_IDCARD
    Action.SUBMIT_IDCARD: TransitionRule(
        action=Action.SUBMIT_IDCARD,
        allowed_from=(OnboardingStatus.STEP3,),
        target=None,
    ),
    Action.APPROVE_PIN: TransitionRule(
        action=Action.APPROVE_PIN,
        allowed_from=None,
        target=OnboardingStatus.STEP2,
        records=Step.PIN,
        admin_only=True,
    ),
    Action.APPROVE_PLAN: TransitionRule(
        action=Action.APPROVE_PLAN,
        allowed_from=None,
        target=OnboardingStatus.STEP3,
        records=Step.PLAN,
        admin_only=True,
    ),
    Action.APPROVE_IDCARD: TransitionRule(
        action=Action.APPROVE_IDCARD,
        allowed_from=None,
        target=OnboardingStatus.COMPLETED,
        records=Step.IDCARD,
        admin_only=True,
    ),
}


APPROVAL_ACTIONS: Dict[Step, Action] = {
    Step.PIN: Action.APPROVE_PIN,
    Step.PLAN: Action.APPROVE_PLAN,
    Step.IDCARD: Action.APPROVE_IDCARD,
}


@dataclass(frozen=True)
class Transition:
    """Result of applying an action to a user's current onboarding state."""
    action: Action
    from_status: OnboardingStatus
    to_status: OnboardingStatus
    approved_steps: Tuple[Step, ...]

    @property
    def status_changed(self) -> bool:
        return self.from_status != self.to_status


def parse_status(value: str) -> OnboardingStatus:
    """
    Converts a stored status string into the enum.

    Raises:
        ValidationError: the value is not a known status
    """
    try:
        return OnboardingStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown onboarding status: {value!r}")


def parse_step(value: str) -> Step:
    """
    Converts an approval step identifier into the enum.

    Unknown identifiers are rejected rather than ignored.
    """
    if isinstance(value, Step):
        return value
    try:
        return Step(value)
    except ValueError:
        raise ValidationError(
            f"Unknown step: {value!r}",
            details={"allowed": [s.value for s in Step]}
        )


def approval_action(step) -> Action:
    return APPROVAL_ACTIONS[parse_step(step)]


def can_apply(status: OnboardingStatus, action: Action) -> bool:
    rule = TRANSITIONS.get(action)
    if rule is None:
        return False
    return rule.allowed_from is None or status in rule.allowed_from


def apply_transition(
    status: OnboardingStatus,
    approved_steps: Sequence[Step],
    action: Action,
) -> Transition:
    """
    Applies an action to the current onboarding state.

    Status never moves backwards: an action whose target is earlier than
    the current status leaves the status where it is. The recorded step is
    appended to approved_steps at most once.

    Args:
        status: Current status
        approved_steps: Steps already approved, in approval order
        action: Action being taken

    Returns:
        Transition describing the new state

    Raises:
        InvalidTransitionError: the action is not allowed from ``status``
    """
    rule = TRANSITIONS.get(action)
    if rule is None or not can_apply(status, action):
        raise InvalidTransitionError(
            details={"status": status.value, "action": action.value}
        )

    new_status = status
    if rule.target is not None and rule.target > status:
        new_status = rule.target

    steps: List[Step] = list(approved_steps)
    if rule.records is not None and rule.records not in steps:
        steps.append(rule.records)

    return Transition(
        action=action,
        from_status=status,
        to_status=new_status,
        approved_steps=tuple(steps),
    )


@dataclass
class StatusMetadata:
    """
    Metadata associated with each onboarding status.
    Used for profile responses and log lines.
    """
    name: OnboardingStatus
    display_name: str
    step_number: int
    total_steps: int = 4
    awaiting: str = ""


STATUS_METADATA: Dict[OnboardingStatus, StatusMetadata] = {
    OnboardingStatus.STEP1: StatusMetadata(
        name=OnboardingStatus.STEP1,
        display_name="Registered",
        step_number=1,
        awaiting="Enter the 5-character PIN issued by the admin"
    ),
    OnboardingStatus.STEP2: StatusMetadata(
        name=OnboardingStatus.STEP2,
        display_name="PIN verified",
        step_number=2,
        awaiting="Select a plan and wait for admin approval"
    ),
    OnboardingStatus.STEP3: StatusMetadata(
        name=OnboardingStatus.STEP3,
        display_name="Plan approved",
        step_number=3,
        awaiting="Submit the ID card receipt and wait for admin approval"
    ),
    OnboardingStatus.COMPLETED: StatusMetadata(
        name=OnboardingStatus.COMPLETED,
        display_name="Completed",
        step_number=4,
        awaiting=""
    ),
}


def get_status_metadata(status: OnboardingStatus) -> StatusMetadata:
    return STATUS_METADATA[status]


def get_progress_message(status: OnboardingStatus) -> str:
    """
    Generates a progress message for the current status (e.g. "Step 2 of 4").
    """
    metadata = get_status_metadata(status)
    return f"Step {metadata.step_number} of {metadata.total_steps}"

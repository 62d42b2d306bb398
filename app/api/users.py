"""
app/api/users.py

Purpose: Applicant-facing endpoints

- Registration and login (login also accepts the admin pair)
- Self-service onboarding requests (verify-pin, select-plan, complete-idcard)
- Profile with live status
"""

from fastapi import APIRouter, Depends

from app.api.deps import ApplicantPrincipal, require_applicant
from app.flow.handlers.idcard import handle_idcard_submission
from app.flow.handlers.pin import handle_pin_submission
from app.flow.handlers.plan import handle_plan_selection
from app.flow.handlers.registration import handle_login, handle_registration
from app.flow.states import get_progress_message, get_status_metadata
from app.schemas.user import (
    LoginRequest,
    ProfileResponse,
    RegisterRequest,
    SelectPlanRequest,
    VerifyPinRequest,
)
from app.schemas.response import StatusResponse, TokenResponse
from app.services import user_service

router = APIRouter()


@router.post("/register", response_model=TokenResponse, response_model_exclude_none=True)
async def register(body: RegisterRequest):
    return await handle_registration(
        name=body.name,
        email=body.email,
        phone=body.phone,
        country=body.country,
        password=body.password,
    )


@router.post("/login", response_model=TokenResponse, response_model_exclude_none=True)
async def login(body: LoginRequest):
    return await handle_login(body.email, body.password)


@router.post("/verify-pin", response_model=StatusResponse)
async def verify_pin(
    body: VerifyPinRequest,
    principal: ApplicantPrincipal = Depends(require_applicant),
):
    return await handle_pin_submission(principal.user_id, body.pin)


@router.post("/select-plan", response_model=StatusResponse)
async def select_plan(
    body: SelectPlanRequest,
    principal: ApplicantPrincipal = Depends(require_applicant),
):
    return await handle_plan_selection(principal.user_id, body.plan)


@router.post("/complete-idcard", response_model=StatusResponse)
async def complete_idcard(principal: ApplicantPrincipal = Depends(require_applicant)):
    return await handle_idcard_submission(principal.user_id)


@router.get("/profile", response_model=ProfileResponse)
async def profile(principal: ApplicantPrincipal = Depends(require_applicant)):
    """
    Current user and live onboarding status (re-read, not taken from the token).
    """
    user = await user_service.require_user(principal.user_id)
    metadata = get_status_metadata(user.status)
    return {
        "user": user.public(),
        "progress": {
            "step_number": metadata.step_number,
            "total_steps": metadata.total_steps,
            "display_name": metadata.display_name,
            "awaiting": metadata.awaiting,
            "message": get_progress_message(user.status),
        },
    }

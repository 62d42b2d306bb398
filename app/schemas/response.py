"""
app/schemas/response.py

Purpose: Response envelopes shared by the applicant and admin routers
"""

from typing import Any, Optional

from pydantic import BaseModel

from app.flow.states import OnboardingStatus


class ErrorResponse(BaseModel):
    """
    Body of every error response: {"error", "code", "details"}.
    """
    error: str
    code: str
    details: Optional[Any] = None


class TokenResponse(BaseModel):
    # status is omitted for the admin token, is_admin for applicants
    token: str
    status: Optional[OnboardingStatus] = None
    is_admin: Optional[bool] = None


class StatusResponse(BaseModel):
    message: str
    status: OnboardingStatus


class MessageResponse(BaseModel):
    message: str

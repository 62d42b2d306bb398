"""
app/schemas/user.py

Purpose: Request and response schemas for the onboarding API

- One validation policy for every inbound payload
- Field-level errors surface through the 422 handler
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.flow.states import OnboardingStatus, Step
from utils.validation_utils import validate_phone_number, validate_pin_format


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    phone: str = Field(..., description="International phone number, e.g. +33 6 12 34 56 78")
    country: str = Field(..., min_length=1, max_length=80)
    password: str = Field(..., min_length=6, max_length=128)

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "name": "Ada",
                "email": "ada@example.com",
                "phone": "+33612345678",
                "country": "France",
                "password": "correct-horse"
            }
        }
    )

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str) -> str:
        if not validate_phone_number(v):
            raise ValueError("phone must be 7-15 digits with an optional leading +")
        return v


class LoginRequest(BaseModel):
    # Plain str: the admin identity does not have to be an email address
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class VerifyPinRequest(BaseModel):
    # Any mismatch, whatever its length, is reported as an invalid PIN
    pin: str = Field(..., min_length=1, max_length=64)


class SelectPlanRequest(BaseModel):
    plan: str = Field(..., min_length=1, max_length=80)

    model_config = ConfigDict(str_strip_whitespace=True)


class ApproveRequest(BaseModel):
    user_id: str = Field(..., alias="userId")
    step: Step

    model_config = ConfigDict(populate_by_name=True)


class SetPinRequest(BaseModel):
    user_id: str = Field(..., alias="userId")
    pin: str

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("pin")
    @classmethod
    def check_pin(cls, v: str) -> str:
        if not validate_pin_format(v):
            raise ValueError("pin must be exactly 5 characters")
        return v


class UserOut(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
    phone: Optional[str] = None
    country: Optional[str] = None
    plan: Optional[str] = None
    status: OnboardingStatus
    approved_steps: List[Step] = []
    has_pin: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None


class ProgressOut(BaseModel):
    step_number: int
    total_steps: int
    display_name: str
    awaiting: str
    message: str


class ProfileResponse(BaseModel):
    user: UserOut
    progress: ProgressOut

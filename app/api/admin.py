"""
app/api/admin.py

Purpose: Admin endpoints

- Login with the shared admin credential pair
- User listing and email search
- Step approvals and PIN assignment
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import require_admin
from app.flow.handlers.approval import handle_approval
from app.flow.handlers.pin import handle_set_pin
from app.flow.handlers.registration import handle_admin_login
from app.schemas.user import (
    ApproveRequest,
    LoginRequest,
    SetPinRequest,
    UserOut,
)
from app.schemas.response import MessageResponse, StatusResponse, TokenResponse
from app.services import user_service

router = APIRouter()


@router.post("/login", response_model=TokenResponse, response_model_exclude_none=True)
async def admin_login(body: LoginRequest):
    return await handle_admin_login(body.email, body.password)


@router.get("/users", response_model=List[UserOut], dependencies=[Depends(require_admin)])
async def list_users(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Page size; omit for every user"),
):
    return [user.public() for user in await user_service.list_users(skip=skip, limit=limit)]


@router.get("/search", response_model=List[UserOut], dependencies=[Depends(require_admin)])
async def search_users(email: str = Query(..., min_length=1)):
    return [user.public() for user in await user_service.search_users(email)]


@router.post("/approve", response_model=StatusResponse, dependencies=[Depends(require_admin)])
async def approve(body: ApproveRequest):
    return await handle_approval(body.user_id, body.step)


@router.post("/set-pin", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def set_pin(body: SetPinRequest):
    return await handle_set_pin(body.user_id, body.pin)

"""Auth Routes — register, login, and session verification.

Invariants:
    - register/login return {message, user, token}; token embeds the current token_version
    - /verify is protected: it answers only for a live session
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import CurrentUser, get_current_user
from app.config import Settings, get_settings
from app.infrastructure.database import get_db
from app.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserPublic
from app.services.account_service import AccountService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post(
    "/register", response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Create an account and return a bearer token."""
    result = await AccountService(db, settings).register(
        body.name, body.email, body.password,
    )
    return AuthResponse(
        message="Registration successful",
        user=UserPublic.model_validate(result.user),
        token=result.token,
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    result = await AccountService(db, settings).login(body.email, body.password)
    return AuthResponse(
        message="Login successful",
        user=UserPublic.model_validate(result.user),
        token=result.token,
    )


@router.get("/verify")
async def verify(current_user: CurrentUser = Depends(get_current_user)):
    """Echo the authenticated identity for a live session."""
    return {
        "ok": True,
        "user": {
            "id": str(current_user.id),
            "email": current_user.email,
            "role": current_user.role,
        },
    }

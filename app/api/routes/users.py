"""Profile Routes — read and update the caller's own profile.

Invariants:
    - A password change returns a NEW token; the token used for the request is
      revoked by the same update (token_version bump)
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import CurrentUser, get_current_user
from app.config import Settings, get_settings
from app.infrastructure.database import get_db
from app.schemas.auth import AuthResponse, UserProfile, UserPublic
from app.schemas.user import ProfileResponse, ProfileUpdate
from app.services.account_service import AccountService

router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = await AccountService(db, settings).get_profile(current_user.id)
    return ProfileResponse(user=UserProfile.model_validate(user))


@router.put("/profile", response_model=AuthResponse)
async def update_profile(
    body: ProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Update name and/or password."""
    result = await AccountService(db, settings).update_profile(
        current_user.id,
        name=body.name,
        current_password=body.current_password,
        new_password=body.new_password,
    )
    return AuthResponse(
        message="Profile updated",
        user=UserPublic.model_validate(result.user),
        token=result.token,
    )

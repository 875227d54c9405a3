# api/users.py
"""User profile API"""

from fastapi import APIRouter, Depends, HTTPException

from ..interfaces.user_store import to_public_user
from ..schemas.auth_schemas import CurrentUser, UserPublic
from .deps import AppServices, get_current_user, get_services

router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("/profile", response_model=UserPublic)
async def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    services: AppServices = Depends(get_services),
):
    user = services.user_store.get_by_id(current_user.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return UserPublic(**to_public_user(user))

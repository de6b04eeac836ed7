"""
User API router.

Endpoints:
- GET /api/me - Get current user profile
"""

from fastapi import APIRouter, Depends

from linguaquest.interfaces.api.auth import SessionUser, get_current_user
from linguaquest.interfaces.api.schemas import UserResponse
from linguaquest.storage import user_repo

router = APIRouter(prefix="/api", tags=["user"])


@router.get("/me", response_model=UserResponse)
async def get_me(session_user: SessionUser = Depends(get_current_user)) -> UserResponse:
    """
    Get current user profile.

    Creates the user if not exists (first request after sign-up).
    """
    user = await user_repo.get_or_create_user(
        session_user.id, email=session_user.email, name=session_user.name
    )
    return UserResponse.model_validate(user)

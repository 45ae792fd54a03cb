"""
User API endpoints.
"""

from fastapi import APIRouter, Depends
from siedlisko.models.user import User
from siedlisko.schemas.user import ProfileResponse, UserPublic
from siedlisko.schemas.error import get_error_responses
from siedlisko.utils.dependencies import get_current_user


router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "/profile",
    response_model=ProfileResponse,
    summary="Profile of the authenticated user",
    responses=get_error_responses(401)
)
async def get_profile(current_user: User = Depends(get_current_user)) -> ProfileResponse:
    return ProfileResponse(
        message="Profile retrieved successfully",
        user=UserPublic.model_validate(current_user)
    )

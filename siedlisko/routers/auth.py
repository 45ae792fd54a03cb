"""
Authentication API endpoints for registration, login and the current user.
"""

from fastapi import APIRouter, Depends, status
from siedlisko.models.user import User
from siedlisko.services.auth import AuthService
from siedlisko.schemas.auth import UserRegister, UserLogin, AuthResponse
from siedlisko.schemas.user import UserPublic
from siedlisko.schemas.error import get_error_responses
from siedlisko.utils.dependencies import get_auth_service, get_current_user


router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    description="Create an account and return an access token for it",
    responses=get_error_responses(409, 422)
)
async def register(
    register_data: UserRegister,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Register a user and log them in.

    Raises:
        DuplicateResourceError: If the email is already registered
        ValidationError: If the registration data is invalid
    """
    user, access_token = await auth_service.register(register_data.model_dump(exclude_unset=True))
    return AuthResponse(access_token=access_token, user=UserPublic.model_validate(user))


@router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate with email and password, returns a JWT access token",
    responses=get_error_responses(401, 422)
)
async def login(
    login_data: UserLogin,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Authenticate user and return an access token.

    Raises:
        InvalidCredentialsError: If credentials are invalid
    """
    user, access_token = await auth_service.login(login_data.model_dump())
    return AuthResponse(access_token=access_token, user=UserPublic.model_validate(user))


@router.get(
    "/me",
    response_model=UserPublic,
    summary="Current user",
    responses=get_error_responses(401)
)
async def get_me(current_user: User = Depends(get_current_user)) -> UserPublic:
    return UserPublic.model_validate(current_user)

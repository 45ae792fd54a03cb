"""
Authentication service for registration, login and token resolution.
"""

from typing import Any, Mapping, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from siedlisko.database import transaction
from siedlisko.repositories.user import UserRepository
from siedlisko.models.user import User
from siedlisko.schemas.auth import UserRegister, UserLogin
from siedlisko.utils.auth import (
    TokenExpired,
    create_access_token,
    dummy_verify_password,
    hash_password,
    verify_password,
    verify_token,
)
from siedlisko.utils.exceptions import (
    DuplicateResourceError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    UnauthorizedError,
)
from siedlisko.utils.validators import validate_payload
from jose import JWTError
import uuid
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service for managing accounts and access tokens.
    Login failures never reveal whether the email is registered.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    def create_token(self, user: User) -> str:
        """Issue an access token carrying the user's id, email and role."""
        return create_access_token(user_id=user.id, email=user.email, role=user.role)

    async def register(self, payload: Mapping[str, Any]) -> Tuple[User, str]:
        """
        Register a new account and log it in.

        Args:
            payload: Raw registration data (email, password, optional name)

        Returns:
            Tuple of (created user, access token)

        Raises:
            ValidationError: If the payload is invalid
            DuplicateResourceError: If the email is already registered
        """
        data = validate_payload(UserRegister, payload, "Registration data is invalid")

        if await self.user_repo.email_exists(data.email):
            logger.warning(f"Registration rejected, email already in use: {data.email}")
            raise DuplicateResourceError("User", data.email)

        try:
            async with transaction(self.db):
                user = await self.user_repo.create_user(
                    email=data.email,
                    hashed_password=hash_password(data.password),
                    name=data.name,
                )
        except IntegrityError:
            # Lost a race against a concurrent registration of the same email
            raise DuplicateResourceError("User", data.email)

        logger.info(f"User registered: {user.email} (ID: {user.id})")
        return user, self.create_token(user)

    async def login(self, payload: Mapping[str, Any]) -> Tuple[User, str]:
        """
        Authenticate with email and password.

        Args:
            payload: Raw login data (email, password)

        Returns:
            Tuple of (authenticated user, access token)

        Raises:
            ValidationError: If the payload is malformed
            InvalidCredentialsError: For an unknown email, a wrong password
                or an inactive account, always with the same message
        """
        data = validate_payload(UserLogin, payload, "Login data is invalid")

        user = await self.user_repo.get_by_email(data.email)
        if user is None:
            dummy_verify_password()
        if user is None or not verify_password(data.password, user.hashed_password) or not user.is_active:
            logger.warning(f"Failed authentication attempt for email: {data.email}")
            raise InvalidCredentialsError()

        logger.info(f"User authenticated successfully: {user.email}")
        return user, self.create_token(user)

    async def get_current_user(self, token: str) -> User:
        """
        Get current user from access token.

        Args:
            token: JWT access token

        Returns:
            Current User object

        Raises:
            TokenExpiredError: If token is expired
            InvalidTokenError: If token is invalid
            UnauthorizedError: If the account no longer exists or is inactive
        """
        try:
            token_payload = verify_token(token, token_type="access")
            user_id = uuid.UUID(token_payload.user_id)
        except TokenExpired:
            raise TokenExpiredError()
        except (JWTError, ValueError) as e:
            raise InvalidTokenError(f"Invalid token: {e}")

        user = await self.user_repo.get_by_id(user_id)
        if user is None or not user.is_active:
            raise UnauthorizedError("User account not found or inactive")

        return user

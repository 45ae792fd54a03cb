"""
User repository for authentication lookups and account creation.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from siedlisko.repositories.base import BaseRepository
from siedlisko.models.user import User, UserRole
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for user accounts."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(
        self,
        email: str,
        hashed_password: str,
        name: Optional[str] = None,
        role: UserRole = UserRole.USER
    ) -> User:
        """
        Create a new user account.

        Args:
            email: Email address, stored lower-cased
            hashed_password: Already hashed password
            name: Optional display name
            role: Account role (defaults to USER)

        Returns:
            Created user instance
        """
        user = await self.create({
            "email": email.lower().strip(),
            "hashed_password": hashed_password,
            "name": name,
            "role": role,
            "is_active": True,
        })
        logger.info(f"Created user: {user.email} (ID: {user.id})")
        return user

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address (case-insensitive).

        Args:
            email: Email address to look up

        Returns:
            User if found, None otherwise
        """
        try:
            query = select(User).where(func.lower(User.email) == email.lower().strip())
            result = await self.db.execute(query)
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise

    async def email_exists(self, email: str) -> bool:
        """Check whether an account with this email is registered."""
        return await self.get_by_email(email) is not None

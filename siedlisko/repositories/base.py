"""
Base repository class with common CRUD operations using async SQLAlchemy.

Repositories only flush; committing or rolling back is left to the caller's
unit of work (see ``siedlisko.database.transaction``) so that several
repository calls can succeed or fail together.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from siedlisko.database import Base
from typing import TypeVar, Generic, Optional, Dict, Any, Type
import uuid
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository class providing common CRUD operations.
    Uses async SQLAlchemy for all database operations with proper error handling.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Initialize repository with model class and database session.

        Args:
            model: SQLAlchemy model class
            db: Async database session
        """
        self.model = model
        self.db = db

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """
        Add a new record and flush it so generated values are available.

        Args:
            obj_in: Dictionary of field values for the new record

        Returns:
            Created model instance
        """
        try:
            db_obj = self.model(**obj_in)
            self.db.add(db_obj)
            await self.db.flush()
            await self.db.refresh(db_obj)
            logger.debug(f"Created {self.model.__name__} with id: {db_obj.id}")
            return db_obj
        except Exception as e:
            logger.error(f"Failed to create {self.model.__name__}: {e}")
            raise

    async def get_by_id(self, id: uuid.UUID) -> Optional[ModelType]:
        """
        Get a record by its ID.

        Args:
            id: UUID of the record to retrieve

        Returns:
            Model instance if found, None otherwise
        """
        try:
            query = select(self.model).where(self.model.id == id)
            result = await self.db.execute(query)
            obj = result.scalar_one_or_none()

            if obj is None:
                logger.debug(f"{self.model.__name__} with id {id} not found")

            return obj
        except Exception as e:
            logger.error(f"Failed to get {self.model.__name__} by id {id}: {e}")
            raise

    async def update(self, db_obj: ModelType, obj_in: Dict[str, Any]) -> ModelType:
        """
        Apply field values to a loaded record and flush.

        Unlike creation, ``None`` values are applied as given so nullable
        columns can be cleared.

        Args:
            db_obj: Persistent instance to modify
            obj_in: Dictionary of field values to set

        Returns:
            The updated instance
        """
        try:
            for field, value in obj_in.items():
                if hasattr(db_obj, field):
                    setattr(db_obj, field, value)
            await self.db.flush()
            logger.debug(f"Updated {self.model.__name__} with id: {db_obj.id}")
            return db_obj
        except Exception as e:
            logger.error(f"Failed to update {self.model.__name__} {db_obj.id}: {e}")
            raise

    async def delete(self, db_obj: ModelType) -> None:
        """
        Delete a loaded record, applying ORM cascades, and flush.

        Args:
            db_obj: Persistent instance to delete
        """
        try:
            await self.db.delete(db_obj)
            await self.db.flush()
            logger.debug(f"Deleted {self.model.__name__} with id: {db_obj.id}")
        except Exception as e:
            logger.error(f"Failed to delete {self.model.__name__} {db_obj.id}: {e}")
            raise

    async def count(self) -> int:
        """Count all records of this model."""
        try:
            result = await self.db.execute(select(func.count(self.model.id)))
            return result.scalar()
        except Exception as e:
            logger.error(f"Failed to count {self.model.__name__} records: {e}")
            raise

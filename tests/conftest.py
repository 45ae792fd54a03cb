"""
Test configuration and fixtures for the Siedlisko listings API.
Provides database fixtures, test data factories, and common test utilities.
"""

import os
import tempfile

# Settings are read once on import, so the test environment must be in place first
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="siedlisko-test-uploads-"))
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import io
import uuid
import pytest
from decimal import Decimal
from typing import AsyncGenerator, Dict, List, Optional
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from starlette.datastructures import Headers
from fastapi import UploadFile

from siedlisko.main import app
from siedlisko.database import Base, get_db
from siedlisko.models.image import ListingImage
from siedlisko.models.listing import (
    AdvertiserType,
    Listing,
    ListingFeature,
    ListingStatus,
    PropertyType,
    Province,
)
from siedlisko.models.user import User, UserRole
from siedlisko.repositories.image import ImageRepository
from siedlisko.repositories.listing import ListingRepository
from siedlisko.repositories.user import UserRepository
from siedlisko.services.auth import AuthService
from siedlisko.services.image import ImageService
from siedlisko.services.listing import ListingService
from siedlisko.utils.auth import create_access_token, hash_password
from siedlisko.utils.dependencies import get_file_storage
from siedlisko.utils.file_utils import FileStorage


TEST_PASSWORD = "testpassword123"


@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def file_storage(tmp_path) -> FileStorage:
    """File storage rooted in a per-test temporary directory."""
    return FileStorage(tmp_path / "uploads")


@pytest.fixture
async def async_client(session_factory, file_storage) -> AsyncGenerator[AsyncClient, None]:
    """Async test client; every request gets its own session on the test database."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_file_storage] = lambda: file_storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def listing_repository(db_session: AsyncSession) -> ListingRepository:
    return ListingRepository(db_session)


@pytest.fixture
def image_repository(db_session: AsyncSession) -> ImageRepository:
    return ImageRepository(db_session)


# Service fixtures
@pytest.fixture
def auth_service(db_session: AsyncSession) -> AuthService:
    return AuthService(db_session)


@pytest.fixture
def listing_service(db_session: AsyncSession, file_storage: FileStorage) -> ListingService:
    return ListingService(db_session, file_storage)


@pytest.fixture
def image_service(db_session: AsyncSession, file_storage: FileStorage) -> ImageService:
    return ImageService(db_session, file_storage)


# Test data helpers
def create_test_image(width: int = 800, height: int = 600, format: str = "JPEG") -> bytes:
    """Create a test image in memory."""
    img = Image.new("RGB", (width, height), color="green")
    img_bytes = io.BytesIO()
    img.save(img_bytes, format=format)
    return img_bytes.getvalue()


def make_upload(
    content: Optional[bytes] = None,
    filename: str = "photo.jpg",
    content_type: str = "image/jpeg"
) -> UploadFile:
    """Build an UploadFile the way FastAPI hands it to the endpoint."""
    if content is None:
        content = create_test_image()
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def valid_listing_data(**overrides) -> Dict:
    """Listing content satisfying every publish rule except the image count."""
    data = {
        "title": "Siedlisko pod lasem z widokiem na jezioro",
        "description": (
            "Drewniany dom z gankiem, stodoła i stary sad. Cisza, las za płotem "
            "i jezioro kilometr dalej."
        ),
        "price": Decimal("350000.00"),
        "city": "Olsztynek",
        "province": Province.WARMINSKO_MAZURSKIE,
        "property_type": PropertyType.SIEDLISKO,
        "advertiser_type": AdvertiserType.PRYWATNY,
        "plot_size": 12000,
        "house_size": 120,
        "features": [ListingFeature.PRZY_LESIE, ListingFeature.PRZY_JEZIORZE],
        "contact_name": "Jan Kowalski",
        "contact_phone": "+48 600 100 200",
        "contact_email": "jan@example.com",
        "negotiable": True,
    }
    data.update(overrides)
    return data


def valid_listing_json(**overrides) -> Dict:
    """Camel-cased request body for a complete listing."""
    data = {
        "title": "Siedlisko pod lasem z widokiem na jezioro",
        "description": (
            "Drewniany dom z gankiem, stodoła i stary sad. Cisza, las za płotem "
            "i jezioro kilometr dalej."
        ),
        "price": 350000,
        "city": "Olsztynek",
        "province": "warmińsko-mazurskie",
        "propertyType": "siedlisko",
        "advertiserType": "prywatny",
        "plotSize": 12000,
        "houseSize": 120,
        "features": ["przy_lesie", "przy_jeziorze"],
        "contactName": "Jan Kowalski",
        "contactPhone": "+48 600 100 200",
        "contactEmail": "jan@example.com",
        "negotiable": True,
    }
    data.update(overrides)
    return data


def auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token(user_id=user.id, email=user.email, role=user.role)
    return {"Authorization": f"Bearer {token}"}


class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    async def create_user(
        session: AsyncSession,
        email: str = None,
        password: str = TEST_PASSWORD,
        name: str = "Test User",
        role: UserRole = UserRole.USER,
        is_active: bool = True
    ) -> User:
        """Create and commit a test user."""
        user = await UserRepository(session).create_user(
            email=email or f"user{uuid.uuid4().hex[:8]}@example.com",
            hashed_password=hash_password(password),
            name=name,
            role=role,
        )
        if not is_active:
            user.is_active = False
        await session.commit()
        return user


class ListingFactory:
    """Factory for creating test listings directly in the database."""

    @staticmethod
    async def create_listing(
        session: AsyncSession,
        owner: User,
        status: ListingStatus = ListingStatus.DRAFT,
        **fields
    ) -> Listing:
        values = {"owner_id": owner.id, "status": status}
        values.update(fields)
        if "features" in values:
            values["features"] = [getattr(f, "value", f) for f in values["features"]]
        listing = await ListingRepository(session).create(values)
        await session.commit()
        return listing


class ImageFactory:
    """Factory for image rows whose files were never written."""

    @staticmethod
    async def create_image(
        session: AsyncSession,
        uploaded_by: Optional[User] = None,
        listing: Optional[Listing] = None,
        display_order: int = 0
    ) -> ListingImage:
        filename = f"{uuid.uuid4()}.jpg"
        image = await ImageRepository(session).create({
            "listing_id": listing.id if listing else None,
            "uploaded_by_id": uploaded_by.id if uploaded_by else None,
            "filename": filename,
            "original_name": "photo.jpg",
            "mime_type": "image/jpeg",
            "file_size": 1024,
            "file_path": FileStorage.public_path(filename),
            "width": 800,
            "height": 600,
            "display_order": display_order,
        })
        await session.commit()
        return image

    @staticmethod
    async def create_images(
        session: AsyncSession,
        count: int,
        uploaded_by: Optional[User] = None,
        listing: Optional[Listing] = None
    ) -> List[ListingImage]:
        return [
            await ImageFactory.create_image(session, uploaded_by, listing, display_order=index)
            for index in range(count)
        ]


# Common test fixtures
@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(db_session, email="owner@example.com", name="Owner")


@pytest.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(db_session, email="other@example.com", name="Other")


@pytest.fixture
async def draft_listing(db_session: AsyncSession, test_user: User) -> Listing:
    return await ListingFactory.create_listing(db_session, test_user, **valid_listing_data())


@pytest.fixture
async def published_listing(db_session: AsyncSession, test_user: User) -> Listing:
    listing = await ListingFactory.create_listing(
        db_session, test_user, status=ListingStatus.PUBLISHED, **valid_listing_data()
    )
    await ImageFactory.create_images(db_session, 2, uploaded_by=test_user, listing=listing)
    return listing

"""
API tests through the ASGI app.
Covers routing, authentication, response shapes and the full listing scenario.
"""

import uuid
import pytest
from httpx import AsyncClient

from siedlisko.config import settings
from tests.conftest import (
    TEST_PASSWORD,
    ImageFactory,
    auth_headers,
    create_test_image,
    valid_listing_json,
)

API = settings.api_v1_prefix


def jpeg_files(count: int, field: str = "images"):
    return [(field, (f"zdjecie{i}.jpg", create_test_image(), "image/jpeg")) for i in range(count)]


class TestHealth:
    """Service endpoints."""

    @pytest.mark.asyncio
    async def test_root(self, async_client: AsyncClient):
        response = await async_client.get("/")

        assert response.status_code == 200
        assert response.json()["api_prefix"] == API
        assert "X-Request-ID" in response.headers

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_format(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/nope")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "HTTP_404"


class TestAuthEndpoints:
    """Registration, login and the current user."""

    @pytest.mark.asyncio
    async def test_register_and_me(self, async_client: AsyncClient):
        response = await async_client.post(f"{API}/auth/register", json={
            "email": "anna@example.com",
            "password": "bezpieczne1",
            "name": "Anna",
        })

        assert response.status_code == 201
        data = response.json()
        assert data["tokenType"] == "bearer"
        assert data["user"]["email"] == "anna@example.com"
        assert "hashedPassword" not in data["user"]

        me = await async_client.get(
            f"{API}/auth/me", headers={"Authorization": f"Bearer {data['accessToken']}"}
        )
        assert me.status_code == 200
        assert me.json()["id"] == data["user"]["id"]

    @pytest.mark.asyncio
    async def test_register_duplicate(self, async_client: AsyncClient, test_user):
        response = await async_client.post(f"{API}/auth/register", json={
            "email": test_user.email,
            "password": "bezpieczne1",
        })

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "CONFLICT"

    @pytest.mark.asyncio
    async def test_register_invalid_body(self, async_client: AsyncClient):
        response = await async_client.post(f"{API}/auth/register", json={"email": "zly", "password": "x"})

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert len(error["details"]) == 2

    @pytest.mark.asyncio
    async def test_login_errors_are_identical(self, async_client: AsyncClient, test_user):
        unknown = await async_client.post(f"{API}/auth/login", json={
            "email": "ktos@example.com", "password": TEST_PASSWORD
        })
        wrong = await async_client.post(f"{API}/auth/login", json={
            "email": test_user.email, "password": "zlehaslo123"
        })

        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json()["error"]["message"] == wrong.json()["error"]["message"]

    @pytest.mark.asyncio
    async def test_login_success(self, async_client: AsyncClient, test_user):
        response = await async_client.post(f"{API}/auth/login", json={
            "email": test_user.email, "password": TEST_PASSWORD
        })

        assert response.status_code == 200
        assert response.json()["user"]["id"] == str(test_user.id)

    @pytest.mark.asyncio
    async def test_protected_route_requires_token(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/users/profile")

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Authentication token required"

    @pytest.mark.asyncio
    async def test_profile(self, async_client: AsyncClient, test_user):
        response = await async_client.get(f"{API}/users/profile", headers=auth_headers(test_user))

        assert response.status_code == 200
        assert response.json()["message"] == "Profile retrieved successfully"
        assert response.json()["user"]["email"] == test_user.email

    @pytest.mark.asyncio
    async def test_invalid_token(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/auth/me", headers={"Authorization": "Bearer zly.token"})
        assert response.status_code == 401


class TestListingEndpoints:
    """Listing routes."""

    @pytest.mark.asyncio
    async def test_create_forces_draft(self, async_client: AsyncClient, test_user):
        response = await async_client.post(
            f"{API}/listings",
            json={"title": "Siedlisko na Kaszubach", "status": "published"},
            headers=auth_headers(test_user),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "draft"
        assert data["ownerId"] == str(test_user.id)
        assert data["images"] == []

    @pytest.mark.asyncio
    async def test_create_requires_auth(self, async_client: AsyncClient):
        response = await async_client.post(f"{API}/listings", json={})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_invalid_field(self, async_client: AsyncClient, test_user):
        response = await async_client.post(
            f"{API}/listings", json={"contactPhone": "abc"}, headers=auth_headers(test_user)
        )

        assert response.status_code == 422
        assert response.json()["error"]["details"][0]["field"].endswith("contactPhone")

    @pytest.mark.asyncio
    async def test_draft_hidden_from_public(self, async_client: AsyncClient, test_user, other_user, draft_listing):
        url = f"{API}/listings/{draft_listing.id}"

        assert (await async_client.get(url)).status_code == 403
        assert (await async_client.get(url, headers=auth_headers(other_user))).status_code == 403
        assert (await async_client.get(url, headers=auth_headers(test_user))).status_code == 200

    @pytest.mark.asyncio
    async def test_missing_listing(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/listings/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_search_query_params(self, async_client: AsyncClient, published_listing):
        matching = await async_client.get(
            f"{API}/listings",
            params=[("province", "warmińsko-mazurskie"), ("features", "przy_lesie"), ("maxPrice", "400000")],
        )
        assert [item["id"] for item in matching.json()] == [str(published_listing.id)]

        empty = await async_client.get(f"{API}/listings", params={"minPlotSize": 50000})
        assert empty.json() == []

    @pytest.mark.asyncio
    async def test_search_inverted_range(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/listings", params={"minPrice": 10, "maxPrice": 5})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_publish_rejected_lists_errors(self, async_client: AsyncClient, test_user, draft_listing):
        response = await async_client.post(
            f"{API}/listings/{draft_listing.id}/publish", headers=auth_headers(test_user)
        )

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "LISTING_NOT_PUBLISHABLE"
        assert error["details"][0]["type"] == "too_few_images"

    @pytest.mark.asyncio
    async def test_non_owner_cannot_delete(self, async_client: AsyncClient, other_user, published_listing):
        response = await async_client.delete(
            f"{API}/listings/{published_listing.id}", headers=auth_headers(other_user)
        )

        assert response.status_code == 403
        remaining = await async_client.get(f"{API}/listings/{published_listing.id}")
        assert remaining.status_code == 200
        assert len(remaining.json()["images"]) == 2

    @pytest.mark.asyncio
    async def test_my_listings(self, async_client: AsyncClient, test_user, draft_listing, published_listing):
        response = await async_client.get(f"{API}/listings/my/all", headers=auth_headers(test_user))

        assert response.status_code == 200
        assert {item["id"] for item in response.json()} == {str(draft_listing.id), str(published_listing.id)}

    @pytest.mark.asyncio
    async def test_own_drafts_by_status(self, async_client: AsyncClient, test_user, draft_listing):
        anonymous = await async_client.get(f"{API}/listings", params={"status": "draft"})
        owner = await async_client.get(f"{API}/listings", params={"status": "draft"}, headers=auth_headers(test_user))

        assert anonymous.json() == []
        assert [item["id"] for item in owner.json()] == [str(draft_listing.id)]


class TestImageEndpoints:
    """Upload, delete and reorder routes."""

    @pytest.mark.asyncio
    async def test_upload_orphans(self, async_client: AsyncClient, test_user):
        response = await async_client.post(
            f"{API}/listings/images/upload", files=jpeg_files(2), headers=auth_headers(test_user)
        )

        assert response.status_code == 201
        images = response.json()
        assert len(images) == 2
        assert all(image["listingId"] is None for image in images)
        assert images[0]["filePath"].startswith("/uploads/listings/")

    @pytest.mark.asyncio
    async def test_upload_single_to_listing(self, async_client: AsyncClient, test_user, draft_listing):
        response = await async_client.post(
            f"{API}/listings/images/upload-single",
            files=jpeg_files(1, field="image"),
            data={"listingId": str(draft_listing.id), "order": "4"},
            headers=auth_headers(test_user),
        )

        assert response.status_code == 201
        assert response.json()["listingId"] == str(draft_listing.id)
        assert response.json()["displayOrder"] == 4

    @pytest.mark.asyncio
    async def test_upload_invalid_listing_id(self, async_client: AsyncClient, test_user):
        response = await async_client.post(
            f"{API}/listings/images/upload",
            files=jpeg_files(1),
            data={"listingId": "nie-uuid"},
            headers=auth_headers(test_user),
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_upload_rejects_non_image(self, async_client: AsyncClient, test_user):
        response = await async_client.post(
            f"{API}/listings/images/upload",
            files=[("images", ("umowa.pdf", b"%PDF-1.4", "application/pdf"))],
            headers=auth_headers(test_user),
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "BAD_REQUEST"

    @pytest.mark.asyncio
    async def test_delete_image(self, async_client: AsyncClient, db_session, test_user):
        image = await ImageFactory.create_image(db_session, test_user)

        response = await async_client.delete(
            f"{API}/listings/images/{image.id}", headers=auth_headers(test_user)
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Image deleted successfully"}

    @pytest.mark.asyncio
    async def test_reorder_unknown_image(self, async_client: AsyncClient, test_user, published_listing):
        response = await async_client.post(
            f"{API}/listings/{published_listing.id}/images/reorder",
            json={"imageIds": [str(uuid.uuid4())]},
            headers=auth_headers(test_user),
        )

        assert response.status_code == 422


class TestListingScenario:
    """A user's full journey from upload to deletion."""

    @pytest.mark.asyncio
    async def test_full_lifecycle(self, async_client: AsyncClient, file_storage):
        registered = await async_client.post(f"{API}/auth/register", json={
            "email": "sprzedawca@example.com", "password": "bezpieczne1", "name": "Sprzedawca"
        })
        headers = {"Authorization": f"Bearer {registered.json()['accessToken']}"}

        # Photos first, listing form second
        uploaded = await async_client.post(
            f"{API}/listings/images/upload", files=jpeg_files(3), headers=headers
        )
        image_ids = [image["id"] for image in uploaded.json()]

        created = await async_client.post(
            f"{API}/listings",
            json=valid_listing_json(imageIds=image_ids[:2]),
            headers=headers,
        )
        assert created.status_code == 201
        listing_id = created.json()["id"]
        assert [image["id"] for image in created.json()["images"]] == image_ids[:2]

        # Not public yet
        assert (await async_client.get(f"{API}/listings")).json() == []

        published = await async_client.post(f"{API}/listings/{listing_id}/publish", headers=headers)
        assert published.status_code == 200
        assert published.json()["status"] == "published"
        assert published.json()["publishedAt"] is not None

        public = await async_client.get(f"{API}/listings")
        assert [item["id"] for item in public.json()] == [listing_id]

        updated = await async_client.put(
            f"{API}/listings/{listing_id}",
            json={"price": 325000, "imageIds": [image_ids[2], image_ids[0], image_ids[1]]},
            headers=headers,
        )
        assert updated.status_code == 200
        assert updated.json()["price"] == 325000
        assert updated.json()["status"] == "published"
        assert [image["id"] for image in updated.json()["images"]] == [image_ids[2], image_ids[0], image_ids[1]]

        reordered = await async_client.post(
            f"{API}/listings/{listing_id}/images/reorder",
            json={"imageIds": [image_ids[1], image_ids[2]]},
            headers=headers,
        )
        assert reordered.json() == {"message": "Images reordered successfully"}

        fetched = await async_client.get(f"{API}/listings/{listing_id}")
        assert [image["id"] for image in fetched.json()["images"]] == [image_ids[1], image_ids[2], image_ids[0]]
        assert [image["displayOrder"] for image in fetched.json()["images"]] == [0, 1, 2]

        archived = await async_client.post(f"{API}/listings/{listing_id}/archive", headers=headers)
        assert archived.json()["status"] == "archived"
        assert (await async_client.get(f"{API}/listings/{listing_id}")).status_code == 403

        deleted = await async_client.delete(f"{API}/listings/{listing_id}", headers=headers)
        assert deleted.json() == {"message": "Listing deleted successfully"}
        assert (await async_client.get(f"{API}/listings/{listing_id}", headers=headers)).status_code == 404
        assert list(file_storage.listings_dir.iterdir()) == []

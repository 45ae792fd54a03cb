"""
Tests for listing, auth and filter schemas.
Covers the partial draft shape, the strict publish shape and camelCase aliases.
"""

import uuid
import pytest
from decimal import Decimal
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_snake

from siedlisko.models.listing import ListingFeature, ListingStatus, Province
from siedlisko.schemas.auth import UserLogin, UserRegister
from siedlisko.schemas.listing import (
    ListingBase,
    ListingCreate,
    ListingFilters,
    ListingPublish,
    ListingUpdate,
)
from siedlisko.utils.exceptions import ValidationError
from siedlisko.utils.validators import field_errors_from, validate_payload
from tests.conftest import valid_listing_data, valid_listing_json


def error_fields(exc: PydanticValidationError) -> set:
    return {to_snake(error["field"]) for error in field_errors_from(exc)}


class TestListingBase:
    """Strict listing shape."""

    def test_complete_listing_is_valid(self):
        listing = ListingBase.model_validate(valid_listing_data())
        assert listing.province == Province.WARMINSKO_MAZURSKIE
        assert listing.price == Decimal("350000.00")

    def test_accepts_camel_case_body(self):
        listing = ListingBase.model_validate(valid_listing_json())
        assert listing.contact_phone == "+48 600 100 200"
        assert listing.plot_size == 12000

    def test_missing_required_fields_are_all_reported(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            ListingBase.model_validate({"title": "Siedlisko na sprzedaż"})

        fields = error_fields(exc_info.value)
        assert {"description", "price", "city", "province", "property_type",
                "advertiser_type", "contact_name", "contact_phone"} <= fields

    @pytest.mark.parametrize("title", ["krótki", "x" * 101])
    def test_title_length(self, title):
        with pytest.raises(PydanticValidationError):
            ListingBase.model_validate(valid_listing_data(title=title))

    def test_description_minimum_length(self):
        with pytest.raises(PydanticValidationError):
            ListingBase.model_validate(valid_listing_data(description="Za krótki opis"))

    @pytest.mark.parametrize("price", [Decimal("0"), Decimal("-10"), Decimal("100000001")])
    def test_price_bounds(self, price):
        with pytest.raises(PydanticValidationError):
            ListingBase.model_validate(valid_listing_data(price=price))

    def test_price_precision_not_limited(self):
        listing = ListingCreate.model_validate({"price": 1234.567})
        assert listing.price == Decimal("1234.567")

    @pytest.mark.parametrize("phone", ["12345", "abc-def-ghij", "+48 600 100 200 300 400 500"])
    def test_invalid_phone(self, phone):
        with pytest.raises(PydanticValidationError):
            ListingBase.model_validate(valid_listing_data(contact_phone=phone))

    def test_unknown_province_rejected(self):
        with pytest.raises(PydanticValidationError):
            ListingBase.model_validate(valid_listing_data(province="bawaria"))

    def test_features_are_deduplicated(self):
        listing = ListingBase.model_validate(valid_listing_data(
            features=["przy_lesie", "przy_lesie", "z_widokiem"]
        ))
        assert listing.features == [ListingFeature.PRZY_LESIE, ListingFeature.Z_WIDOKIEM]

    def test_blank_contact_email_becomes_none(self):
        listing = ListingBase.model_validate(valid_listing_data(contact_email="  "))
        assert listing.contact_email is None

    def test_invalid_contact_email(self):
        with pytest.raises(PydanticValidationError):
            ListingBase.model_validate(valid_listing_data(contact_email="not-an-email"))

    def test_optional_sizes(self):
        listing = ListingBase.model_validate(valid_listing_data(plot_size=None, house_size=None))
        assert listing.plot_size is None
        assert listing.house_size is None


class TestListingPublish:
    """Publish shape requires images on top of complete content."""

    def test_two_images_are_enough(self):
        listing = ListingPublish.model_validate(
            valid_listing_data(image_ids=[uuid.uuid4(), uuid.uuid4()])
        )
        assert len(listing.image_ids) == 2

    @pytest.mark.parametrize("count", [0, 1])
    def test_too_few_images(self, count):
        with pytest.raises(PydanticValidationError) as exc_info:
            ListingPublish.model_validate(
                valid_listing_data(image_ids=[uuid.uuid4() for _ in range(count)])
            )

        errors = field_errors_from(exc_info.value)
        assert len(errors) == 1
        assert to_snake(errors[0]["field"]) == "image_ids"
        assert errors[0]["message"] == "At least 2 images are required to publish"
        assert errors[0]["type"] == "too_few_images"


class TestListingCreate:
    """Draft creation shape."""

    def test_empty_payload_is_valid(self):
        listing = ListingCreate.model_validate({})
        assert listing.status == ListingStatus.DRAFT
        assert listing.image_ids == []
        assert listing.listing_values() == {}

    def test_supplied_fields_are_still_constrained(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            ListingCreate.model_validate({"title": "krótki", "price": -1})
        assert error_fields(exc_info.value) == {"title", "price"}

    def test_only_supplied_fields_become_values(self):
        listing = ListingCreate.model_validate({"title": "Dom z ogrodem na wsi", "plotSize": 900})
        assert listing.listing_values() == {"title": "Dom z ogrodem na wsi", "plot_size": 900}

    def test_published_status_accepted_as_request(self):
        listing = ListingCreate.model_validate({"status": "published"})
        assert listing.status == ListingStatus.PUBLISHED
        assert "status" not in listing.listing_values()

    def test_archived_status_rejected(self):
        with pytest.raises(PydanticValidationError):
            ListingCreate.model_validate({"status": "archived"})

    def test_explicit_null_rejected_for_required_field(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            ListingCreate.model_validate({"title": None})
        assert field_errors_from(exc_info.value)[0]["type"] == "null_not_allowed"

    def test_explicit_null_allowed_for_optional_column(self):
        listing = ListingCreate.model_validate({"plotSize": None, "contactEmail": None})
        assert listing.listing_values() == {"plot_size": None, "contact_email": None}


class TestListingUpdate:
    """Partial update shape."""

    def test_image_ids_absent_means_unchanged(self):
        update = ListingUpdate.model_validate({"city": "Gdańsk"})
        assert update.image_ids is None

    def test_empty_image_ids_means_clear(self):
        update = ListingUpdate.model_validate({"imageIds": []})
        assert update.image_ids == []

    def test_status_is_ignored(self):
        update = ListingUpdate.model_validate({"status": "published"})
        assert "status" not in update.listing_values()


class TestListingFilters:
    """Search filter ranges."""

    def test_inverted_price_range(self):
        with pytest.raises(PydanticValidationError):
            ListingFilters(min_price=Decimal("500"), max_price=Decimal("100"))

    def test_inverted_plot_range(self):
        with pytest.raises(PydanticValidationError):
            ListingFilters(min_plot_size=5000, max_plot_size=1000)

    def test_equal_bounds_allowed(self):
        filters = ListingFilters(min_price=Decimal("100"), max_price=Decimal("100"))
        assert filters.min_price == filters.max_price


class TestAuthSchemas:
    """Registration and login payloads."""

    def test_register_normalizes_email(self):
        data = UserRegister.model_validate({"email": "Jan.Kowalski@Example.com", "password": "sekret123"})
        assert data.email == "jan.kowalski@example.com"
        assert data.name is None

    def test_register_short_password(self):
        with pytest.raises(PydanticValidationError):
            UserRegister.model_validate({"email": "jan@example.com", "password": "short"})

    def test_register_name_length(self):
        with pytest.raises(PydanticValidationError):
            UserRegister.model_validate({"email": "jan@example.com", "password": "sekret123", "name": "x" * 81})

    def test_login_invalid_email(self):
        with pytest.raises(PydanticValidationError):
            UserLogin.model_validate({"email": "jan", "password": "sekret123"})


class TestValidatePayload:
    """Bridge from schema errors to the API ValidationError."""

    def test_raises_api_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(ListingCreate, {"price": 0}, "Listing data is invalid")

        assert exc_info.value.detail == "Listing data is invalid"
        assert exc_info.value.field_errors[0]["field"] == "price"

    def test_non_mapping_payload(self):
        with pytest.raises(ValidationError):
            validate_payload(ListingCreate, ["title"])

    def test_none_payload_is_empty(self):
        assert validate_payload(ListingCreate, None).listing_values() == {}

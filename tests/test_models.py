"""Tests for data models."""

import pytest
from pydantic import ValidationError

from wgscraper.models import (
    Availability,
    BlockedResult,
    City,
    Contact,
    Flat,
    FlatshareDetails,
    ListingPage,
    NotApplicable,
    RentDetails,
    RentDetailsVariant,
    TransportResponse,
)


def make_flat(**overrides: object) -> Flat:
    data: dict = {
        "url": "https://www.wg-gesucht.de/wg-zimmer-in-Berlin.1.html",
        "contact": Contact(name_image="https://x/name.png", phone_number=False, online_tour=True),
        "room_size": 12,
        "rent": 300,
        "rent_details": RentDetails(
            variant=RentDetailsVariant.BASIC,
            rent=250,
            utility=50,
            additional_costs=NotApplicable.NA,
        ),
        "address": "Hauptstraße 1 10115 Berlin",
        "availability": Availability(available_from="01.01.2022", online="1 Tag"),
        "flatshare_details": FlatshareDetails(details=["2er WG"], looking_for="egal"),
        "property_details": [],
    }
    data.update(overrides)
    return Flat(**data)


class TestFlat:
    def test_optional_parts_default_to_none(self) -> None:
        flat = make_flat()
        assert flat.title is None
        assert flat.title_image is None
        assert flat.description is None
        assert flat.flatmate_genders is None
        assert flat.contact.profile_image is None
        assert flat.rent_details.deposit is None
        assert flat.rent_details.ransom is None

    def test_flat_is_immutable(self) -> None:
        flat = make_flat()
        with pytest.raises(ValidationError):
            flat.rent = 999  # type: ignore[misc]

    def test_not_applicable_serializes_as_printed(self) -> None:
        data = make_flat().model_dump(mode="json")
        assert data["rent_details"]["additional_costs"] == "n.a."
        assert data["rent_details"]["utility"] == 50
        assert data["rent_details"]["variant"] == "basic"

    def test_serialization_round_trip(self) -> None:
        flat = make_flat(title="Zimmer")
        restored = Flat.model_validate_json(flat.model_dump_json())
        assert restored == flat
        assert restored.rent_details.additional_costs is NotApplicable.NA

    def test_missing_required_field(self) -> None:
        with pytest.raises(ValidationError):
            Flat(url="https://x")  # type: ignore[call-arg]


class TestFetchModels:
    @pytest.mark.parametrize(
        ("status", "expected"), [(200, True), (204, True), (301, False), (404, False), (503, False)]
    )
    def test_transport_response_ok(self, status: int, expected: bool) -> None:
        assert TransportResponse(status_code=status, body="").ok is expected

    def test_blocked_result(self) -> None:
        blocked = BlockedResult(url="https://x", attempts=4)
        assert blocked == BlockedResult(url="https://x", attempts=4)
        assert blocked.attempts == 4


class TestListingModels:
    def test_listing_page_defaults(self) -> None:
        page = ListingPage(url="https://x", declared_results=0)
        assert page.current_page == 1
        assert page.total_pages == 1
        assert page.item_urls == []
        assert page.next_page_url is None

    def test_city_state_optional(self) -> None:
        assert City(id="8", name="Berlin").state is None

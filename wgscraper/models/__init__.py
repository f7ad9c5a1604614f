"""Data models for wgscraper."""

from wgscraper.models.fetch import BlockedResult, TransportResponse
from wgscraper.models.flat import (
    Availability,
    Contact,
    DescriptionBlock,
    Flat,
    FlatshareDetails,
    NotApplicable,
    PropertyDetail,
    RentDetails,
    RentDetailsVariant,
)
from wgscraper.models.listing import City, ListingPage

__all__ = [
    "Availability",
    "BlockedResult",
    "City",
    "Contact",
    "DescriptionBlock",
    "Flat",
    "FlatshareDetails",
    "ListingPage",
    "NotApplicable",
    "PropertyDetail",
    "RentDetails",
    "RentDetailsVariant",
    "TransportResponse",
]

"""Flat ad record models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class NotApplicable(str, Enum):
    """Marks a monetary field the ad explicitly declares as not applicable."""

    NA = "n.a."


class RentDetailsVariant(str, Enum):
    """Observed shapes of the cost breakdown table."""

    BASIC = "basic"  # rent, utilities, other costs
    WITH_DEPOSIT = "with_deposit"  # additionally deposit and optional buyout


class Contact(BaseModel):
    """Contact panel of an ad."""

    model_config = ConfigDict(frozen=True)

    name_image: str
    profile_image: str | None = None
    phone_number: bool
    online_tour: bool


class RentDetails(BaseModel):
    """Cost breakdown from the "Kosten" section, in euros."""

    model_config = ConfigDict(frozen=True)

    variant: RentDetailsVariant
    rent: int
    utility: int | NotApplicable
    additional_costs: int | NotApplicable
    deposit: int | None = None
    ransom: int | NotApplicable | None = None  # "Ablösevereinbarung"


class Availability(BaseModel):
    """Availability window; dates are kept as printed (dd.mm.yyyy)."""

    model_config = ConfigDict(frozen=True)

    available_from: str
    available_to: str | None = None
    online: str  # e.g. "3 Stunden" or a date


class FlatshareDetails(BaseModel):
    """The "WG-Details" section."""

    model_config = ConfigDict(frozen=True)

    details: list[str]
    looking_for: str


class PropertyDetail(BaseModel):
    """One tag of the "Angaben zum Objekt" section."""

    model_config = ConfigDict(frozen=True)

    icon: str  # glyphicon name, e.g. "glyphicons-building"
    text: str


class DescriptionBlock(BaseModel):
    """A free-text chapter of the ad description."""

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    text: str


class Flat(BaseModel):
    """A fully parsed flat ad.

    Built once per successfully parsed document. Optional parts are ``None``
    when the ad does not carry them; they are never filled with placeholders.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    contact: Contact
    title: str | None = None
    flatmate_genders: list[str] | None = None
    title_image: str | None = None
    description: list[DescriptionBlock] | None = None
    room_size: int  # m²
    rent: int
    rent_details: RentDetails
    address: str
    availability: Availability
    flatshare_details: FlatshareDetails
    property_details: list[PropertyDetail]

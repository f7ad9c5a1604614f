"""Search listing and city index models."""

from pydantic import BaseModel, ConfigDict, Field


class ListingPage(BaseModel):
    """What the listing walker read from one search-results page."""

    model_config = ConfigDict(frozen=True)

    url: str
    current_page: int = 1
    total_pages: int = 1
    declared_results: int
    item_urls: list[str] = Field(default_factory=list)
    next_page_url: str | None = None


class City(BaseModel):
    """A city known to the site, keyed by its numeric id."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    state: str | None = None  # federal state; None when discovered from the overview

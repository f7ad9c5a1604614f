"""Discovering the site's city ids from its city overview pages."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from wgscraper.extraction.patterns import assert_match, normalize_whitespace
from wgscraper.fetching.fanout import gather_all_or_nothing
from wgscraper.fetching.fetcher import ResilientFetcher
from wgscraper.models.fetch import BlockedResult
from wgscraper.models.listing import City
from wgscraper.selection.document import Document

logger = logging.getLogger(__name__)

CITY_URL = re.compile(
    r"^((https?://www\.wg-gesucht\.de)?/?)"
    r"(anzeigen|wg-zimmer|1-zimmer-wohnungen|wohnungen|haeuser)-in-"
    r"(?P<name>[^\d]+)\.(?P<id>\d+)(\.\d+\.\d+\.\d+)?\.html\Z"
)
STATE_HEADING = re.compile(r"^Leben und Wohnen in (.+)\Z")
STATE_CITY_LINKS = 'a[href^="https://www.wg-gesucht.de/anzeigen-in-"]'
OVERVIEW_CITY_LINKS = "a.titel_link"


def city_id_from_url(url: str) -> str:
    """Extract the numeric city id from a city or search URL.

    Raises:
        PatternMismatchError: If the URL does not have the expected shape.
    """
    return assert_match(url, CITY_URL, "id")


def read_state_page(document: Document) -> dict[str, City]:
    """Cities linked from a federal state page, keyed by id."""
    heading = document.root.query("h1").exactly_one().text().strip()
    match = STATE_HEADING.match(heading)
    state = match.group(1) if match else None

    cities: dict[str, City] = {}
    for link in document.root.query(STATE_CITY_LINKS).items():
        city_id = city_id_from_url(link.attribute("href"))
        cities[city_id] = City(id=city_id, name=normalize_whitespace(link.text()), state=state)
    return cities


def read_overview_page(document: Document) -> dict[str, City]:
    """Cities linked from the shared-flat overview page, keyed by id."""
    cities: dict[str, City] = {}
    for link in document.root.query(OVERVIEW_CITY_LINKS).items():
        name = normalize_whitespace(link.text())
        name = re.sub(r"^Wohnungsmarkt\s+", "", name)
        name = re.sub(r"\s*:\s*$", "", name)
        city_id = city_id_from_url(link.attribute("href"))
        cities[city_id] = City(id=city_id, name=name, state=None)
    return cities


class CityIndexer:
    """Builds a city index from independent overview pages, fetched concurrently."""

    def __init__(self, fetcher: ResilientFetcher) -> None:
        self._fetcher = fetcher

    async def discover_state(self, url: str) -> list[City] | BlockedResult:
        """Cities linked from one federal state page."""
        result = await self._fetcher.fetch(url, read_state_page)
        if isinstance(result, BlockedResult):
            return result
        return list(result.values())

    async def discover_overview(self, url: str) -> list[City] | BlockedResult:
        """Cities linked from the overview page; their state is unknown."""
        result = await self._fetcher.fetch(url, read_overview_page)
        if isinstance(result, BlockedResult):
            return result
        return list(result.values())

    async def build_index(
        self, state_urls: Iterable[str], overview_url: str | None = None
    ) -> list[City] | BlockedResult:
        """Fetch all pages concurrently and merge their cities by id.

        Any failing page fails the whole index and cancels the pages still
        being fetched. State pages take precedence over the overview page,
        which carries no state names.

        Args:
            state_urls: Federal state pages.
            overview_url: Optional page listing cities without their state.

        Returns:
            The merged cities, or the BlockedResult of a page that stayed blocked.
        """
        discoveries = []
        if overview_url is not None:
            discoveries.append(self.discover_overview(overview_url))
        discoveries.extend(self.discover_state(url) for url in state_urls)

        results = await gather_all_or_nothing(*discoveries)

        index: dict[str, City] = {}
        for result in results:
            if isinstance(result, BlockedResult):
                return result
            for city in result:
                index[city.id] = city

        logger.info("Indexed %d cities from %d page(s)", len(index), len(results))
        return list(index.values())

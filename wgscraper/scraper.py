"""Caller-facing entry points."""
from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from functools import partial

from wgscraper.assembly.flat import FlatAssembler
from wgscraper.config import AppConfig, SiteConfig
from wgscraper.fetching.fanout import gather_all_or_nothing
from wgscraper.fetching.fetcher import ResilientFetcher
from wgscraper.fetching.transport import HttpxTransport, TorIdentityRotator
from wgscraper.listing.cities import CityIndexer
from wgscraper.listing.walker import ListingWalker
from wgscraper.models.fetch import BlockedResult
from wgscraper.models.flat import Flat
from wgscraper.models.listing import City


class Scraper:
    """Fetches flat records and discovers ad URLs.

    Every call either returns its result, returns a BlockedResult when the
    site kept serving challenge pages, or raises. Nothing is returned
    partially.

    Args:
        fetcher: The resilient fetcher all documents go through.
        site: Site configuration.
        on_close: Called by :meth:`aclose` to release the transport.
    """

    def __init__(
        self,
        fetcher: ResilientFetcher,
        site: SiteConfig | None = None,
        on_close: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        site = site or SiteConfig()
        self._fetcher = fetcher
        self._assembler = FlatAssembler(site)
        self._walker = ListingWalker(fetcher, site)
        self._indexer = CityIndexer(fetcher)
        self._on_close = on_close

    @classmethod
    def from_config(cls, config: AppConfig) -> Scraper:
        """Wire up an httpx transport and a Tor identity rotator from config.

        The Tor control password comes from ``config`` and stays scoped to
        this scraper's rotator.
        """
        transport = HttpxTransport.from_config(config.fetcher, config.tor)
        rotator = TorIdentityRotator.from_config(config.tor, config.tor_password)
        fetcher = ResilientFetcher.from_config(config.fetcher, transport, rotator)
        return cls(fetcher, site=config.site, on_close=transport.aclose)

    async def __aenter__(self) -> Scraper:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._on_close is not None:
            await self._on_close()

    async def fetch_structured_record(self, url: str) -> Flat | BlockedResult:
        """Fetch and parse one ad page.

        Raises:
            TransportError: If the page could not be retrieved.
            RecordAssemblyError: If the page does not match the expected schema.
        """
        return await self._fetcher.fetch(url, partial(self._assembler.assemble, url=url))

    async def fetch_structured_records(self, urls: Iterable[str]) -> list[Flat | BlockedResult]:
        """Fetch several independent ad pages concurrently.

        The first error fails the whole batch and cancels the fetches still running.
        """
        return await gather_all_or_nothing(*(self.fetch_structured_record(u) for u in urls))

    async def discover_listing_urls(self, url: str) -> list[str] | BlockedResult:
        """Collect the ad URLs of all result pages of a search."""
        return await self._walker.walk(url)

    async def build_city_index(
        self, state_urls: Iterable[str], overview_url: str | None = None
    ) -> list[City] | BlockedResult:
        """Index the site's cities from the given overview pages."""
        return await self._indexer.build_index(state_urls, overview_url)

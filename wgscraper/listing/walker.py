"""Walking paginated search results."""

from __future__ import annotations

import logging
import re
from functools import partial
from urllib.parse import urljoin

from wgscraper.config import SiteConfig
from wgscraper.errors import CardinalityError
from wgscraper.extraction.patterns import assert_match
from wgscraper.fetching.fetcher import ResilientFetcher
from wgscraper.models.fetch import BlockedResult
from wgscraper.models.listing import ListingPage
from wgscraper.selection.document import Document
from wgscraper.selection.selection import Selection

logger = logging.getLogger(__name__)

DECLARED_RESULTS = re.compile(r":\s+(\d+)\s+Angebote?\Z")
NEXT_PAGE_LABEL = "»"


def _page_numbers(selection: Selection) -> list[int]:
    # Arrow links share the pagination classes but carry no number
    return [int(text.strip()) for text in selection.texts() if text.strip().isdigit()]


class ListingWalker:
    """Collects ad URLs from a search, page by page.

    The site offers no way to address a results page by number, so the
    walker follows the "next page" link until there is none. Pages are
    fetched strictly one after another. There is no cycle detection and no
    deduplication; both are left to the caller.

    Args:
        fetcher: Fetcher used for every results page.
        site: Site configuration; item links are resolved against its base URL.
    """

    def __init__(self, fetcher: ResilientFetcher, site: SiteConfig | None = None) -> None:
        self._fetcher = fetcher
        self._site = site or SiteConfig()

    def read_page(self, document: Document, url: str) -> ListingPage:
        """Read pagination, result count, and item links from one results page.

        Single-page results have no pagination bar; page number and page
        count then default to 1.

        Raises:
            CardinalityError: If there is not exactly one ``h1`` or the page
                links to more than one distinct next page.
            PatternMismatchError: If the ``h1`` does not state a result count.
        """
        root = document.root
        current_page = max([1, *_page_numbers(root.query(".pagination .active"))])
        total_pages = max(
            [1, *_page_numbers(root.query(".pagination .a-pagination, .pagination .active"))]
        )

        heading = root.query("h1").exactly_one().text().strip()
        declared = int(assert_match(heading, DECLARED_RESULTS, 1))

        items = [
            urljoin(self._site.base_url, href)
            for href in root.query(".offer_list_item h3 a[href]").attributes("href")
        ]

        next_links = root.query('.pagination a[href]:not([href=""])').filter(
            lambda node: node.get_text().strip() == NEXT_PAGE_LABEL
        )
        # Top and bottom pagination bars repeat the same link
        next_hrefs = list(dict.fromkeys(next_links.attributes("href")))
        if len(next_hrefs) > 1:
            raise CardinalityError(
                f"Found {len(next_hrefs)} different next-page links",
                count=len(next_hrefs),
                provenance=next_links.provenance,
            )

        return ListingPage(
            url=url,
            current_page=current_page,
            total_pages=total_pages,
            declared_results=declared,
            item_urls=items,
            next_page_url=urljoin(self._site.base_url, next_hrefs[0]) if next_hrefs else None,
        )

    async def walk(self, url: str) -> list[str] | BlockedResult:
        """Collect the item URLs of all pages, starting at ``url``.

        Returns:
            Item URLs in page order, or the BlockedResult of the first page
            that stayed blocked.
        """
        collected: list[str] = []
        declared: int | None = None
        page_url: str | None = url

        while page_url is not None:
            page = await self._fetcher.fetch(page_url, partial(self.read_page, url=page_url))
            if isinstance(page, BlockedResult):
                return page

            logger.info(
                "Page %d of %d / %d offer(s) in total",
                page.current_page,
                page.total_pages,
                page.declared_results,
            )
            collected.extend(page.item_urls)
            declared = page.declared_results
            page_url = page.next_page_url

        if declared is not None and declared != len(collected):
            logger.warning(
                "Search %s declared %d offer(s) but %d link(s) were collected",
                url,
                declared,
                len(collected),
            )
        return collected

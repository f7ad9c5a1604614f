"""Parsed HTML documents."""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from wgscraper.errors import MissingDataError
from wgscraper.selection.selection import Selection


class Document:
    """An immutable parsed HTML document.

    Consumers only ever see the tree through :class:`Selection` objects
    rooted at :attr:`root`; there is no mutation API.

    Args:
        markup: Raw HTML text.
        url: Where the markup was retrieved from, if anywhere.

    Raises:
        MissingDataError: If the markup contains no element at all.
    """

    __slots__ = ("_root", "_url")

    def __init__(self, markup: str, url: str | None = None) -> None:
        soup = BeautifulSoup(markup, "lxml")
        root = soup.find(True, recursive=False)
        if not isinstance(root, Tag):
            raise MissingDataError(f"Document from {url or '<markup>'} has no root element")
        self._root = root
        self._url = url

    @classmethod
    def parse(cls, markup: str, url: str | None = None) -> Document:
        return cls(markup, url)

    @property
    def url(self) -> str | None:
        return self._url

    @property
    def root(self) -> Selection:
        """Selection over the root element with an empty provenance trail."""
        return Selection([self._root])

    def __repr__(self) -> str:
        return f"Document(url={self._url!r})"

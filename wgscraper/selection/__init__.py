"""Provenance-tracking selection over parsed HTML."""

from wgscraper.selection.document import Document
from wgscraper.selection.selection import Selection, SingleSelection

__all__ = ["Document", "Selection", "SingleSelection"]

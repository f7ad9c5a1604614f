"""Locating ad sections by heading and checking the section inventory."""

from __future__ import annotations

from collections.abc import Collection

from wgscraper.errors import CardinalityError, SchemaDriftError
from wgscraper.selection.document import Document
from wgscraper.selection.selection import SingleSelection

SECTION_HEADING = "h3:not(.truncate_title)"
# Description chapters (div#freitext_*) carry their own h3 titles
TOP_LEVEL_SECTION_HEADING = ":not([id^=freitext_]) > h3:not(.truncate_title)"

KNOWN_SECTIONS: frozenset[str] = frozenset(
    {
        "Zimmergröße",
        "Gesamtmiete",
        "Kosten",
        "Adresse",
        "Verfügbarkeit",
        "WG-Details",
        "Angaben zum Objekt",
        "Karte",  # ignored
        "Kontakt",  # ignored
        "",  # ignored, occurs for ads without photos
    }
)


def find_section(document: Document, name: str, climb: int = 1) -> SingleSelection:
    """Find the container of the section headed ``name``.

    Args:
        document: The ad page.
        name: Exact (stripped) heading text.
        climb: Number of ancestor steps from the heading to the section
            container; 0 returns the heading itself.

    Returns:
        Single-element selection of the section container.

    Raises:
        CardinalityError: If the heading does not occur exactly once.
        MissingDataError: If the heading has fewer than ``climb`` ancestors.
    """
    headings = document.root.query(SECTION_HEADING).filter(
        lambda node: node.get_text().strip() == name
    )
    try:
        heading = headings.exactly_one()
    except CardinalityError as exc:
        raise CardinalityError(
            f"Malformed document: section '{name}' occurs {exc.count} time(s), expected once",
            count=exc.count,
            provenance=exc.provenance,
        ) from exc

    if climb == 0:
        return heading
    return heading.parent(climb)


def check_section_inventory(
    document: Document, known: Collection[str] = KNOWN_SECTIONS
) -> list[str]:
    """Assert that every top-level section heading is a known one.

    Returns:
        The (stripped) headings found, in document order.

    Raises:
        SchemaDriftError: On the first heading missing from ``known``.
    """
    found: list[str] = []
    for heading in document.root.query(TOP_LEVEL_SECTION_HEADING).items():
        name = heading.text().strip()
        if name not in known:
            raise SchemaDriftError(name, heading.provenance)
        found.append(name)
    return found

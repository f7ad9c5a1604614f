"""Assembling a Flat record from an ad page."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import TypeVar

from wgscraper.assembly.sections import check_section_inventory, find_section
from wgscraper.config import SiteConfig
from wgscraper.errors import (
    CardinalityError,
    ExtractionError,
    RecordAssemblyError,
    SchemaDriftError,
)
from wgscraper.extraction.costs import parse_cost, parse_cost_or_na
from wgscraper.extraction.patterns import (
    assert_match,
    compile_pattern,
    normalize_whitespace,
)
from wgscraper.models.flat import (
    Availability,
    Contact,
    DescriptionBlock,
    Flat,
    FlatshareDetails,
    PropertyDetail,
    RentDetails,
    RentDetailsVariant,
)
from wgscraper.selection.document import Document
from wgscraper.selection.selection import SingleSelection

logger = logging.getLogger(__name__)

T = TypeVar("T")

_COST = r"[0-9]+€"
_COST_OR_NA = r"[0-9]+€|n\.a\."

RENT_DETAILS_BASIC = compile_pattern(
    rf"Miete:\s*(?P<rent>{_COST})",
    rf"Nebenkosten:\s*\D*?\s*(?P<utility>{_COST_OR_NA})",
    rf"Sonstige Kosten:\s*(?P<additional_costs>{_COST_OR_NA})",
)

RENT_DETAILS_WITH_DEPOSIT = compile_pattern(
    rf"Miete:\s*(?P<rent>{_COST})",
    rf"Nebenkosten:\s*\D*?\s*(?P<utility>{_COST_OR_NA})",
    rf"Sonstige Kosten:\s*(?P<additional_costs>{_COST_OR_NA})",
    rf"Kaution:\s*(?P<deposit>{_COST})",
    rf"(?:Ablösevereinbarung:\s*(?P<_ransom>{_COST_OR_NA}))?",
)

AVAILABILITY = compile_pattern(
    r"frei ab:\s*(?P<available_from>[0-9.]+)",
    r"(?:frei bis:\s*(?P<_available_to>[0-9.]+))?",
    r"Online:\s*(?P<online>\d+ (?:Sekunden?|Minuten?|Stunden?|Tage?)|[0-9.]+)",
)

ROOM_SIZE = re.compile(r"^([1-9][0-9]*)m²\Z")
PROFILE_IMAGE_STYLE = re.compile(r"background-image: url\('(.*)'\)")
ICON_CLASS_NOISE = re.compile(r"^glyphicons | noprint$")


class FlatAssembler:
    """Turns an ad page into a :class:`Flat`, or fails as a whole.

    Every extraction step runs under a name. Any extraction error aborts the
    assembly and is re-raised as a :class:`RecordAssemblyError` naming the
    document URL and the step; partial records are never returned.

    Args:
        site: Site configuration (placeholder image URL).
    """

    def __init__(self, site: SiteConfig | None = None) -> None:
        self._site = site or SiteConfig()

    def assemble(self, document: Document, url: str | None = None) -> Flat:
        """Assemble a Flat from ``document``.

        Args:
            document: The parsed ad page.
            url: URL to report; defaults to the document's own URL.

        Returns:
            The fully populated record.

        Raises:
            RecordAssemblyError: If any step fails; ``cause`` holds the
                original error with its provenance trail.
        """
        url = url or document.url or "<unknown>"

        def run(step: str, extractor: Callable[[Document], T]) -> T:
            try:
                return extractor(document)
            except ExtractionError as exc:
                logger.error("Step '%s' failed for %s: %s", step, url, exc)
                raise RecordAssemblyError(url, step, exc) from exc

        # Drift first: an unknown section explains any later failure best
        run("section_inventory", check_section_inventory)

        contact = run("contact", self._contact)
        title, flatmate_genders = run("headline", self._headline)
        title_image = run("title_image", self._title_image)
        room_size = run("room_size", self._room_size)
        rent = run("rent", self._rent)
        rent_details = run("rent_details", self._rent_details)
        address = run("address", self._address)
        availability = run("availability", self._availability)
        flatshare_details = run("flatshare_details", self._flatshare_details)
        property_details = run("property_details", self._property_details)
        description = run("description", self._description)

        return Flat(
            url=url,
            contact=contact,
            title=title,
            flatmate_genders=flatmate_genders,
            title_image=title_image,
            description=description,
            room_size=room_size,
            rent=rent,
            rent_details=rent_details,
            address=address,
            availability=availability,
            flatshare_details=flatshare_details,
            property_details=property_details,
        )

    # ── Header and contact ───────────────────────────────────────────────

    def _contact(self, document: Document) -> Contact:
        contact = document.root.query(
            "div.rhs_contact_information > div.panel-body"
        ).exactly_one()

        profile_image = None
        profile = contact.query("div.profile_image_dav.cursor-pointer").zero_or_one()
        if profile is not None:
            profile_image = assert_match(profile.attribute("style"), PROFILE_IMAGE_STYLE, 1)

        return Contact(
            name_image=contact.query("img").exactly_one().attribute("src"),
            profile_image=profile_image,
            phone_number=contact.query("#left_column_show_phone_numbers").exists(),
            online_tour=contact.query(".online_tour_badge").exists(),
        )

    def _headline(self, document: Document) -> tuple[str | None, list[str] | None]:
        headline = document.root.query("#sliderTopTitle").zero_or_one()
        if headline is None:
            return None, None

        genders = headline.query("img").attributes("alt")
        return normalize_whitespace(headline.text()), genders or None

    def _title_image(self, document: Document) -> str | None:
        meta = document.root.query('meta[property="og:image"]').zero_or_one()
        if meta is None:
            return None
        image = meta.attribute("content")
        if image == self._site.placeholder_image_url:
            return None
        return image

    # ── Key facts ────────────────────────────────────────────────────────

    def _room_size(self, document: Document) -> int:
        heading = find_section(document, "Zimmergröße").query("h2").exactly_one()
        return int(assert_match(heading.text().strip(), ROOM_SIZE, 1))

    def _rent(self, document: Document) -> int:
        heading = find_section(document, "Gesamtmiete").query("h2").exactly_one()
        return parse_cost(heading.text().strip())

    def _rent_details(self, document: Document) -> RentDetails:
        section = find_section(document, "Kosten")
        text = "\n".join(section.query("td:not(.noprint)").texts())

        if "Kaution" in text:
            variant = RentDetailsVariant.WITH_DEPOSIT
            groups = RENT_DETAILS_WITH_DEPOSIT.apply(text)
        else:
            variant = RentDetailsVariant.BASIC
            groups = RENT_DETAILS_BASIC.apply(text)

        deposit = groups.get("deposit")
        ransom = groups.get("_ransom")
        return RentDetails(
            variant=variant,
            rent=parse_cost(groups["rent"]),
            utility=parse_cost_or_na(groups["utility"]),
            additional_costs=parse_cost_or_na(groups["additional_costs"]),
            deposit=None if deposit is None else parse_cost(deposit),
            ransom=None if ransom is None else parse_cost_or_na(ransom),
        )

    def _address(self, document: Document) -> str:
        link = find_section(document, "Adresse").query("a").exactly_one()
        return normalize_whitespace(link.text())

    def _availability(self, document: Document) -> Availability:
        section = find_section(document, "Verfügbarkeit")
        text = "\n".join(section.query("div > p, div > b").texts())
        groups = AVAILABILITY.apply(text)
        return Availability(
            available_from=groups["available_from"],
            available_to=groups["_available_to"],
            online=groups["online"],
        )

    # ── Details ──────────────────────────────────────────────────────────

    def _flatshare_details(self, document: Document) -> FlatshareDetails:
        section = find_section(document, "WG-Details", climb=2)
        blocks = section.query("h4, ul")
        if len(blocks) != 4:
            raise CardinalityError(
                f"Malformed document: expected 4 blocks in 'WG-Details', found {len(blocks)}",
                count=len(blocks),
                provenance=blocks.provenance,
            )

        about, details, wanted_heading, wanted = blocks.items()
        for heading, expected in ((about, "Die WG"), (wanted_heading, "Gesucht wird")):
            text = heading.text().strip()
            if text != expected:
                raise SchemaDriftError(text, heading.provenance)

        items = [normalize_whitespace(t) for t in details.query("li").texts()]
        return FlatshareDetails(
            details=[item for item in items if item],
            looking_for=normalize_whitespace(wanted.query("li").exactly_one().text()),
        )

    def _property_details(self, document: Document) -> list[PropertyDetail]:
        section = find_section(document, "Angaben zum Objekt")
        return [
            self._property_detail(detail)
            for detail in section.query(".row > div:not(.noprint)").items()
        ]

    def _property_detail(self, detail: SingleSelection) -> PropertyDetail:
        # e.g. <span class="glyphicons glyphicons-building noprint">
        icon_class = detail.query("span").exactly_one().attribute("class")
        return PropertyDetail(
            icon=ICON_CLASS_NOISE.sub("", icon_class),
            text=normalize_whitespace(detail.text()),
        )

    def _description(self, document: Document) -> list[DescriptionBlock] | None:
        chapters = document.root.query("#ad_description_text div[id^=freitext_]").items()
        blocks = []
        for chapter in chapters:
            heading = chapter.query("h3").zero_or_one()
            paragraphs = chapter.query("p").at_least_one().texts()
            blocks.append(
                DescriptionBlock(
                    title=None if heading is None else heading.text().strip(),
                    text="\n\n".join(p.strip() for p in paragraphs),
                )
            )
        return blocks or None

"""Record assembly and schema drift detection."""

from wgscraper.assembly.flat import FlatAssembler
from wgscraper.assembly.sections import (
    KNOWN_SECTIONS,
    check_section_inventory,
    find_section,
)

__all__ = ["KNOWN_SECTIONS", "FlatAssembler", "check_section_inventory", "find_section"]

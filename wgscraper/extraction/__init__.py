"""Field extraction: anchored patterns and cost parsing."""

from wgscraper.extraction.costs import parse_cost, parse_cost_or_na
from wgscraper.extraction.patterns import (
    OPTIONAL_PREFIX,
    ExtractionPattern,
    assert_match,
    compile_pattern,
    normalize_whitespace,
)

__all__ = [
    "OPTIONAL_PREFIX",
    "ExtractionPattern",
    "assert_match",
    "compile_pattern",
    "normalize_whitespace",
    "parse_cost",
    "parse_cost_or_na",
]

"""Parsing of euro amounts as printed on ad pages."""

import re

from wgscraper.errors import PatternMismatchError
from wgscraper.extraction.patterns import assert_match
from wgscraper.models.flat import NotApplicable

CURRENCY_MARKER = "€"
COST_PATTERN = re.compile(rf"^([0-9]+){CURRENCY_MARKER}\Z")


def parse_cost(cost: str) -> int:
    """Parse a string of the form ``"123€"`` to ``123``.

    Raises:
        PatternMismatchError: If the string is not a whole euro amount.
    """
    return int(assert_match(cost, COST_PATTERN, 1))


def parse_cost_or_na(cost: str) -> int | NotApplicable:
    """Like :func:`parse_cost`, but ``"n.a."`` yields :attr:`NotApplicable.NA`."""
    if cost == NotApplicable.NA.value:
        return NotApplicable.NA
    try:
        return parse_cost(cost)
    except PatternMismatchError as exc:
        raise PatternMismatchError(
            cost, f"{COST_PATTERN.pattern}|^n\\.a\\.\\Z"
        ) from exc

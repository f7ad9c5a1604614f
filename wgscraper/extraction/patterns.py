"""Composable anchored patterns with required and optional named groups.

An :class:`ExtractionPattern` is built from partial regular expressions that
are joined by optional whitespace and matched against the whole input. Named
groups whose name starts with :data:`OPTIONAL_PREFIX` may legitimately stay
unmatched; every other named group is required to capture whenever the
overall match succeeds.
"""

from __future__ import annotations

import re

from wgscraper.errors import InternalSchemaError, PatternMismatchError


OPTIONAL_PREFIX = "_"
SEPARATOR = r"\s*"

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    """Strip ``text`` and collapse inner whitespace runs to single spaces."""
    return _WHITESPACE_RUN.sub(" ", text).strip()


def is_optional_group(name: str) -> bool:
    return name.startswith(OPTIONAL_PREFIX)


class ExtractionPattern:
    """A compiled, reusable, stateless extraction pattern.

    Use :func:`compile_pattern` to build one.
    """

    __slots__ = ("_regex", "_required", "_optional")

    def __init__(self, regex: re.Pattern[str]) -> None:
        self._regex = regex
        names = list(regex.groupindex)
        self._required = tuple(n for n in names if not is_optional_group(n))
        self._optional = tuple(n for n in names if is_optional_group(n))

    @property
    def pattern(self) -> str:
        return self._regex.pattern

    @property
    def required_groups(self) -> tuple[str, ...]:
        return self._required

    @property
    def optional_groups(self) -> tuple[str, ...]:
        return self._optional

    def apply(self, text: str) -> dict[str, str | None]:
        """Match ``text`` as a whole and return its named groups.

        Args:
            text: The input to match.

        Returns:
            Mapping from group name to captured text. Required groups are
            always strings; optional groups are ``None`` when they did not
            take part in the match.

        Raises:
            PatternMismatchError: If the input does not match as a whole.
            InternalSchemaError: If a required group did not capture although
                the overall match succeeded.
        """
        match = self._regex.fullmatch(text)
        if match is None:
            raise PatternMismatchError(text, self._regex.pattern)

        groups = match.groupdict()
        for name in self._required:
            if groups[name] is None:
                raise InternalSchemaError(
                    f"Group '{name}' may not be undefined in {self._regex.pattern!r}"
                )
        return groups

    def __repr__(self) -> str:
        return f"ExtractionPattern({self._regex.pattern!r})"


def compile_pattern(*parts: str, flags: int = 0) -> ExtractionPattern:
    """Join partial patterns by whitespace and anchor them to the whole input.

    Leading and trailing whitespace of the input is accepted, as is any
    whitespace (including none) between consecutive parts.

    Args:
        *parts: Partial regular expressions, in the order they must appear.
        flags: ``re`` flags applied to the combined pattern.

    Returns:
        A reusable ExtractionPattern.

    Raises:
        InternalSchemaError: If no part is given, a part is not a valid
            regular expression, two parts define the same group name, or a
            part that may be skipped entirely holds a required group.
    """
    if not parts:
        raise InternalSchemaError("An extraction pattern needs at least one part")

    seen: dict[str, int] = {}
    for index, part in enumerate(parts):
        try:
            compiled = re.compile(part, flags)
        except re.error as exc:
            raise InternalSchemaError(
                f"Pattern part {index} ({part!r}) is invalid: {exc}"
            ) from exc
        for name in compiled.groupindex:
            if name in seen:
                raise InternalSchemaError(
                    f"Group '{name}' is defined in parts {seen[name]} and {index}"
                )
            seen[name] = index

        # A part that may match nothing must not hold required groups
        empty = compiled.fullmatch("")
        if empty is not None:
            for name, value in empty.groupdict().items():
                if value is None and not is_optional_group(name):
                    raise InternalSchemaError(
                        f"Group '{name}' in optional part {index} must be named "
                        f"'{OPTIONAL_PREFIX}{name}'"
                    )

    # Parts are grouped so a top-level alternation stays within its part
    source = SEPARATOR.join(["", *(f"(?:{part})" for part in parts), ""])
    return ExtractionPattern(re.compile(source, flags))


def assert_match(text: str, pattern: str | re.Pattern[str], group: int | str = 0) -> str:
    """Search ``text`` for ``pattern`` and return one group of the match.

    Raises:
        PatternMismatchError: If there is no match or the group did not capture.
    """
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    match = regex.search(text)
    if match is None:
        raise PatternMismatchError(text, regex.pattern)
    value = match.group(group)
    if value is None:
        raise PatternMismatchError(
            text, regex.pattern, f"No match group {group!r} in {text!r} for {regex.pattern!r}"
        )
    return value

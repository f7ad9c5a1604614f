"""Provenance-tracking selections over a parsed HTML tree.

A :class:`Selection` is an ordered tuple of nodes plus the trail of query
steps that produced it. Every operation returns a new selection with one
more step on its trail, so two queries branching off the same selection
never see each other's history. When a lookup fails, the error carries the
trail, which tells where in the third-party document the lookup was anchored.

Cardinality contracts:

* :meth:`Selection.exactly_one` for sections that must be unique,
* :meth:`Selection.zero_or_one` for optional but unique parts,
* :meth:`Selection.at_least_one` for non-empty repeated parts.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from bs4 import BeautifulSoup, Tag

from wgscraper.errors import CardinalityError, MissingDataError

Predicate = Callable[[Tag], bool]

FILTER_STEP = "<filter>"
EXACTLY_ONE_STEP = "<exactly-one>"
ZERO_OR_ONE_STEP = "<zero-or-one>"
AT_LEAST_ONE_STEP = "<at-least-one>"


def _select(nodes: Iterable[Tag], css: str) -> list[Tag]:
    matches: list[Tag] = []
    for node in nodes:
        matches.extend(node.select(css))
    return matches


class Selection:
    """An ordered, provenance-tracked set of nodes from one document.

    Args:
        nodes: The selected nodes, in document order.
        provenance: Query steps applied since the document root.
    """

    __slots__ = ("_nodes", "_provenance")

    def __init__(self, nodes: Iterable[Tag], provenance: tuple[str, ...] = ()) -> None:
        self._nodes = tuple(nodes)
        self._provenance = provenance

    @property
    def nodes(self) -> tuple[Tag, ...]:
        return self._nodes

    @property
    def provenance(self) -> tuple[str, ...]:
        return self._provenance

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"Selection(size={len(self._nodes)}, provenance={self._provenance!r})"

    def _step(self, nodes: Iterable[Tag], step: str) -> Selection:
        return Selection(nodes, self._provenance + (step,))

    # ── Narrowing ────────────────────────────────────────────────────────

    def query(self, css: str) -> Selection:
        """Select all descendants of every node matching a CSS selector.

        Matches are concatenated in source order; nodes matched from two
        overlapping sources appear twice.
        """
        return self._step(_select(self._nodes, css), css)

    def filter(self, predicate: Predicate) -> Selection:
        """Keep the nodes for which ``predicate`` holds."""
        return self._step((n for n in self._nodes if predicate(n)), FILTER_STEP)

    def items(self) -> list[SingleSelection]:
        """Split into one single-element selection per node."""
        return [
            SingleSelection(node, self._provenance + (f"[{index}]",))
            for index, node in enumerate(self._nodes)
        ]

    # ── Cardinality ──────────────────────────────────────────────────────

    def exists(self) -> bool:
        return len(self._nodes) > 0

    def exists_exactly_once(self) -> bool:
        return len(self._nodes) == 1

    def exactly_one(self) -> SingleSelection:
        """Refine to a single-element selection.

        Raises:
            CardinalityError: If the selection is empty or holds several nodes.
        """
        if len(self._nodes) != 1:
            raise CardinalityError(
                f"Expected exactly one element, found {len(self._nodes)}",
                count=len(self._nodes),
                provenance=self._provenance,
            )
        return SingleSelection(self._nodes[0], self._provenance + (EXACTLY_ONE_STEP,))

    def zero_or_one(self) -> SingleSelection | None:
        """Refine to a single-element selection, or ``None`` when empty.

        Raises:
            CardinalityError: If the selection holds several nodes.
        """
        if len(self._nodes) > 1:
            raise CardinalityError(
                f"Expected at most one element, found {len(self._nodes)}",
                count=len(self._nodes),
                provenance=self._provenance,
            )
        if not self._nodes:
            return None
        return SingleSelection(self._nodes[0], self._provenance + (ZERO_OR_ONE_STEP,))

    def at_least_one(self) -> Selection:
        """Assert the selection is not empty.

        Raises:
            CardinalityError: If the selection is empty.
        """
        if not self._nodes:
            raise CardinalityError(
                "Expected at least one element, found 0",
                count=0,
                provenance=self._provenance,
            )
        return self._step(self._nodes, AT_LEAST_ONE_STEP)

    # ── Bulk accessors ───────────────────────────────────────────────────

    def texts(self) -> list[str]:
        return [single.text() for single in self.items()]

    def attributes(self, name: str) -> list[str]:
        """Attribute values of all nodes; every node must carry the attribute."""
        return [single.attribute(name) for single in self.items()]


class SingleSelection:
    """A selection guaranteed to hold exactly one node.

    Obtained through :meth:`Selection.exactly_one`,
    :meth:`Selection.zero_or_one` or :meth:`Selection.items`.
    """

    __slots__ = ("_node", "_provenance")

    def __init__(self, node: Tag, provenance: tuple[str, ...] = ()) -> None:
        self._node = node
        self._provenance = provenance

    @property
    def node(self) -> Tag:
        return self._node

    @property
    def provenance(self) -> tuple[str, ...]:
        return self._provenance

    @property
    def tag_name(self) -> str:
        return self._node.name

    def __len__(self) -> int:
        return 1

    def __repr__(self) -> str:
        return f"SingleSelection(<{self._node.name}>, provenance={self._provenance!r})"

    def as_selection(self) -> Selection:
        return Selection([self._node], self._provenance)

    def query(self, css: str) -> Selection:
        return Selection(self._node.select(css), self._provenance + (css,))

    def filter(self, predicate: Predicate) -> Selection:
        return self.as_selection().filter(predicate)

    def exactly_one(self) -> SingleSelection:
        return self

    def parent(self, levels: int = 1) -> SingleSelection:
        """Walk ``levels`` ancestor steps up the tree.

        Raises:
            MissingDataError: If the tree is not that deep.
        """
        node = self._node
        for _ in range(levels):
            parent = node.parent
            if parent is None or isinstance(parent, BeautifulSoup):
                raise MissingDataError(
                    f"<{self._node.name}> has fewer than {levels} ancestor element(s)",
                    self._provenance,
                )
            node = parent
        return SingleSelection(node, self._provenance + (f"<parent^{levels}>",))

    # ── Accessors ────────────────────────────────────────────────────────

    def has_attribute(self, name: str) -> bool:
        return self._node.has_attr(name)

    def attribute(self, name: str) -> str:
        """Value of an attribute; multi-valued ones are joined with spaces.

        Raises:
            MissingDataError: If the node has no such attribute.
        """
        if not self._node.has_attr(name):
            raise MissingDataError(
                f"<{self._node.name}> has no attribute '{name}'", self._provenance
            )
        value = self._node[name]
        if isinstance(value, list):
            return " ".join(value)
        return value

    def text(self) -> str:
        """Concatenated text content of the node and its descendants."""
        return self._node.get_text()

    def inner_markup(self) -> str:
        return self._node.decode_contents()

    def outer_markup(self) -> str:
        return str(self._node)

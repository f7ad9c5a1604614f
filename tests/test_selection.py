"""Tests for the provenance-tracking selection engine."""

import pytest

from wgscraper.errors import CardinalityError, MissingDataError
from wgscraper.selection import Document, Selection, SingleSelection

HTML = """
<html>
  <body>
    <div id="main" class="panel wide">
      <h3>Kosten</h3>
      <p class="a">eins</p>
      <p class="a">zwei</p>
      <a href="/x">Link <b>fett</b></a>
    </div>
    <div id="side">
      <p>drei</p>
    </div>
  </body>
</html>
"""


@pytest.fixture
def document() -> Document:
    return Document.parse(HTML, url="https://example.test/ad.html")


# ── Document ─────────────────────────────────────────────────────────────────


class TestDocument:
    def test_root_has_empty_provenance(self, document: Document) -> None:
        assert document.root.provenance == ()
        assert len(document.root) == 1
        assert document.root.exactly_one().tag_name == "html"

    def test_url_is_kept(self, document: Document) -> None:
        assert document.url == "https://example.test/ad.html"

    def test_fragment_is_wrapped_in_html(self) -> None:
        doc = Document.parse("<p>hallo</p>")
        assert doc.root.query("p").exactly_one().text() == "hallo"

    def test_empty_markup_raises(self) -> None:
        with pytest.raises(MissingDataError, match="no root element"):
            Document.parse("")


# ── Querying ─────────────────────────────────────────────────────────────────


class TestQuery:
    def test_query_returns_matches_in_document_order(self, document: Document) -> None:
        texts = document.root.query("p").texts()
        assert texts == ["eins", "zwei", "drei"]

    def test_query_appends_expression(self, document: Document) -> None:
        selection = document.root.query("div").query("p.a")
        assert selection.provenance == ("div", "p.a")

    def test_query_concatenates_without_deduplication(self, document: Document) -> None:
        # body contains every p, the two divs contain them again
        selection = document.root.query("body, div").query("p")
        assert len(selection) == 6

    def test_query_is_not_mutating(self, document: Document) -> None:
        divs = document.root.query("div")
        divs.query("p")
        assert divs.provenance == ("div",)
        assert len(divs) == 2

    def test_branches_do_not_share_history(self, document: Document) -> None:
        divs = document.root.query("div")
        left = divs.query("p")
        right = divs.filter(lambda n: n.get("id") == "side").query("p")
        assert left.provenance == ("div", "p")
        assert right.provenance == ("div", "<filter>", "p")

    def test_provenance_length_counts_operations(self, document: Document) -> None:
        selection = (
            document.root.query("body")
            .query("div")
            .filter(lambda n: n.get("id") == "main")
            .exactly_one()
            .query("p")
        )
        assert len(selection.provenance) == 5

    def test_filter_records_generic_marker(self, document: Document) -> None:
        selection = document.root.query("p").filter(lambda n: n.get_text() == "zwei")
        assert selection.texts() == ["zwei"]
        assert selection.provenance[-1] == "<filter>"

    def test_items_are_single_selections(self, document: Document) -> None:
        items = document.root.query("p").items()
        assert [type(i) for i in items] == [SingleSelection] * 3
        assert items[1].provenance == ("p", "[1]")
        assert items[1].text() == "zwei"


# ── Cardinality ──────────────────────────────────────────────────────────────


class TestCardinality:
    def test_exactly_one_on_empty_raises(self, document: Document) -> None:
        with pytest.raises(CardinalityError) as info:
            document.root.query("table").exactly_one()
        assert info.value.count == 0
        assert info.value.provenance == ("table",)

    def test_exactly_one_on_two_raises(self, document: Document) -> None:
        with pytest.raises(CardinalityError) as info:
            document.root.query("div").query("p.a").exactly_one()
        assert info.value.count == 2
        assert "root > div > p.a" in str(info.value)

    def test_exactly_one_on_single_succeeds(self, document: Document) -> None:
        single = document.root.query("#side").exactly_one()
        assert single.attribute("id") == "side"

    def test_exactly_one_is_idempotent(self, document: Document) -> None:
        single = document.root.query("#side").exactly_one()
        again = single.exactly_one()
        assert again is single
        assert again.exactly_one().provenance == single.provenance
        assert again.text() == single.text()

    def test_zero_or_one(self, document: Document) -> None:
        assert document.root.query("table").zero_or_one() is None
        single = document.root.query("h3").zero_or_one()
        assert single is not None
        assert single.text() == "Kosten"
        with pytest.raises(CardinalityError):
            document.root.query("p").zero_or_one()

    def test_at_least_one(self, document: Document) -> None:
        selection = document.root.query("p").at_least_one()
        assert len(selection) == 3
        with pytest.raises(CardinalityError) as info:
            document.root.query("table").at_least_one()
        assert info.value.count == 0

    def test_non_failing_checks(self, document: Document) -> None:
        assert document.root.query("p").exists()
        assert not document.root.query("p").exists_exactly_once()
        assert document.root.query("h3").exists_exactly_once()
        assert not document.root.query("table").exists()


# ── Accessors ────────────────────────────────────────────────────────────────


class TestAccessors:
    def test_attribute(self, document: Document) -> None:
        link = document.root.query("a").exactly_one()
        assert link.attribute("href") == "/x"
        assert link.has_attribute("href")
        assert not link.has_attribute("title")

    def test_multi_valued_attribute_is_joined(self, document: Document) -> None:
        assert document.root.query("#main").exactly_one().attribute("class") == "panel wide"

    def test_missing_attribute_carries_provenance(self, document: Document) -> None:
        link = document.root.query("div").query("a").exactly_one()
        with pytest.raises(MissingDataError) as info:
            link.attribute("title")
        assert info.value.provenance == ("div", "a", "<exactly-one>")
        assert "has no attribute 'title'" in str(info.value)
        assert "root > div > a > <exactly-one>" in str(info.value)

    def test_bulk_attributes_fail_on_any_missing(self, document: Document) -> None:
        assert document.root.query("div").attributes("id") == ["main", "side"]
        with pytest.raises(MissingDataError):
            document.root.query("p").attributes("class")

    def test_text_and_markup(self, document: Document) -> None:
        link = document.root.query("a").exactly_one()
        assert link.text() == "Link fett"
        assert link.inner_markup() == "Link <b>fett</b>"
        assert link.outer_markup() == '<a href="/x">Link <b>fett</b></a>'

    def test_parent_walk(self, document: Document) -> None:
        heading = document.root.query("h3").exactly_one()
        container = heading.parent(1)
        assert container.attribute("id") == "main"
        assert container.provenance[-1] == "<parent^1>"
        assert heading.parent(2).tag_name == "body"

    def test_parent_beyond_root_raises(self, document: Document) -> None:
        with pytest.raises(MissingDataError, match="ancestor"):
            document.root.exactly_one().parent(1)

    def test_single_query_and_filter(self, document: Document) -> None:
        main = document.root.query("#main").exactly_one()
        assert isinstance(main.query("p"), Selection)
        assert main.filter(lambda n: n.get("id") == "main").exists()
        assert not main.filter(lambda n: n.get("id") == "side").exists()

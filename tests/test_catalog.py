"""
Tests for CatalogDocument and .pot writing.

Tests validate:
- Header metadata and deterministic output
- Singular, plural and context entries as polib reads them back
- Duplicate merging
- Line wrapping width
"""

import io

import polib
import pytest

from soypot.config import CatalogConfig
from soypot.services.catalog import CatalogDocument, CatalogEntry, header_metadata
from tests.factories import soy_file


def render(document, config=None):
    buffer = io.StringIO()
    document.write_to(buffer, config)
    return buffer.getvalue()


@pytest.fixture
def document():
    """Two distinct messages plus a duplicate of the first."""
    return CatalogDocument([
        CatalogEntry("Hello, {NAME}!", comment="greeting",
                     references=["app.soy:4", "id=11"]),
        CatalogEntry("One item", "{COUNT} items", comment="cart",
                     references=["cart.soy:7", "id=22 var=count"]),
        CatalogEntry("Hello, {NAME}!", comment="greeting on home page",
                     references=["home.soy:9", "id=11"]),
    ])


class TestHeader:
    """Catalog header."""

    def test_default_metadata(self):
        """Defaults describe a UTF-8 template without a creation date."""
        metadata = header_metadata(CatalogConfig())
        assert metadata["Project-Id-Version"] == "PACKAGE VERSION"
        assert metadata["Content-Type"] == "text/plain; charset=UTF-8"
        assert metadata["Content-Transfer-Encoding"] == "8bit"
        assert "POT-Creation-Date" not in metadata

    def test_creation_date_opt_in(self):
        """creation_date adds POT-Creation-Date."""
        metadata = header_metadata(CatalogConfig(creation_date=True))
        assert "POT-Creation-Date" in metadata

    def test_written_header(self, document):
        """The project name reaches the written header."""
        text = render(document, CatalogConfig(project="shop 2.1"))
        parsed = polib.pofile(text)
        assert parsed.metadata["Project-Id-Version"] == "shop 2.1"
        assert text.startswith('msgid ""\nmsgstr ""\n')


class TestEntries:
    """Written entries."""

    def test_singular(self, document):
        """Plain messages have an empty msgstr and extracted comments."""
        text = render(document)
        assert (
            "#. greeting\n"
            "#. greeting on home page\n"
            "#: app.soy:4\n"
            "#: id=11\n"
            "#: home.soy:9\n"
            'msgid "Hello, {NAME}!"\n'
            'msgstr ""\n'
        ) in text

    def test_plural(self, document):
        """Plural messages have two empty plural translations."""
        text = render(document)
        assert "#: cart.soy:7\n#: id=22 var=count\n" in text
        assert 'msgid "One item"\nmsgid_plural "{COUNT} items"\n' in text
        assert 'msgstr[0] ""\nmsgstr[1] ""\n' in text

    def test_read_back(self, document):
        """polib parses the output back into the same messages."""
        parsed = polib.pofile(render(document))
        assert [e.msgid for e in parsed] == ["Hello, {NAME}!", "One item"]
        assert parsed[1].msgid_plural == "{COUNT} items"
        assert ("app.soy", "4") in parsed[0].occurrences

    def test_context(self):
        """A meaning is written as msgctxt before msgid."""
        doc = CatalogDocument([CatalogEntry("Order", context="verb", references=["a.soy:1"])])
        assert 'msgctxt "verb"\nmsgid "Order"\n' in render(doc)

    def test_escaping(self):
        """Quotes and backslashes are escaped."""
        doc = CatalogDocument([CatalogEntry('Say "hi" \\ bye')])
        assert 'msgid "Say \\"hi\\" \\\\ bye"' in render(doc)

    def test_trailing_newline(self, document):
        """Output ends with a newline."""
        assert render(document).endswith("\n")

    def test_empty_document(self):
        """An empty document still has a header."""
        parsed = polib.pofile(render(CatalogDocument()))
        assert len(parsed) == 0
        assert "Content-Type" in parsed.metadata


class TestMerging:
    """Entries sharing context, msgid and plural are merged."""

    def test_merged(self, document):
        """Duplicates collapse into the first; references and comments join."""
        merged = document.merged()
        assert len(merged) == 2
        first = merged[0]
        assert first.references == ["app.soy:4", "id=11", "home.soy:9"]
        assert first.comment == "greeting\ngreeting on home page"

    def test_merge_leaves_document_untouched(self, document):
        """merged() works on copies."""
        document.merged()
        assert len(document) == 3
        assert document.entries[0].references == ["app.soy:4", "id=11"]

    def test_context_keeps_entries_apart(self):
        """Same text with different meanings stays separate."""
        doc = CatalogDocument([
            CatalogEntry("Order", context="noun"),
            CatalogEntry("Order", context="verb"),
        ])
        assert len(doc.merged()) == 2

    def test_merge_disabled(self, document):
        """merge_duplicates=False writes every entry."""
        pofile = document.to_pofile(CatalogConfig(merge_duplicates=False))
        assert len(pofile) == 3


class TestWrapping:
    """Line width handling."""

    LONG = "This message is long enough that it has to be wrapped onto several lines"

    def test_wrapped(self):
        """Long msgids are split at the configured width."""
        text = render(CatalogDocument([CatalogEntry(self.LONG)]), CatalogConfig(width=40))
        assert 'msgid ""\n"This message' in text

    def test_width_zero_disables_wrapping(self):
        """Width 0 keeps every msgid on one line."""
        text = render(CatalogDocument([CatalogEntry(self.LONG)]), CatalogConfig(width=0))
        assert f'msgid "{self.LONG}"' in text

    def test_plural_reference_kept_whole(self):
        """A long path never pushes "var=..." onto a line of its own."""
        path = "templates/" + "p" * 44 + ".soy:4"
        ref = "id=8529296633549654318 var=count"
        doc = CatalogDocument([CatalogEntry("one", "many", references=[path, ref])])
        lines = render(doc).split("\n")
        assert f"#: {path}" in lines
        assert f"#: {ref}" in lines
        assert "#: var=count" not in lines

    def test_references_ignore_width(self):
        """Reference lines are not wrapped, however narrow the width."""
        path = "a/very/long/directory/name/for/templates/checkout/cart_summary.soy:12"
        doc = CatalogDocument([CatalogEntry("Total", references=[path, "id=5"])])
        text = render(doc, CatalogConfig(width=20))
        assert f"#: {path}\n#: id=5\n" in text


class TestPipelineOutput:
    """Full pipeline rendering."""

    def test_deterministic(self, soy_factory):
        """Same inputs, byte-identical catalogs."""
        soy_factory.add_file("app.soy", soy_file(
            "app",
            greet='{msg desc="greeting"}Hello, {$name}!{/msg}',
            bye='{msg desc="farewell" meaning="parting"}Goodbye{/msg}',
        ))
        assert soy_factory.pot() == soy_factory.pot()

    def test_shared_message_merged(self, soy_factory):
        """One message used by two templates becomes one entry."""
        path = soy_factory.add_file("app.soy", soy_file(
            "app",
            a='{msg desc="greeting"}Hello{/msg}',
            b='{msg desc="greeting"}Hello{/msg}',
        ))
        parsed = polib.pofile(soy_factory.pot())
        assert len(parsed) == 1
        files = [f for f, _ in parsed[0].occurrences if f == str(path)]
        assert len(files) == 2

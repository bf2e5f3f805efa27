"""
Tests for TemplateRegistry and the message annotation pass.

Tests validate:
- Namespace requirement and empty-file rejection
- Qualified name uniqueness (first registration wins)
- Source file and line lookups
- process_messages is idempotent
"""

import pytest

from soypot.core.ast import NodeKind, walk_messages
from soypot.core.errors import DuplicateTemplate, MalformedInput, TemplateNotFound
from soypot.core.passes import process_messages
from tests.factories import soy_file


GREET = soy_file("app", greet='{msg desc="greeting"}Hello, {$name}!{/msg}')


class TestRegistration:
    """TemplateRegistry.add behavior."""

    def test_qualified_names(self, registry):
        """Templates are keyed by namespace.template."""
        added = registry.add_source("app.soy", soy_file("app", a="x", b="y"))
        assert [entry.name for entry in added] == ["app.a", "app.b"]
        assert "app.a" in registry
        assert len(registry) == 2
        assert registry.template("app.b").node.kind is NodeKind.TEMPLATE

    def test_missing_namespace(self, registry, parse):
        """A file starting with a template is rejected; nothing is registered."""
        tree = parse("{template .t}x{/template}", path="bad.soy")
        with pytest.raises(MalformedInput) as exc:
            registry.add(tree)
        assert "namespace" in str(exc.value)
        assert len(registry) == 0

    @pytest.mark.parametrize("source", ["", "\n\n   \n", "// only a comment\n"])
    def test_empty_file(self, registry, parse, source):
        """Files without nodes are malformed."""
        with pytest.raises(MalformedInput):
            registry.add(parse(source, path="empty.soy"))
        assert len(registry) == 0

    def test_duplicate_across_files(self, registry):
        """The same qualified name in two files is an error; the first stays."""
        registry.add_source("first.soy", GREET)
        with pytest.raises(DuplicateTemplate) as exc:
            registry.add_source("second.soy", GREET)
        assert exc.value.name == "app.greet"
        assert "first.soy" in str(exc.value)
        assert "second.soy" in str(exc.value)
        assert registry.source_file("app.greet") == "first.soy"
        assert len(registry) == 1

    def test_duplicate_is_atomic(self, registry):
        """A file with a clash registers none of its templates."""
        registry.add_source("first.soy", soy_file("app", greet="x"))
        with pytest.raises(DuplicateTemplate):
            registry.add_source("second.soy", soy_file("app", other="y", greet="z"))
        assert "app.other" not in registry

    def test_duplicate_within_file(self, registry):
        """Two templates of one file sharing a name are rejected."""
        source = "{namespace app}{template .t}a{/template}{template .t}b{/template}"
        with pytest.raises(DuplicateTemplate):
            registry.add_source("one.soy", source)
        assert len(registry) == 0

    def test_same_template_name_in_other_namespace(self, registry):
        """Names only clash when the namespace matches too."""
        registry.add_source("a.soy", soy_file("a", greet="x"))
        registry.add_source("b.soy", soy_file("b", greet="x"))
        assert len(registry) == 2

    def test_registration_order(self, registry):
        """templates() follows the order templates were added."""
        registry.add_source("z.soy", soy_file("z", last="x"))
        registry.add_source("a.soy", soy_file("a", first="x", second="y"))
        assert [e.name for e in registry.templates()] == ["z.last", "a.first", "a.second"]


class TestLookups:
    """source_file and line_number."""

    def test_source_file(self, registry):
        """Each template remembers the file it came from."""
        registry.add_source("templates/app.soy", GREET)
        assert registry.source_file("app.greet") == "templates/app.soy"

    def test_line_number(self, registry):
        """Line numbers of nodes inside the template are available."""
        registry.add_source("app.soy", GREET)
        entry = registry.template("app.greet")
        msg = next(walk_messages(entry.node))
        assert registry.line_number("app.greet", msg) == 4
        assert registry.line_number("app.greet", entry.node) == 3

    def test_unknown_template(self, registry):
        """Unknown names raise TemplateNotFound."""
        assert registry.template("nope.t") is None
        with pytest.raises(TemplateNotFound):
            registry.source_file("nope.t")

    def test_foreign_node(self, registry, parse):
        """A node from another file has no line in this template's file."""
        registry.add_source("app.soy", GREET)
        stranger = next(walk_messages(parse(GREET, path="other.soy")))
        with pytest.raises(TemplateNotFound):
            registry.line_number("app.greet", stranger)

    def test_not_found_is_lookup_error(self, registry):
        """TemplateNotFound can be caught as LookupError."""
        with pytest.raises(LookupError):
            registry.line_number("nope.t", None)


class TestProcessMessages:
    """Annotation pass over the registry."""

    def test_annotates_every_message(self, registry):
        """Every message receives an id and placeholder map."""
        registry.add_source("app.soy", soy_file(
            "app",
            a='{msg desc="a"}A {$x}{/msg}',
            b='{if $c}{msg desc="b"}B{/msg}{/if}',
        ))
        assert process_messages(registry) == 2

        for entry in registry.templates():
            for msg in walk_messages(entry.node):
                assert isinstance(msg.id, int)
                assert msg.placeholders is not None

    def test_idempotent(self, registry):
        """Running the pass twice changes nothing."""
        registry.add_source("app.soy", GREET)
        process_messages(registry)
        msg = next(walk_messages(registry.template("app.greet").node))
        first = (msg.id, dict(msg.placeholders))

        process_messages(registry)
        assert (msg.id, dict(msg.placeholders)) == first

    def test_empty_registry(self, registry):
        """No templates, nothing annotated."""
        assert process_messages(registry) == 0

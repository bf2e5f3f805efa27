"""
Template Registry — Aggregates parsed templates across files and namespaces.

Maps qualified template names (`namespace.template`) to their nodes and
remembers where every node came from, so later passes can report
`file:line` without re-reading sources.

One registry per extraction run; it is passed explicitly to the passes
that need it.

Usage:
    registry = TemplateRegistry()
    registry.add(parse_file("app.soy", source))

    for entry in registry.templates():
        print(entry.name, registry.source_file(entry.name))
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .ast import Node, NodeKind, SoyFileNode, TemplateNode, walk
from .errors import DuplicateTemplate, MalformedInput, TemplateNotFound
from .parsing import parse_file


@dataclass
class RegisteredTemplate:
    """A template known to the registry."""
    name: str           # Qualified name (e.g., "app.greet")
    node: TemplateNode
    source_file: str


class TemplateRegistry:
    """
    Registry of templates from every parsed source file.

    Entries are never removed. Iteration order is registration order, which
    makes every pass over the registry reproducible.
    """

    def __init__(self):
        """Initialize empty registry."""
        self._templates: Dict[str, RegisteredTemplate] = {}  # name -> entry
        self._lines: Dict[str, Dict[Node, int]] = {}  # file -> node -> line

    def add(self, tree: SoyFileNode) -> List[RegisteredTemplate]:
        """
        Register every template of a parsed file.

        Args:
            tree: Root node of one parsed file

        Returns:
            Entries registered from this file

        Raises:
            MalformedInput: If the file is empty or does not begin with a
                namespace declaration
            DuplicateTemplate: If a qualified name is already taken
        """
        nodes = tree.body
        if not nodes:
            raise MalformedInput(f"{tree.name}: empty")

        namespace = nodes[0]
        if namespace.kind is not NodeKind.NAMESPACE:
            raise MalformedInput(
                f"{tree.name}: input must begin with a namespace declaration"
            )

        # Check every name before inserting any, so a bad file leaves no trace
        pending: Dict[str, RegisteredTemplate] = {}
        for node in nodes[1:]:
            if node.kind is not NodeKind.TEMPLATE:
                continue
            name = f"{namespace.name}.{node.name}"
            existing = self._templates.get(name) or pending.get(name)
            if existing:
                raise DuplicateTemplate(name, existing.source_file, tree.name)
            pending[name] = RegisteredTemplate(name, node, tree.name)

        lines = self._lines.setdefault(tree.name, {})
        for node in walk(tree):
            lines[node] = node.line

        self._templates.update(pending)
        return list(pending.values())

    def add_source(self, path: str, content: str) -> List[RegisteredTemplate]:
        """Parse `content` and register its templates."""
        return self.add(parse_file(path, content))

    def template(self, name: str) -> Optional[RegisteredTemplate]:
        """
        Get a template by qualified name.

        Returns:
            Entry if registered, None otherwise
        """
        return self._templates.get(name)

    def templates(self) -> List[RegisteredTemplate]:
        """All registered templates, in registration order."""
        return list(self._templates.values())

    def source_file(self, name: str) -> str:
        """
        Get the file a template was parsed from.

        Raises:
            TemplateNotFound: If no template has that name
        """
        return self._entry(name).source_file

    def line_number(self, name: str, node: Node) -> int:
        """
        Get the source line of a node within a template's file.

        Raises:
            TemplateNotFound: If the template is unknown or the node was not
                parsed from the template's file
        """
        entry = self._entry(name)
        try:
            return self._lines[entry.source_file][node]
        except KeyError:
            raise TemplateNotFound(
                f"node is not part of {entry.source_file}"
            ) from None

    def _entry(self, name: str) -> RegisteredTemplate:
        entry = self._templates.get(name)
        if entry is None:
            raise TemplateNotFound(f"unknown template {name}")
        return entry

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, name: str) -> bool:
        return name in self._templates

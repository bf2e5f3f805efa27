"""
Syntax tree — Tagged node variants for parsed Soy files

Every node carries a `kind` discriminator and the line it started on.
Traversal dispatches on `kind` and on the parent capability
(`is_parent` / `children()`), never on the concrete class.

Nodes compare by identity: the registry and the message passes key side
tables (line index, placeholder names) by node.

Usage:
    from soypot.core.ast import NodeKind, walk_messages

    for msg in walk_messages(template):
        assert msg.kind is NodeKind.MSG
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, Iterator, List, Optional


class NodeKind(Enum):
    """Discriminator for syntax nodes."""
    FILE = "file"
    NAMESPACE = "namespace"
    TEMPLATE = "template"
    RAW_TEXT = "raw_text"
    PRINT = "print"
    MSG = "msg"
    PLURAL = "plural"
    SELECT = "select"
    CASE = "case"
    COMMAND = "command"
    BRANCH = "branch"


# Kinds exposing an ordered child sequence
PARENT_KINDS = frozenset({
    NodeKind.FILE,
    NodeKind.TEMPLATE,
    NodeKind.MSG,
    NodeKind.PLURAL,
    NodeKind.SELECT,
    NodeKind.CASE,
    NodeKind.COMMAND,
    NodeKind.BRANCH,
})


@dataclass(eq=False)
class Node:
    """Base for all syntax nodes."""
    kind: ClassVar[NodeKind]
    line: int = 0

    @property
    def is_parent(self) -> bool:
        return self.kind in PARENT_KINDS

    def children(self) -> List['Node']:
        """Ordered child nodes in source order."""
        if not self.is_parent:
            raise TypeError(f"{self.kind.value} node has no children")
        return list(self.body)


@dataclass(eq=False)
class SoyFileNode(Node):
    """Root of one parsed source file. `name` is the file path."""
    kind: ClassVar[NodeKind] = NodeKind.FILE
    name: str = ""
    body: List[Node] = field(default_factory=list)


@dataclass(eq=False)
class NamespaceNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.NAMESPACE
    name: str = ""
    attrs: Dict[str, str] = field(default_factory=dict)


@dataclass(eq=False)
class TemplateNode(Node):
    """A `{template}` or `{deltemplate}` block. `name` has no leading dot."""
    kind: ClassVar[NodeKind] = NodeKind.TEMPLATE
    name: str = ""
    attrs: Dict[str, str] = field(default_factory=dict)
    body: List[Node] = field(default_factory=list)


@dataclass(eq=False)
class RawTextNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.RAW_TEXT
    text: str = ""


@dataclass(eq=False)
class PrintNode(Node):
    """Embedded expression, `{$name}` or `{print $name |directive}`."""
    kind: ClassVar[NodeKind] = NodeKind.PRINT
    expr: str = ""
    phname: Optional[str] = None


@dataclass(eq=False)
class MsgNode(Node):
    """
    Translatable message.

    `id` and `placeholders` are filled by the annotation pass and stay None
    until then. `placeholders` maps each PrintNode in the body (at any depth)
    to its placeholder name.
    """
    kind: ClassVar[NodeKind] = NodeKind.MSG
    desc: str = ""
    meaning: str = ""
    body: List[Node] = field(default_factory=list)
    id: Optional[int] = None
    placeholders: Optional[Dict[Node, str]] = None


@dataclass(eq=False)
class CaseNode(Node):
    """`{case v}` or `{default}` arm of a plural or select."""
    kind: ClassVar[NodeKind] = NodeKind.CASE
    value: Optional[str] = None
    is_default: bool = False
    body: List[Node] = field(default_factory=list)


@dataclass(eq=False)
class MsgPluralNode(Node):
    """`{plural $count}`. `var_name` is the expression without the `$`."""
    kind: ClassVar[NodeKind] = NodeKind.PLURAL
    var_name: str = ""
    expr: str = ""
    offset: int = 0
    cases: List[CaseNode] = field(default_factory=list)

    def children(self) -> List[Node]:
        return list(self.cases)

    @property
    def default(self) -> Optional[CaseNode]:
        return next((c for c in self.cases if c.is_default), None)


@dataclass(eq=False)
class MsgSelectNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.SELECT
    var_name: str = ""
    expr: str = ""
    cases: List[CaseNode] = field(default_factory=list)

    def children(self) -> List[Node]:
        return list(self.cases)

    @property
    def default(self) -> Optional[CaseNode]:
        return next((c for c in self.cases if c.is_default), None)


@dataclass(eq=False)
class CommandNode(Node):
    """Any other block or self-closing command (if, foreach, call, let...)."""
    kind: ClassVar[NodeKind] = NodeKind.COMMAND
    name: str = ""
    args: str = ""
    body: List[Node] = field(default_factory=list)


@dataclass(eq=False)
class BranchNode(Node):
    """Secondary arm of a command: elseif, else, ifempty, switch case."""
    kind: ClassVar[NodeKind] = NodeKind.BRANCH
    name: str = ""
    args: str = ""
    body: List[Node] = field(default_factory=list)


def walk(node: Node) -> Iterator[Node]:
    """Depth-first pre-order over `node` and everything below it."""
    yield node
    if node.is_parent:
        for child in node.children():
            yield from walk(child)


def walk_messages(node: Node) -> Iterator[MsgNode]:
    """
    Depth-first pre-order over the messages under `node`.

    Message bodies are not entered: a message's plural and expression
    structure belongs to the message itself.
    """
    if node.kind is NodeKind.MSG:
        yield node
    elif node.is_parent:
        for child in node.children():
            yield from walk_messages(child)

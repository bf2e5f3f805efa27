"""
Parser — Builds a SoyFileNode tree from lexer tokens

Stack-based: every open block command pushes a frame whose `container` is
the list new nodes are appended to. Branch commands ({elseif}, {case}...)
re-point the container of the frame they belong to.

Usage:
    from soypot.core.parsing import parse_file

    tree = parse_file("app.soy", source)
    tree.body[0]  # NamespaceNode
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..ast import (
    BranchNode,
    CaseNode,
    CommandNode,
    MsgNode,
    MsgPluralNode,
    MsgSelectNode,
    NamespaceNode,
    Node,
    NodeKind,
    PrintNode,
    RawTextNode,
    SoyFileNode,
    TemplateNode,
)
from ..errors import ParseFailure
from .lexer import TAG, Token, tokenize


TEMPLATE_COMMANDS = {"template", "deltemplate"}

BLOCK_COMMANDS = TEMPLATE_COMMANDS | {
    "msg", "plural", "select",
    "if", "foreach", "for", "switch",
    "call", "delcall", "param", "let", "log",
}

# branch command -> block commands it may appear in
BRANCH_PARENTS = {
    "elseif": {"if"},
    "else": {"if"},
    "ifempty": {"foreach", "for"},
    "case": {"switch", "plural", "select"},
    "default": {"switch", "plural", "select"},
}

FILE_LEVEL_COMMANDS = {"namespace", "alias", "delpackage"}
LEAF_COMMANDS = FILE_LEVEL_COMMANDS | {"css", "xid", "debugger"}

_ATTR = re.compile(r'(\w+)\s*=\s*"([^"]*)"')
_PHNAME = re.compile(r'\bphname\s*=\s*"([^"]*)"')


def parse_attrs(text: str) -> Dict[str, str]:
    """Collect `key="value"` pairs from command text."""
    return dict(_ATTR.findall(text))


def strip_attrs(text: str) -> str:
    return _ATTR.sub("", text).strip()


@dataclass
class _Frame:
    name: str
    node: Node
    container: Optional[List[Node]]


class SoyParser:
    """Parses one source file."""

    def __init__(self, path: str, content: str):
        self.path = path
        self.content = content
        self._stack: List[_Frame] = []

    def parse(self) -> SoyFileNode:
        root = SoyFileNode(name=self.path, line=1)
        self._stack = [_Frame("file", root, root.body)]

        for token in tokenize(self.path, self.content):
            if token.type == TAG:
                self._tag(token)
            else:
                self._text(token)

        if len(self._stack) > 1:
            top = self._top
            raise self._error(top.node.line, f"unclosed {{{top.name}}}")
        return root

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @property
    def _top(self) -> _Frame:
        return self._stack[-1]

    def _error(self, line: int, message: str) -> ParseFailure:
        return ParseFailure(self.path, line, message)

    def _inside(self, name: str) -> bool:
        return any(frame.name == name for frame in self._stack)

    def _append(self, node: Node, token: Token) -> None:
        top = self._top
        if top.name == "file" and node.kind not in (
            NodeKind.NAMESPACE, NodeKind.TEMPLATE, NodeKind.COMMAND
        ):
            raise self._error(token.line, f"{{{token.value}}} outside of a template")
        if top.container is None:
            raise self._error(
                token.line, f"expected {{case}} or {{default}} in {{{top.name}}}"
            )
        top.container.append(node)

    # -------------------------------------------------------------------------
    # Token handlers
    # -------------------------------------------------------------------------

    def _text(self, token: Token) -> None:
        top = self._top
        if top.name == "file" or top.container is None:
            if token.value.strip():
                where = "outside of a template" if top.name == "file" \
                    else f"before first case of {{{top.name}}}"
                raise self._error(token.line, f"unexpected text {where}")
            return

        container = top.container
        if container and container[-1].kind is NodeKind.RAW_TEXT:
            container[-1].text += token.value
        else:
            container.append(RawTextNode(line=token.line, text=token.value))

    def _tag(self, token: Token) -> None:
        content = token.value
        if content.startswith("/"):
            self._close(content[1:].strip(), token)
            return

        self_closing = content.endswith("/")
        if self_closing:
            content = content[:-1].rstrip()

        name, args = _split_command(content)

        if not name:
            raise self._error(token.line, "empty tag")
        if name == "fallbackmsg":
            raise self._error(token.line, "{fallbackmsg} is not supported")
        if name in BRANCH_PARENTS:
            self._branch(name, args, token)
        elif name == "namespace":
            self._namespace(args, token)
        elif name in BLOCK_COMMANDS and not self_closing:
            self._open(name, args, token)
        elif name in BLOCK_COMMANDS or name in LEAF_COMMANDS:
            if name in ("msg", "plural", "select") or name in TEMPLATE_COMMANDS:
                raise self._error(token.line, f"{{{name}}} cannot be self-closing")
            if self._top.name == "file" and name not in FILE_LEVEL_COMMANDS:
                raise self._error(token.line, f"{{{name}}} outside of a template")
            self._append(CommandNode(line=token.line, name=name, args=args), token)
        elif name == "print":
            self._append(_print_node(args, token.line), token)
        else:
            # any other tag is an implicit print: {$name}, {$a.b}, {1 + 2}
            self._append(_print_node(content, token.line), token)

    def _namespace(self, args: str, token: Token) -> None:
        if self._top.name != "file":
            raise self._error(token.line, "{namespace} must be at file level")
        name = strip_attrs(args)
        if not name:
            raise self._error(token.line, "{namespace} requires a name")
        node = NamespaceNode(line=token.line, name=name, attrs=parse_attrs(args))
        self._top.container.append(node)

    def _open(self, name: str, args: str, token: Token) -> None:
        line = token.line
        container: Optional[List[Node]]

        if name in TEMPLATE_COMMANDS:
            if self._top.name != "file":
                raise self._error(line, "templates cannot be nested")
            template_name, _, rest = args.partition(" ")
            if not template_name:
                raise self._error(line, f"{{{name}}} requires a name")
            node = TemplateNode(
                line=line,
                name=template_name.lstrip("."),
                attrs=parse_attrs(rest),
            )
            container = node.body
        elif self._top.name == "file":
            raise self._error(line, f"{{{name}}} outside of a template")
        elif name == "msg":
            if self._inside("msg"):
                raise self._error(line, "messages cannot be nested")
            attrs = parse_attrs(args)
            node = MsgNode(
                line=line,
                desc=attrs.get("desc", ""),
                meaning=attrs.get("meaning", ""),
            )
            container = node.body
        elif name in ("plural", "select"):
            if not self._inside("msg"):
                raise self._error(line, f"{{{name}}} must be inside {{msg}}")
            expr = strip_attrs(args)
            if not expr:
                raise self._error(line, f"{{{name}}} requires an expression")
            if name == "plural":
                offset = parse_attrs(args).get("offset", "0")
                if not offset.isdigit():
                    raise self._error(line, f"invalid plural offset {offset!r}")
                node = MsgPluralNode(
                    line=line, var_name=expr.lstrip("$"), expr=expr, offset=int(offset)
                )
            else:
                node = MsgSelectNode(line=line, var_name=expr.lstrip("$"), expr=expr)
            container = None
        else:
            node = CommandNode(line=line, name=name, args=args)
            container = node.body

        self._append(node, token)
        self._stack.append(_Frame(name, node, container))

    def _branch(self, name: str, args: str, token: Token) -> None:
        top = self._top
        if top.name not in BRANCH_PARENTS[name]:
            raise self._error(token.line, f"unexpected {{{name}}} in {{{top.name}}}")

        if top.node.kind in (NodeKind.PLURAL, NodeKind.SELECT):
            case = CaseNode(
                line=token.line,
                value=_unquote(args) if name == "case" else None,
                is_default=name == "default",
            )
            top.node.cases.append(case)
            top.container = case.body
        else:
            branch = BranchNode(line=token.line, name=name, args=args)
            top.node.body.append(branch)
            top.container = branch.body

    def _close(self, name: str, token: Token) -> None:
        top = self._top
        if top.name == "file":
            raise self._error(token.line, f"unexpected {{/{name}}}")
        if name != top.name:
            raise self._error(
                token.line, f"expected {{/{top.name}}} but found {{/{name}}}"
            )
        self._stack.pop()


def _split_command(content: str) -> Tuple[str, str]:
    parts = content.split(None, 1)
    if not parts:
        return "", ""
    return parts[0], parts[1] if len(parts) > 1 else ""


def _print_node(text: str, line: int) -> PrintNode:
    match = _PHNAME.search(text)
    phname = match.group(1) if match else None
    expr = _PHNAME.sub("", text)
    # print directives are irrelevant to extraction
    expr = expr.split("|", 1)[0].strip()
    return PrintNode(line=line, expr=expr, phname=phname)


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_file(path: str, content: str) -> SoyFileNode:
    """Parse one Soy source file into a tree rooted at SoyFileNode."""
    return SoyParser(path, content).parse()

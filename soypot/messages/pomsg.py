"""
PO messages — Validation and linearization of {msg} for gettext catalogs

gettext can express one singular and one plural form per entry, so only a
subset of Soy messages is representable:
- a {plural} must be the only child of the message
- that plural has exactly {case 1} and {default}
- no {select}, and nothing nested inside plural cases but text and prints
- the message, and each plural case, has some text or a print

Placeholders are rendered by name in braces: "Hello, {NAME}!".
Messages must be annotated (set_placeholders_and_id) before linearizing.
"""

from typing import List, Optional

from ..core.ast import CaseNode, MsgNode, MsgPluralNode, Node, NodeKind
from ..core.errors import InvalidMessage


def plural_node(msg: MsgNode) -> Optional[MsgPluralNode]:
    """The message's plural, if its body starts with one."""
    if msg.body and msg.body[0].kind is NodeKind.PLURAL:
        return msg.body[0]
    return None


def validate(msg: MsgNode) -> None:
    """
    Check that a message can be written to a PO file.

    Raises:
        InvalidMessage: Describing the first violation found
    """
    for node in msg.body:
        if node.kind is NodeKind.SELECT:
            raise InvalidMessage("{select} is not supported in PO files", node.line)
        if node.kind is NodeKind.PLURAL and len(msg.body) != 1:
            raise InvalidMessage("{plural} must be the only child of {msg}", node.line)
        if node.kind not in (NodeKind.RAW_TEXT, NodeKind.PRINT, NodeKind.PLURAL):
            raise InvalidMessage(f"unexpected {node.kind.value} node in {{msg}}", node.line)

    plural = plural_node(msg)
    if plural is None:
        if _is_empty(msg.body):
            # an empty msgid would collide with the catalog header
            raise InvalidMessage("{msg} is empty", msg.line)
        return

    values = [None if case.is_default else case.value for case in plural.cases]
    if values != ["1", None]:
        raise InvalidMessage(
            "{plural} must contain exactly {case 1} and {default}", plural.line
        )
    for case in plural.cases:
        for node in case.body:
            if node.kind not in (NodeKind.RAW_TEXT, NodeKind.PRINT):
                raise InvalidMessage(
                    f"{{{node.kind.value}}} cannot be nested in a plural case", node.line
                )
        if _is_empty(case.body):
            label = "{default}" if case.is_default else f"{{case {case.value}}}"
            raise InvalidMessage(f"{label} of {{plural}} is empty", case.line)


def _is_empty(nodes: List[Node]) -> bool:
    """No prints and no text, e.g. `{msg}{/msg}` or `{msg}{nil}{/msg}`."""
    return all(node.kind is NodeKind.RAW_TEXT and not node.text for node in nodes)


def msgid(msg: MsgNode) -> str:
    """Singular form: the whole body, or the {case 1} body of a plural."""
    plural = plural_node(msg)
    if plural is None:
        return _linearize(msg, msg.body)
    return _linearize(msg, _case(plural, is_default=False).body)


def msgid_plural(msg: MsgNode) -> str:
    """Plural form: the {default} body of a plural, else empty."""
    plural = plural_node(msg)
    if plural is None:
        return ""
    return _linearize(msg, _case(plural, is_default=True).body)


def _case(plural: MsgPluralNode, is_default: bool) -> CaseNode:
    return next(c for c in plural.cases if c.is_default == is_default)


def _linearize(msg: MsgNode, nodes: List[Node]) -> str:
    if msg.placeholders is None:
        raise InvalidMessage("message has not been annotated", msg.line)

    parts = []
    for node in nodes:
        if node.kind is NodeKind.RAW_TEXT:
            parts.append(node.text)
        elif node.kind is NodeKind.PRINT:
            parts.append("{" + msg.placeholders[node] + "}")
        else:
            raise InvalidMessage(f"cannot linearize {node.kind.value} node", node.line)
    return "".join(parts)

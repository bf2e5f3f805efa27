"""
Message IDs — Deterministic fingerprints and placeholder names for {msg}

Key properties:
- DETERMINISTIC: same message content always produces the same id
- MEANING-AWARE: the same text with different `meaning` gets a different id
- DESCRIPTION-BLIND: editing `desc` never invalidates translations

Placeholder names come from the expression that is printed:
    {$userName}          -> USER_NAME
    {$user.firstName}    -> FIRST_NAME
    {$ij.siteName}       -> SITE_NAME
    {$x phname="count"}  -> COUNT
    {$a + 1}             -> XXX

Different expressions sharing a base name get numbered (NAME_1, NAME_2) in
order of first appearance; repeated identical expressions share a name.

Usage:
    set_placeholders_and_id(msg)
    msg.id            # 63-bit int
    msg.placeholders  # {PrintNode: "USER_NAME", ...}
"""

import re
from typing import Dict, List

import xxhash

from ..core.ast import MsgNode, Node, NodeKind, PrintNode
from ..core.errors import InvalidMessage


FALLBACK_NAME = "XXX"

# Keep ids in the positive signed 64-bit range
ID_MASK = 0x7FFFFFFFFFFFFFFF

# $name, $a.b.c, $a?.b; nothing else yields a readable name
_DATA_REF = re.compile(r'^\$[A-Za-z_]\w*(?:\??\.[A-Za-z_]\w*)*$')

# Unit separator keeps literal text from colliding with structure markers
_SEP = "\x1f"


def to_upper_underscore(name: str) -> str:
    """
    Convert any naming convention to SCREAMING_CASE.

    Examples:
        >>> to_upper_underscore("userName")
        'USER_NAME'
        >>> to_upper_underscore("HTMLParser")
        'HTML_PARSER'
        >>> to_upper_underscore("first_name")
        'FIRST_NAME'
    """
    name = re.sub(r'([A-Z]+)([A-Z][a-z])', r'\1_\2', name)
    name = re.sub(r'([a-z\d])([A-Z])', r'\1_\2', name)
    name = re.sub(r'[^A-Za-z\d]+', '_', name)
    return name.strip('_').upper()


def base_placeholder_name(node: PrintNode) -> str:
    """Placeholder name for a print before de-duplication."""
    if node.phname:
        return to_upper_underscore(node.phname) or FALLBACK_NAME

    expr = node.expr.strip()
    if not _DATA_REF.match(expr):
        return FALLBACK_NAME

    last_key = re.split(r'\??\.', expr[1:])[-1]
    return to_upper_underscore(last_key) or FALLBACK_NAME


def _normalize_expr(expr: str) -> str:
    return re.sub(r'\s+', '', expr)


def _print_nodes(nodes: List[Node]) -> List[PrintNode]:
    """Prints in body order, descending into plural and select cases."""
    found: List[PrintNode] = []
    for node in nodes:
        if node.kind is NodeKind.PRINT:
            found.append(node)
        elif node.kind in (NodeKind.PLURAL, NodeKind.SELECT, NodeKind.CASE):
            found.extend(_print_nodes(node.children()))
    return found


def placeholder_names(msg: MsgNode) -> Dict[Node, str]:
    """
    Compute the placeholder name of every print in a message.

    Returns:
        Mapping from PrintNode to its unique placeholder name
    """
    prints = _print_nodes(msg.body)

    # base name -> distinct normalized expressions, in first-seen order
    variants: Dict[str, List[str]] = {}
    for node in prints:
        base = base_placeholder_name(node)
        expr = _normalize_expr(node.expr)
        seen = variants.setdefault(base, [])
        if expr not in seen:
            seen.append(expr)

    names: Dict[Node, str] = {}
    for node in prints:
        base = base_placeholder_name(node)
        seen = variants[base]
        if len(seen) == 1:
            names[node] = base
        else:
            names[node] = f"{base}_{seen.index(_normalize_expr(node.expr)) + 1}"
    return names


def _check_structure(nodes: List[Node]) -> None:
    for node in nodes:
        if node.kind in (NodeKind.RAW_TEXT, NodeKind.PRINT):
            continue
        if node.kind in (NodeKind.PLURAL, NodeKind.SELECT):
            label = node.kind.value
            if node.default is None:
                raise InvalidMessage(f"{{{label} {node.expr}}} has no {{default}}", node.line)
            for case in node.cases:
                if node.kind is NodeKind.PLURAL and not case.is_default:
                    if not (case.value or "").lstrip("-").isdigit():
                        raise InvalidMessage(
                            f"plural case {case.value!r} is not an integer", case.line
                        )
                _check_structure(case.body)
            continue
        name = getattr(node, "name", node.kind.value)
        raise InvalidMessage(f"{{{name}}} is not allowed inside {{msg}}", node.line)


def _serialize(nodes: List[Node], names: Dict[Node, str]) -> str:
    parts = []
    for node in nodes:
        if node.kind is NodeKind.RAW_TEXT:
            parts.append(node.text)
        elif node.kind is NodeKind.PRINT:
            parts.append(f"{_SEP}{names[node]}{_SEP}")
        else:
            label = node.kind.value.upper()
            var = to_upper_underscore(node.var_name.split(".")[-1]) or FALLBACK_NAME
            cases = "".join(
                f"{_SEP}{'default' if c.is_default else 'case ' + str(c.value)}"
                f"{_SEP}{_serialize(c.body, names)}"
                for c in node.cases
            )
            parts.append(f"{_SEP}{label} {var}{cases}{_SEP}")
    return "".join(parts)


def compute_id(msg: MsgNode, names: Dict[Node, str]) -> int:
    """
    Fingerprint a message.

    Args:
        msg: Message to fingerprint
        names: Its placeholder names (see placeholder_names)

    Returns:
        Non-negative 63-bit integer id
    """
    content = _serialize(msg.body, names)
    fingerprint = xxhash.xxh64(content.encode("utf-8")).intdigest()
    if msg.meaning:
        # Fold the meaning in so equal text with different meanings differs
        fingerprint = xxhash.xxh64(
            msg.meaning.encode("utf-8"), seed=fingerprint
        ).intdigest()
    return fingerprint & ID_MASK


def set_placeholders_and_id(msg: MsgNode) -> None:
    """
    Annotate a message with its placeholder names and id.

    Overwrites earlier values with identical ones, so calling it again is
    harmless.

    Raises:
        InvalidMessage: If the message structure cannot be fingerprinted
    """
    _check_structure(msg.body)
    names = placeholder_names(msg)
    msg.placeholders = names
    msg.id = compute_id(msg, names)

"""
Core layer — syntax tree, parsing and the template registry.
"""

from .ast import (
    NodeKind, Node, SoyFileNode, NamespaceNode, TemplateNode, RawTextNode,
    PrintNode, MsgNode, MsgPluralNode, MsgSelectNode, CaseNode, CommandNode,
    BranchNode, walk, walk_messages,
)
from .errors import (
    ExtractionError, MalformedInput, DuplicateTemplate, ParseFailure,
    InvalidMessage, IOFailure, TemplateNotFound, ConfigError,
)
from .registry import TemplateRegistry, RegisteredTemplate

__all__ = [
    'NodeKind', 'Node', 'SoyFileNode', 'NamespaceNode', 'TemplateNode',
    'RawTextNode', 'PrintNode', 'MsgNode', 'MsgPluralNode', 'MsgSelectNode',
    'CaseNode', 'CommandNode', 'BranchNode', 'walk', 'walk_messages',
    'ExtractionError', 'MalformedInput', 'DuplicateTemplate', 'ParseFailure',
    'InvalidMessage', 'IOFailure', 'TemplateNotFound', 'ConfigError',
    'TemplateRegistry', 'RegisteredTemplate',
]

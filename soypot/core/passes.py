"""
Passes — Tree-wide processing over a TemplateRegistry.
"""

from ..messages.ids import set_placeholders_and_id
from .ast import walk_messages
from .registry import TemplateRegistry


def process_messages(registry: TemplateRegistry) -> int:
    """
    Compute message ids and placeholder names for every {msg} and store them
    on the nodes.

    Must complete before extraction. Safe to run more than once.

    Returns:
        Number of messages annotated
    """
    count = 0
    for entry in registry.templates():
        for msg in walk_messages(entry.node):
            set_placeholders_and_id(msg)
            count += 1
    return count

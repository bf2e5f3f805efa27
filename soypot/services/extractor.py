"""
CatalogExtractor — Turns annotated {msg} nodes into catalog entries.

Walks the registry in its canonical order (templates in registration order,
nodes depth-first pre-order) so the same registry always yields the same
document.

Usage:
    process_messages(registry)
    document = CatalogExtractor(registry).extract()
"""

import logging

from ..core.ast import MsgNode, walk_messages
from ..core.errors import InvalidMessage
from ..core.registry import RegisteredTemplate, TemplateRegistry
from ..messages import pomsg
from .catalog import CatalogDocument, CatalogEntry


logger = logging.getLogger(__name__)


class CatalogExtractor:
    """
    Extracts every message of a registry into a CatalogDocument.

    The first invalid message aborts extraction.
    """

    def __init__(self, registry: TemplateRegistry):
        """
        Initialize extractor.

        Args:
            registry: Registry whose messages were annotated by
                process_messages
        """
        self.registry = registry

    def extract(self) -> CatalogDocument:
        """
        Build the catalog document.

        Raises:
            InvalidMessage: If a message is not representable in a PO file
                or was never annotated
        """
        document = CatalogDocument()
        for template in self.registry.templates():
            for msg in walk_messages(template.node):
                document.append(self._entry(template, msg))
            logger.debug("extracted %s (%d entries so far)", template.name, len(document))
        return document

    def _entry(self, template: RegisteredTemplate, msg: MsgNode) -> CatalogEntry:
        pomsg.validate(msg)
        if msg.id is None:
            raise InvalidMessage("message has not been annotated", msg.line)

        plural = pomsg.plural_node(msg)
        plural_var = f" var={plural.var_name}" if plural else ""

        source = self.registry.source_file(template.name)
        line = self.registry.line_number(template.name, msg)

        return CatalogEntry(
            msgid=pomsg.msgid(msg),
            msgid_plural=pomsg.msgid_plural(msg),
            context=msg.meaning,
            comment=msg.desc,
            references=[
                f"{source}:{line}",
                f"id={msg.id}{plural_var}",
            ],
        )


def extract_catalog(registry: TemplateRegistry) -> CatalogDocument:
    """Convenience wrapper: CatalogExtractor(registry).extract()."""
    return CatalogExtractor(registry).extract()

"""
Catalog — Ordered extraction result and its .pot serialization

CatalogDocument keeps one CatalogEntry per extracted message, in traversal
order. Writing goes through polib; the document itself has no format
knowledge beyond that.

Usage:
    document = CatalogExtractor(registry).extract()
    document.write_to(sys.stdout, config.catalog)
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional, TextIO, Tuple

import polib

from ..config import CatalogConfig


@dataclass
class CatalogEntry:
    """One extracted message."""
    msgid: str
    msgid_plural: str = ""
    context: str = ""       # Message meaning (msgctxt)
    comment: str = ""       # Message description (extracted comment)
    references: List[str] = field(default_factory=list)  # "file:line", "id=N"

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.context, self.msgid, self.msgid_plural)


@dataclass
class CatalogDocument:
    """Extracted messages in extraction order."""
    entries: List[CatalogEntry] = field(default_factory=list)

    def append(self, entry: CatalogEntry) -> None:
        self.entries.append(entry)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self.entries)

    def merged(self) -> List[CatalogEntry]:
        """
        Collapse entries with the same context, msgid and msgid_plural.

        The first occurrence keeps its position; references and comments of
        later duplicates are appended without repeats.
        """
        by_key: Dict[Tuple[str, str, str], CatalogEntry] = {}
        result: List[CatalogEntry] = []
        for entry in self.entries:
            existing = by_key.get(entry.key)
            if existing is None:
                copy = CatalogEntry(
                    msgid=entry.msgid,
                    msgid_plural=entry.msgid_plural,
                    context=entry.context,
                    comment=entry.comment,
                    references=list(entry.references),
                )
                by_key[entry.key] = copy
                result.append(copy)
                continue
            comments = existing.comment.split("\n") if existing.comment else []
            if entry.comment and entry.comment not in comments:
                existing.comment = "\n".join(comments + [entry.comment])
            for ref in entry.references:
                if ref not in existing.references:
                    existing.references.append(ref)
        return result

    def to_pofile(self, config: Optional[CatalogConfig] = None) -> polib.POFile:
        """Build the polib representation of this document."""
        config = config or CatalogConfig()
        pofile = polib.POFile(wrapwidth=config.width)
        pofile.metadata = header_metadata(config)

        entries = self.merged() if config.merge_duplicates else self.entries
        for entry in entries:
            pofile.append(_po_entry(entry))
        return pofile

    def write_to(self, stream: TextIO, config: Optional[CatalogConfig] = None) -> None:
        """Serialize the catalog to a text stream."""
        text = str(self.to_pofile(config))
        if not text.endswith("\n"):
            text += "\n"
        stream.write(text)


def header_metadata(config: CatalogConfig) -> Dict[str, str]:
    metadata = {
        'Project-Id-Version': config.project,
        'Report-Msgid-Bugs-To': config.bugs_address,
    }
    if config.creation_date:
        metadata['POT-Creation-Date'] = datetime.now(timezone.utc).strftime(
            '%Y-%m-%d %H:%M%z'
        )
    metadata.update({
        'MIME-Version': '1.0',
        'Content-Type': 'text/plain; charset=UTF-8',
        'Content-Transfer-Encoding': '8bit',
    })
    return metadata


class _ReferencedEntry(polib.POEntry):
    """
    POEntry that writes each reference whole on its own `#:` line.

    polib wraps occurrences at spaces, which would split a reference such
    as "id=N var=count" across two lines.
    """

    def __init__(self, references: Optional[List[str]] = None, **kwargs):
        super().__init__(**kwargs)
        self.references = list(references or [])

    def __unicode__(self, wrapwidth=78):
        lines = super().__unicode__(wrapwidth).split("\n")
        # references follow the extracted comments
        at = 0
        while at < len(lines) and lines[at].startswith("#."):
            at += 1
        lines[at:at] = [f"#: {ref}" for ref in self.references]
        return "\n".join(lines)

    def __str__(self):
        return self.__unicode__()


def _po_entry(entry: CatalogEntry) -> polib.POEntry:
    kwargs = dict(
        msgid=entry.msgid,
        comment=entry.comment,
        references=entry.references,
    )
    if entry.context:
        kwargs['msgctxt'] = entry.context
    if entry.msgid_plural:
        kwargs['msgid_plural'] = entry.msgid_plural
        kwargs['msgstr_plural'] = {0: "", 1: ""}
    else:
        kwargs['msgstr'] = ""
    return _ReferencedEntry(**kwargs)

"""
Services layer — source discovery, catalog extraction and writing.
"""

from .catalog import CatalogDocument, CatalogEntry
from .extractor import CatalogExtractor, extract_catalog
from .sources import iter_source_files, load_registry, read_source

__all__ = [
    'CatalogDocument',
    'CatalogEntry',
    'CatalogExtractor',
    'extract_catalog',
    'iter_source_files',
    'load_registry',
    'read_source',
]

"""
soypot — gettext catalog extraction for Soy templates

Reads {msg} blocks out of Closure-style templates and writes a .pot file
translators can start from.

Usage:
    soypot templates/ > messages.pot
    soypot app.soy widgets/ -o messages.pot
"""

__version__ = "0.1.0"

# Core layer
from .core.ast import NodeKind, MsgNode, walk_messages
from .core.errors import (
    ExtractionError, MalformedInput, DuplicateTemplate, ParseFailure,
    InvalidMessage, IOFailure, TemplateNotFound, ConfigError,
)
from .core.registry import TemplateRegistry, RegisteredTemplate
from .core.parsing import parse_file
from .core.passes import process_messages

# Services layer
from .services.catalog import CatalogDocument, CatalogEntry
from .services.extractor import CatalogExtractor, extract_catalog
from .services.sources import load_registry

# Config
from .config import Config, ConfigManager, get_config

__all__ = [
    'NodeKind', 'MsgNode', 'walk_messages',
    'ExtractionError', 'MalformedInput', 'DuplicateTemplate', 'ParseFailure',
    'InvalidMessage', 'IOFailure', 'TemplateNotFound', 'ConfigError',
    'TemplateRegistry', 'RegisteredTemplate', 'parse_file', 'process_messages',
    'CatalogDocument', 'CatalogEntry', 'CatalogExtractor', 'extract_catalog',
    'load_registry',
    'Config', 'ConfigManager', 'get_config',
]

"""
Parsing module — Soy template source to syntax tree.

- Lexer: comments, {literal}, special characters, line joining
- SoyParser: block structure, messages, plurals, prints

Usage:
    from soypot.core.parsing import parse_file

    tree = parse_file("templates/app.soy", source)
"""

from .lexer import Lexer, Token, tokenize, join_lines, strip_comments
from .parser import SoyParser, parse_file, parse_attrs

__all__ = [
    'Lexer',
    'Token',
    'tokenize',
    'join_lines',
    'strip_comments',
    'SoyParser',
    'parse_file',
    'parse_attrs',
]

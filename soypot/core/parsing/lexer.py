"""
Lexer — Splits Soy source into raw text and {tag} tokens

Handles the parts of Soy that are purely lexical:
- `/* ... */` and `// ...` comments (line numbers are preserved)
- `{literal}...{/literal}` bodies, passed through untouched
- special character commands: {sp} {nil} {lb} {rb} {\\n} {\\r} {\\t}
- line joining of raw text

Line joining follows the Soy rules: each line is trimmed, empty lines are
dropped, and lines are joined with a single space unless the join borders a
tag or an HTML angle bracket.
"""

import bisect
import re
from dataclasses import dataclass
from typing import List

from ..errors import ParseFailure


TEXT = "text"
TAG = "tag"

SPECIAL_CHARS = {
    "sp": " ",
    "nil": "",
    "lb": "{",
    "rb": "}",
    "\\n": "\n",
    "\\r": "\r",
    "\\t": "\t",
}

_BLOCK_COMMENT = re.compile(r'/\*.*?\*/', re.DOTALL)
# `//` only starts a comment at line start or after whitespace (keeps URLs)
_LINE_COMMENT = re.compile(r'(^|[ \t])//[^\n]*', re.MULTILINE)


@dataclass
class Token:
    type: str
    value: str
    line: int


def strip_comments(source: str) -> str:
    """Remove comments, keeping every newline so line numbers stay valid."""
    source = _BLOCK_COMMENT.sub(lambda m: "\n" * m.group(0).count("\n"), source)
    return _LINE_COMMENT.sub(lambda m: m.group(1), source)


def join_lines(text: str) -> str:
    """Apply Soy line joining to a run of raw text."""
    lines = text.split("\n")
    if len(lines) == 1:
        return text

    parts = [lines[0].rstrip()]
    parts.extend(line.strip() for line in lines[1:-1])
    parts.append(lines[-1].lstrip())

    result = parts[0]
    for part in parts[1:]:
        if not part:
            continue
        if not result or result.endswith(">") or part.startswith("<"):
            result += part
        else:
            result += " " + part
    return result


class Lexer:
    """Tokenizer for one source file."""

    def __init__(self, path: str, content: str):
        self.path = path
        self.source = strip_comments(content)
        self._line_starts = [0] + [
            m.end() for m in re.finditer(r'\n', self.source)
        ]

    def line_of(self, offset: int) -> int:
        """1-indexed line of a character offset."""
        return bisect.bisect_right(self._line_starts, offset)

    def tokens(self) -> List[Token]:
        source = self.source
        tokens: List[Token] = []
        pos = 0

        while pos < len(source):
            start = source.find("{", pos)
            if start < 0:
                self._text(tokens, source[pos:], pos)
                break
            if start > pos:
                self._text(tokens, source[pos:start], pos)

            end = self._tag_end(start)
            content = source[start + 1:end].strip()
            line = self.line_of(start)

            if content == "literal":
                close = source.find("{/literal}", end + 1)
                if close < 0:
                    raise ParseFailure(self.path, line, "unterminated {literal}")
                tokens.append(Token(TEXT, source[end + 1:close], line))
                pos = close + len("{/literal}")
                continue

            if content in SPECIAL_CHARS:
                tokens.append(Token(TEXT, SPECIAL_CHARS[content], line))
            else:
                tokens.append(Token(TAG, content, line))
            pos = end + 1

        return tokens

    def _text(self, tokens: List[Token], text: str, offset: int) -> None:
        joined = join_lines(text)
        if joined:
            tokens.append(Token(TEXT, joined, self.line_of(offset)))

    def _tag_end(self, start: int) -> int:
        """Index of the `}` closing the tag opened at `start`."""
        quote = None
        i = start + 1
        while i < len(self.source):
            char = self.source[i]
            if quote:
                if char == "\\":
                    i += 1
                elif char == quote:
                    quote = None
            elif char in ("'", '"'):
                quote = char
            elif char == "{":
                break
            elif char == "}":
                return i
            i += 1
        raise ParseFailure(self.path, self.line_of(start), "unterminated tag")


def tokenize(path: str, content: str) -> List[Token]:
    """Tokenize `content`, reporting errors against `path`."""
    return Lexer(path, content).tokens()

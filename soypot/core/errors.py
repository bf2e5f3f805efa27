"""
Errors — Terminal failures of an extraction run

Extraction is an all-or-nothing batch job: every error below aborts the run.
Nothing is retried and no partial catalog is written.
"""

from typing import Optional


class ExtractionError(Exception):
    """Base class for every failure raised by soypot."""


class MalformedInput(ExtractionError):
    """Parsed file is empty or does not start with a namespace declaration."""


class DuplicateTemplate(ExtractionError):
    """Two templates resolve to the same qualified name."""

    def __init__(self, name: str, first: str, second: str):
        self.name = name
        self.first = first
        self.second = second
        super().__init__(
            f"template {name} is defined in both {first} and {second}"
        )


class ParseFailure(ExtractionError):
    """Template source could not be tokenized or parsed."""

    def __init__(self, path: str, line: int, message: str):
        self.path = path
        self.line = line
        self.message = message
        super().__init__(f"{path}:{line}: {message}")


class InvalidMessage(ExtractionError):
    """Message cannot be annotated or represented in the catalog format."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line:
            message = f"line {line}: {message}"
        super().__init__(message)


class IOFailure(ExtractionError):
    """Reading sources, walking directories or writing the catalog failed."""


class TemplateNotFound(ExtractionError, LookupError):
    """Registry lookup for an unknown template or node."""


class ConfigError(ExtractionError):
    """Configuration value is invalid."""

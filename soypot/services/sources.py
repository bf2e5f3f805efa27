"""
Sources — Discovers, reads and registers template files

Directories are walked recursively in sorted order so the registry, and
with it the catalog, comes out the same on every run.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, Optional

from ..config import SourceConfig
from ..core.errors import IOFailure
from ..core.parsing import parse_file
from ..core.registry import TemplateRegistry


logger = logging.getLogger(__name__)


def _walk_error(error: OSError) -> None:
    raise IOFailure(f"{error.filename}: {error.strerror}") from error


def iter_source_files(
    paths: Iterable[str],
    config: Optional[SourceConfig] = None,
) -> Iterator[Path]:
    """
    Yield template files under the given inputs.

    Files named directly are kept when their extension matches; directories
    are searched recursively, skipping excluded names.

    Raises:
        IOFailure: If an input does not exist or a directory cannot be read
    """
    config = config or SourceConfig()

    for raw in paths:
        path = Path(raw)
        if not path.exists():
            raise IOFailure(f"{raw}: no such file or directory")

        if not path.is_dir():
            if config.matches_extension(path):
                yield path
            continue

        for root, dirs, files in os.walk(path, onerror=_walk_error):
            base = Path(root)
            dirs[:] = sorted(d for d in dirs if not config.should_exclude(base / d))
            for name in sorted(files):
                candidate = base / name
                if config.matches_extension(candidate) and not config.should_exclude(candidate):
                    yield candidate


def read_source(path: Path) -> str:
    """Read a template file as UTF-8."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise IOFailure(f"{path}: {e}") from e


def load_registry(
    paths: Iterable[str],
    config: Optional[SourceConfig] = None,
    registry: Optional[TemplateRegistry] = None,
) -> TemplateRegistry:
    """
    Parse and register every template file under `paths`.

    Args:
        paths: Files and/or directories
        config: Extension and exclude settings
        registry: Registry to add to (a new one by default)

    Returns:
        The populated registry

    Raises:
        IOFailure, ParseFailure, MalformedInput, DuplicateTemplate
    """
    registry = registry if registry is not None else TemplateRegistry()

    for path in iter_source_files(paths, config):
        tree = parse_file(str(path), read_source(path))
        added = registry.add(tree)
        logger.debug("registered %d templates from %s", len(added), path)

    logger.info("registered %d templates", len(registry))
    return registry

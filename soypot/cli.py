"""
CLI -- Command interface

    soypot [options] INPUTPATH...

Pipeline: discover sources -> parse -> register -> annotate messages ->
extract -> write. The catalog is rendered into memory first and written only
after every step succeeded, so a failed run never leaves a truncated .pot.
"""

import argparse
import io
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import Config, ConfigManager
from .core.errors import ConfigError, ExtractionError, IOFailure
from .core.passes import process_messages
from .services.catalog import CatalogDocument
from .services.extractor import CatalogExtractor
from .services.sources import load_registry


logger = logging.getLogger(__name__)

USAGE = """soypot is a tool to extract messages from Soy templates.

Usage:

    soypot [-o FILE] [-p DIR] [-v] INPUTPATH...

INPUTPATH elements may be files or directories. Input directories will be
recursively searched for template files (*.soy unless configured otherwise).

The resulting POT (PO template) file is written to STDOUT, or to FILE
with -o.

Options:
  -o, --output FILE   write the catalog to FILE
  -p, --project DIR   directory holding .soypot/config.yaml
                      (default: SOYPOT_PROJECT_PATH or current)
  -v, --verbose       log progress to stderr
  -V, --version       show version and exit
"""


def usage(file=None) -> None:
    print(USAGE, file=file or sys.stderr)


class _ArgumentParser(argparse.ArgumentParser):
    """Reports bad arguments with the tool's usage and exit status 1."""

    def error(self, message):
        usage()
        self.exit(1, f"soypot: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog="soypot", add_help=False)
    parser.add_argument('paths', nargs='*', metavar='INPUTPATH')
    parser.add_argument('--output', '-o', metavar='FILE')
    parser.add_argument(
        '--project', '-p',
        default=os.environ.get("SOYPOT_PROJECT_PATH", "."),
    )
    parser.add_argument('--verbose', '-v', action='store_true')
    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'soypot {__version__}'
    )
    return parser


def wants_help(argv: List[str]) -> bool:
    """Only the first argument asks for help; later ones are input paths."""
    first = argv[0]
    return first.endswith("help") or first == "-h"


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
        stream=sys.stderr,
    )


def extract(paths: List[str], config: Config) -> CatalogDocument:
    """Run every phase over `paths` and return the catalog document."""
    registry = load_registry(paths, config.sources)
    count = process_messages(registry)
    logger.info("annotated %d messages", count)
    return CatalogExtractor(registry).extract()


def render(document: CatalogDocument, config: Config) -> str:
    buffer = io.StringIO()
    document.write_to(buffer, config.catalog)
    return buffer.getvalue()


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the soypot CLI.

    Returns:
        Process exit status: 0 on success, 1 on usage or extraction errors
    """
    argv = sys.argv[1:] if argv is None else list(argv)
    if not argv or wants_help(argv):
        usage()
        return 1

    args = build_parser().parse_args(argv)
    if not args.paths:
        usage()
        return 1

    configure_logging(args.verbose)

    try:
        config = ConfigManager(Path(args.project)).load()
        error = config.validate()
        if error:
            raise ConfigError(error)

        text = render(extract(args.paths, config), config)

        if args.output:
            try:
                Path(args.output).write_text(text, encoding="utf-8")
            except OSError as e:
                raise IOFailure(f"{args.output}: {e.strerror}") from e
        else:
            sys.stdout.write(text)
    except ExtractionError as e:
        print(e, file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())

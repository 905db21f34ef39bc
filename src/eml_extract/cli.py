"""Command-line interface for EML Extract.

This module provides the main entry point for the CLI application.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import structlog

from eml_extract import __version__
from eml_extract.batch import BatchProcessor
from eml_extract.config import Settings, get_settings
from eml_extract.emit import EmailsDocumentWriter
from eml_extract.exceptions import ConfigurationError, SystemFailureError
from eml_extract.utils import iter_source_files

logger = structlog.get_logger()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eml-extract",
        description="Extract metadata from EML files into an XML document",
    )
    parser.add_argument("paths", nargs="+", help="EML files, or directories containing them")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("-d", "--debug", action="store_true", help="Debug mode (more logging)")
    parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        default=None,
        help="Directory in which the output document is produced (default: settings output_dir)",
    )
    parser.add_argument(
        "--headers",
        action="store_true",
        default=None,
        help="Also emit every header of each message",
    )
    parser.add_argument(
        "--attachments",
        type=Path,
        default=None,
        help="Directory into which non-text body parts are extracted",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of parallel extraction workers (default: settings workers)",
    )
    return parser


def _apply_overrides(settings: Settings, parsed: argparse.Namespace) -> Settings:
    updates: dict[str, object] = {}
    if parsed.verbose:
        updates["verbose"] = True
    if parsed.debug:
        updates["debug"] = True
        updates["log_level"] = "DEBUG"
    if parsed.output_dir is not None:
        updates["output_dir"] = parsed.output_dir
    if parsed.headers:
        updates["include_headers"] = True
    if parsed.attachments is not None:
        updates["attachment_dir"] = parsed.attachments
    if parsed.workers is not None:
        if parsed.workers < 1:
            raise ConfigurationError(f"--workers must be at least 1, got {parsed.workers}")
        updates["workers"] = parsed.workers
    return settings.model_copy(update=updates)


def _check_output_dir(path: Path) -> None:
    if path.exists() and not path.is_dir():
        raise ConfigurationError(f"output directory '{path.absolute()}' is a file not a directory")


def _configure_logging(settings: Settings) -> None:
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level))


def main(args: list[str] | None = None) -> int:
    """Main entry point for the EML Extract CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, 1 for a fatal error, 2 for usage errors).
    """
    if args is None:
        args = sys.argv[1:]

    parser = _build_parser()
    parsed = parser.parse_args(args)

    try:
        settings = _apply_overrides(get_settings(), parsed)
        _check_output_dir(settings.output_dir)
    except ConfigurationError as exc:
        print(f"Fatal error: {exc}", file=sys.stderr)
        return 2

    _configure_logging(settings)
    logger.info(
        "eml_extract_started",
        version=__version__,
        debug=settings.debug,
        output_dir=str(settings.output_dir),
    )

    try:
        with EmailsDocumentWriter(settings.output_path) as writer:
            processor = BatchProcessor(settings, writer)
            result = processor.run(iter_source_files(parsed.paths, verbose=settings.verbose))
    except SystemFailureError as exc:
        logger.error("system_failure", error=str(exc))
        print(f"Fatal error: {exc}", file=sys.stderr)
        return 1

    print(
        f"Extracted {result.processed} emails into {settings.output_path} "
        f"({result.failed} failed, {result.rejected} ignored)"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())

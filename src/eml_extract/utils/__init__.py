"""Utility functions for EML Extract."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path

import structlog

logger = structlog.get_logger()


def iter_source_files(paths: Iterable[str | Path], verbose: bool = False) -> Iterator[Path]:
    """Expand files and directories into the files to process.

    Directories are walked recursively in sorted order. Missing paths are
    logged and skipped.

    Args:
        paths: Files or directories named on the command line.
        verbose: Log each directory as it is entered.

    Yields:
        Path of every regular file found.
    """
    for item in paths:
        path = Path(item)
        if not path.exists():
            logger.warning("source_not_found", path=str(path))
            continue
        if path.is_dir():
            if verbose:
                logger.info("processing_directory", path=str(path))
            try:
                children = sorted(path.iterdir())
            except OSError as exc:
                logger.warning("directory_unreadable", path=str(path), error=str(exc))
                continue
            yield from iter_source_files(children, verbose=verbose)
        elif path.is_file():
            yield path
        else:
            logger.info("source_ignored", path=str(path), reason="not a regular file")

"""Batch driver: extract, link and emit a set of EML files.

Extraction of each message is independent and may run on a worker pool.
Graph mutation and emission happen on the calling thread, in input order.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from eml_extract.config import Settings
from eml_extract.emit import EmailsDocumentWriter
from eml_extract.exceptions import ExtractionError, SourceRejectedError
from eml_extract.extraction import extract_record, load_message
from eml_extract.models import EmailRecord, RawMessage
from eml_extract.parsing import AttachmentPart, TempDirAttachmentStore, iter_attachments
from eml_extract.threads import ThreadGraph

logger = structlog.get_logger()


@dataclass
class BatchResult:
    """Counts for one batch run."""

    processed: int = 0
    rejected: int = 0
    failed: int = 0
    failures: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class _Outcome:
    path: Path
    record: EmailRecord | None = None
    message: RawMessage | None = None
    attachments: tuple[AttachmentPart, ...] = ()
    error: SourceRejectedError | ExtractionError | None = None


class BatchProcessor:
    """Processes EML files into an ``<Emails>`` document and a thread graph."""

    def __init__(
        self,
        settings: Settings,
        writer: EmailsDocumentWriter,
        graph: ThreadGraph | None = None,
    ) -> None:
        self.settings = settings
        self.writer = writer
        self.graph = graph if graph is not None else ThreadGraph()
        self._store = (
            TempDirAttachmentStore(settings.attachment_dir)
            if settings.attachment_dir is not None
            else None
        )

    def _extract(self, path: Path) -> _Outcome:
        try:
            record_name, message = load_message(path, self.settings.eml_suffix)
            record = extract_record(
                message, path, record_name=record_name, suffix=self.settings.eml_suffix
            )
        except (SourceRejectedError, ExtractionError) as exc:
            return _Outcome(path=path, error=exc)
        attachments: tuple[AttachmentPart, ...] = ()
        if self._store is not None:
            attachments = tuple(iter_attachments(message))
        return _Outcome(path=path, record=record, message=message, attachments=attachments)

    def _outcomes(self, paths: Iterable[Path]) -> Iterator[_Outcome]:
        if self.settings.workers <= 1:
            for path in paths:
                yield self._extract(path)
            return
        # At most a few outcomes per worker are in flight or waiting to be
        # consumed; results still come back in input order.
        window = self.settings.workers * 2
        pending: deque[Future[_Outcome]] = deque()
        with ThreadPoolExecutor(max_workers=self.settings.workers) as pool:
            for path in paths:
                pending.append(pool.submit(self._extract, path))
                if len(pending) >= window:
                    yield pending.popleft().result()
            while pending:
                yield pending.popleft().result()

    def run(self, paths: Iterable[Path]) -> BatchResult:
        """Process every path; rejected or failed sources are skipped.

        Raises:
            SystemFailureError: If the output document or attachment store
                cannot be written.
        """
        result = BatchResult()
        for outcome in self._outcomes(paths):
            if self.settings.verbose:
                logger.info("processing_source", path=str(outcome.path))

            if isinstance(outcome.error, SourceRejectedError):
                result.rejected += 1
                logger.info("eml_source_rejected", source=str(outcome.path), reason=str(outcome.error))
                continue
            if isinstance(outcome.error, ExtractionError):
                result.failed += 1
                result.failures[str(outcome.path)] = str(outcome.error)
                logger.warning(
                    "eml_extraction_failed",
                    source=outcome.error.source,
                    field=outcome.error.field,
                    error=outcome.error.reason,
                )
                continue

            record, message = outcome.record, outcome.message
            if record is None or message is None:
                continue
            if self._store is not None:
                for part in outcome.attachments:
                    self._store.store(part)
            self.graph.ingest(record)
            headers = message.headers if self.settings.include_headers else None
            self.writer.write_record(record, headers)
            result.processed += 1

        logger.info(
            "batch_complete",
            processed=result.processed,
            rejected=result.rejected,
            failed=result.failed,
            placeholders=len(self.graph.placeholders()),
        )
        return result

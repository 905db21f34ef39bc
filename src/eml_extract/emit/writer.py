"""Rendering of ``EmailRecord`` objects as an ``<Emails>`` document."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from types import TracebackType
from typing import IO

import structlog

from eml_extract.emit.markup import escape_text, sanitize_element_name
from eml_extract.exceptions import SystemFailureError
from eml_extract.models import EmailRecord, RawHeader

logger = structlog.get_logger()

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="no" ?>'


def _element(tag: str, value: str | None) -> str:
    return f" <{tag}>{escape_text(value or '')}</{tag}>\n"


def _repeated(tag: str, values: Iterable[str | None] | None) -> list[str]:
    # A None slot still gets an (empty) element so positions are preserved.
    return [_element(tag, value) for value in values or ()]


def render_headers(headers: Iterable[RawHeader]) -> str:
    """Render every header occurrence as ``<emailHeaders>`` children."""
    lines = [" <emailHeaders>\n"]
    for header in headers:
        name = sanitize_element_name(header.name)
        if not name:
            logger.debug("eml_header_name_unusable", header=header.name)
            continue
        lines.append(f"  <{name}>{escape_text(header.value)}</{name}>\n")
    lines.append(" </emailHeaders>\n")
    return "".join(lines)


def render_record(record: EmailRecord, headers: Iterable[RawHeader] | None = None) -> str:
    """Render one record as an ``<e>`` fragment.

    Absent fields are omitted. Element names follow the legacy layout: the
    first ``<f>`` is the source path, later ``<f>`` elements are From
    addresses.
    """
    parts = ["<e>\n"]
    if record.source_path is not None:
        parts.append(_element("f", record.source_path))
    if record.subject is not None:
        parts.append(_element("s", record.subject))
    if record.sent_date is not None:
        parts.append(_element("dt", record.sent_date.isoformat()))
    parts += _repeated("f", record.from_addrs)
    parts += _repeated("t", record.to_addrs)
    parts += _repeated("c", record.cc_addrs)
    parts += _repeated("b", record.bcc_addrs)
    if record.message_id is not None:
        parts.append(_element("i", record.message_id))
    parts += _repeated("rs", record.references)
    if record.in_reply_to is not None:
        parts.append(_element("irt", record.in_reply_to))
    if record.thread_index is not None:
        parts.append(_element("ti", record.thread_index))
    if headers is not None:
        parts.append(render_headers(headers))
    parts.append("</e>\n")
    return "".join(parts)


class EmailsDocumentWriter:
    """Writes the ``<Emails>`` document, one ``<e>`` element per record.

    Use as a context manager; the root element is closed on exit.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._fh: IO[str] | None = None
        self.count = 0

    def open(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = self._path.open("w", encoding="utf-8")
            self._fh.write(XML_DECLARATION)
            self._fh.write("<Emails>\n")
        except OSError as exc:
            raise SystemFailureError(f"Failure opening output file '{self._path}': {exc}") from exc
        logger.info("emails_document_opened", path=str(self._path))

    def write_record(self, record: EmailRecord, headers: Iterable[RawHeader] | None = None) -> None:
        if self._fh is None:
            raise SystemFailureError(f"Output file '{self._path}' is not open")
        try:
            self._fh.write(render_record(record, headers))
        except OSError as exc:
            raise SystemFailureError(f"Failure writing output file '{self._path}': {exc}") from exc
        self.count += 1

    def close(self) -> None:
        if self._fh is None:
            return
        try:
            self._fh.write("</Emails>\n")
            self._fh.close()
        except OSError as exc:
            raise SystemFailureError(f"Failure closing output file '{self._path}': {exc}") from exc
        finally:
            self._fh = None
        logger.info("emails_document_closed", path=str(self._path), records=self.count)

    def __enter__(self) -> EmailsDocumentWriter:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

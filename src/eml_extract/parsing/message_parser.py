"""Stream-based parser turning EML source into a ``RawMessage`` tree.

The stdlib ``email`` parser does the MIME work under the ``compat32``
policy, which keeps every header exactly as it was folded in the source.
This module converts its result into the generic ``RawMessage`` tree used by
extraction. Nothing here touches the network or writes files.
"""

from __future__ import annotations

import re
from email import errors, message_from_bytes, policy
from email.message import Message
from email.parser import BytesHeaderParser

import structlog

from eml_extract.exceptions import ParseError
from eml_extract.models import RawHeader, RawMessage

logger = structlog.get_logger()

_EOL = re.compile(r"\r\n|\r|\n")


def _header_text(value: str) -> str:
    """Turn a header value as read off the wire into clean text.

    The parser reads bytes as ASCII with surrogate escapes. Raw 8-bit bytes
    are decoded as UTF-8 when they form valid UTF-8, otherwise as Latin-1, so
    the result never carries surrogates.
    """
    data = value.encode("ascii", errors="surrogateescape")
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def _body_text(payload: str) -> str:
    # Undecodable body bytes stay as surrogate escapes for the attachment store.
    return payload.encode("ascii", errors="surrogateescape").decode(
        "utf-8", errors="surrogateescape"
    )


def _build_header(name: str, raw: str) -> RawHeader:
    # Unfolding removes only the line breaks; the leading whitespace of each
    # continuation line stays part of the value.
    text = _header_text(raw)
    return RawHeader(
        name=name,
        value=_EOL.sub("", text).strip(),
        raw_value=_EOL.sub("\r\n", text).rstrip(),
    )


def _convert(mime: Message, body: str | None = None) -> RawMessage:
    headers = tuple(_build_header(name, value) for name, value in mime.raw_items())
    if not mime.is_multipart():
        payload = mime.get_payload()
        text = _body_text(payload) if isinstance(payload, str) else ""
        return RawMessage(headers=headers, body=text, mime=mime)

    parts = tuple(_convert(part) for part in mime.get_payload())
    return RawMessage(headers=headers, body=body or "", parts=parts, mime=mime)


def _full_body(data: bytes) -> str:
    """Return the undivided body of a message, for line accounting."""
    payload = BytesHeaderParser(policy=policy.compat32).parsebytes(data).get_payload()
    return _body_text(payload) if isinstance(payload, str) else ""


def parse_message(source: bytes | str, source_id: str = "<memory>") -> RawMessage:
    """Parse EML source into a ``RawMessage``.

    Args:
        source: Raw message bytes or already-decoded text (encoded back to
            UTF-8 before parsing).
        source_id: Identifier used in error messages (usually the file path).

    Returns:
        RawMessage: Headers in source order plus the body (and parts, for
        multipart messages).

    Raises:
        ParseError: If the source has no discernible header block.
    """
    if isinstance(source, str):
        data = source.encode("utf-8", errors="surrogateescape")
    else:
        data = source

    if not data.strip():
        raise ParseError(source_id, "source is empty")

    mime = message_from_bytes(data, policy=policy.compat32)
    if any(isinstance(d, errors.FirstHeaderLineIsContinuationDefect) for d in mime.defects):
        raise ParseError(source_id, "continuation line before any header")
    if not mime.keys():
        raise ParseError(source_id, "no header block")

    for defect in mime.defects:
        logger.debug("eml_parse_defect", source=source_id, defect=type(defect).__name__)

    body = _full_body(data) if mime.is_multipart() else None
    return _convert(mime, body)

"""Encoded-word decoding for header values."""

from __future__ import annotations

from email.errors import HeaderParseError
from email.header import decode_header, make_header

import structlog

logger = structlog.get_logger()


def decode_header_text(value: str | None) -> str | None:
    """Decode ``=?charset?encoding?text?=`` tokens in a header value.

    An unknown charset or a malformed encoded word is not an error: the
    literal text is kept, since even encoded it is plain ASCII.
    """
    if value is None or "=?" not in value:
        return value
    try:
        return str(make_header(decode_header(value)))
    except (HeaderParseError, LookupError, UnicodeError, ValueError) as exc:
        logger.debug("eml_header_decode_failed", value=value, error=str(exc))
        return value

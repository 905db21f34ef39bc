"""Escaping rules for the metadata markup document."""

from __future__ import annotations

import re
from xml.sax.saxutils import escape

_EXTRA_ENTITIES = {'"': "&quot;", "'": "&apos;"}
_SURROGATE = re.compile("[\ud800-\udfff]")


def _without_surrogates(text: str) -> str:
    # Lone surrogates (from undecodable bytes) cannot be written as UTF-8.
    return _SURROGATE.sub("\ufffd", text)


def escape_text(text: str) -> str:
    """Replace ``& < > " '`` with their predefined entity references.

    Non-ASCII characters pass through; the document is written as UTF-8.
    Lone surrogates become U+FFFD.
    """
    return escape(_without_surrogates(text), _EXTRA_ENTITIES)


def sanitize_element_name(name: str) -> str:
    """Turn an arbitrary header name into a usable element name.

    Letters are kept, a digit that would start the name gets an ``X`` prefix,
    ``$`` becomes ``Dollar`` and anything else is dropped. Lossy:
    ``X-My$Header2`` becomes ``XMyDollarHeader2``.
    """
    out: list[str] = []
    for c in name:
        if c.isalpha():
            out.append(c)
        elif c.isdigit():
            if not out:
                out.append("X")
            out.append(c)
        elif c == "$":
            out.append("Dollar")
    return "".join(out)

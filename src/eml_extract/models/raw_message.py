"""Generic header/body tree produced by the message parser."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from email.message import Message

# A line is any run ending in LF, or the unterminated tail.
_LINE = re.compile(r"[^\n]*\n|[^\n]+\Z")


@dataclass(frozen=True)
class RawHeader:
    """One header occurrence.

    ``value`` is the unfolded value; ``raw_value`` keeps the original folding
    with continuation lines joined by CRLF.
    """

    name: str
    value: str
    raw_value: str


@dataclass(frozen=True)
class RawMessage:
    """A message (or body part): ordered headers plus a text or multipart body."""

    headers: tuple[RawHeader, ...]
    # Full body text. A top-level multipart message keeps it alongside its
    # parts; nested containers leave it empty. Undecodable bytes are carried
    # as surrogate escapes.
    body: str = ""
    parts: tuple[RawMessage, ...] = field(default_factory=tuple)
    mime: Message | None = field(default=None, compare=False, repr=False)

    @property
    def is_multipart(self) -> bool:
        return bool(self.parts)

    def get_all(self, name: str) -> list[str]:
        """Return every unfolded value of ``name`` in source order."""
        key = name.lower()
        return [h.value for h in self.headers if h.name.lower() == key]

    def get_raw_all(self, name: str) -> list[str]:
        """Return every raw (still folded) value of ``name`` in source order."""
        key = name.lower()
        return [h.raw_value for h in self.headers if h.name.lower() == key]

    def get(self, name: str) -> str | None:
        values = self.get_all(name)
        return values[0] if values else None

    @property
    def content_type(self) -> str:
        """Lower-cased MIME type, defaulting to text/plain."""
        return self._content_type_message().get_content_type()

    @property
    def content_type_params(self) -> dict[str, str]:
        params = self._content_type_message().get_params() or []
        # First entry is the MIME type itself.
        return {k.lower(): v for k, v in params[1:]}

    def _content_type_message(self) -> Message:
        if self.mime is not None:
            return self.mime
        m = Message()
        value = self.get("Content-Type")
        if value:
            m["Content-Type"] = value
        return m

    def decoded_payload(self) -> bytes:
        """Body bytes with the Content-Transfer-Encoding undone."""
        if self.mime is not None and not self.mime.is_multipart():
            payload = self.mime.get_payload(decode=True)
            if payload is not None:
                return payload
        return self.body.encode("utf-8", errors="surrogateescape")

    def walk(self) -> Iterator[RawMessage]:
        """Depth-first iteration over this message and all nested parts."""
        yield self
        for part in self.parts:
            yield from part.walk()

    @property
    def body_line_count(self) -> int:
        # Only LF ends a line; form feeds and other separators do not.
        return len(_LINE.findall(self.body))

"""Hand-off of non-text body parts to attachment storage.

The parser only identifies the parts; transfer decoding is left to the stdlib
message each part was parsed from, and where the bytes end up is the store's
business.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import structlog

from eml_extract.exceptions import SystemFailureError
from eml_extract.models import RawMessage

logger = structlog.get_logger()


@dataclass(frozen=True)
class AttachmentPart:
    """A decoded non-text body part."""

    content: bytes
    content_type: str
    mime_type: str
    name: str | None

    @property
    def extension(self) -> str:
        """Suffix used when storing the part: its name, or ``txt``."""
        return self.name if self.name else "txt"


class AttachmentStore(Protocol):
    """Anything that can persist an attachment and hand back a reference."""

    def store(self, part: AttachmentPart) -> Path: ...


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def split_content_type(content_type: str) -> tuple[str, str | None]:
    """Return the MIME type and the ``name=`` parameter of a Content-Type value.

    The MIME type is the first ``;``-delimited segment.
    """
    mime_type = ""
    name = None
    for i, token in enumerate(content_type.split(";")):
        token = token.strip()
        if i == 0:
            mime_type = token.lower()
        elif token.lower().startswith("name="):
            name = _unquote(token[5:])
            break
    return mime_type, name or None


def iter_attachments(message: RawMessage) -> Iterator[AttachmentPart]:
    """Yield every leaf part whose content type is not ``text/*``."""
    for part in message.walk():
        if part.is_multipart:
            continue
        content_type = part.get("Content-Type") or "text/plain"
        mime_type, name = split_content_type(content_type)
        if mime_type.startswith(("text/", "multipart/")):
            continue
        if name is None and part.mime is not None:
            # Fall back to Content-Disposition filename.
            name = part.mime.get_filename()
        yield AttachmentPart(
            content=part.decoded_payload(),
            content_type=content_type,
            mime_type=mime_type,
            name=name or None,
        )


class TempDirAttachmentStore:
    """Writes attachments to a directory as ``<n>.<name>`` files."""

    def __init__(self, directory: Path) -> None:
        self._directory = directory
        self._next_id = 1

    def store(self, part: AttachmentPart) -> Path:
        """Write one part and return its path.

        Raises:
            SystemFailureError: If the file cannot be written.
        """
        # Names come from the message; keep only the final path segment.
        suffix = Path(part.extension).name or "txt"
        path = self._directory / f"{self._next_id}.{suffix}"
        self._next_id += 1
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            path.write_bytes(part.content)
        except OSError as exc:
            raise SystemFailureError(f"Failed creating attachment file '{path}': {exc}") from exc
        logger.debug("eml_attachment_stored", path=str(path), mime_type=part.mime_type)
        return path

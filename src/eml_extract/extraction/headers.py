"""Extraction of typed metadata from a parsed EML message."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path, PurePath

import structlog

from eml_extract.exceptions import (
    AddressParseError,
    ExtractionError,
    SourceRejectedError,
    SystemFailureError,
)
from eml_extract.extraction.addresses import parse_address_list, recover_folded_addresses
from eml_extract.extraction.dates import parse_sent_date
from eml_extract.extraction.decoding import decode_header_text
from eml_extract.models import AddressList, EmailRecord, RawMessage
from eml_extract.parsing import parse_message

logger = structlog.get_logger()

# Headers whose broken folding can be repaired; From is always parsed strictly.
_RECOVERABLE = frozenset({"to", "cc", "bcc"})

# Alternative spellings, checked in order. The underscore variants come from a
# legacy export pipeline that normalizes header names.
MESSAGE_ID_HEADERS = ("Message-ID", "$MessageID")
IN_REPLY_TO_HEADERS = ("In-Reply-To", "In_Reply_To")
THREAD_INDEX_HEADERS = ("Thread_Index", "Thread-Index")


def derive_record_name(source: str | PurePath, suffix: str = ".eml") -> str:
    """Derive the record name from a source path.

    Takes the final path segment, strips ``suffix`` (case-insensitively) and
    trims whitespace.

    Raises:
        SourceRejectedError: If the name does not end with ``suffix``.
    """
    name = PurePath(source).name
    if not name.lower().endswith(suffix.lower()):
        raise SourceRejectedError(str(source), f"not an {suffix.lstrip('.').upper()} file")
    return name[: len(name) - len(suffix)].strip()


def _fallback_record_name(source: str, suffix: str) -> str:
    name = PurePath(source).name
    if name.lower().endswith(suffix.lower()):
        name = name[: len(name) - len(suffix)]
    return name.strip()


@contextmanager
def _field(source: str, name: str) -> Iterator[None]:
    """Wrap low-level failures while extracting one field."""
    try:
        yield
    except ExtractionError:
        raise
    except (ValueError, LookupError, UnicodeError) as exc:
        raise ExtractionError(source, name, str(exc)) from exc


def _first_header(message: RawMessage, names: tuple[str, ...]) -> str | None:
    """Return the first non-empty, decoded value among ``names``."""
    for name in names:
        for value in message.get_all(name):
            if value.strip():
                return decode_header_text(value.strip())
    return None


def _address_header(message: RawMessage, name: str, source: str) -> AddressList | None:
    values = message.get_all(name)
    if not values:
        return None

    addresses: AddressList = []
    for value, raw in zip(values, message.get_raw_all(name)):
        try:
            addresses.extend(parse_address_list(value))
            continue
        except AddressParseError as exc:
            if name.lower() not in _RECOVERABLE:
                raise ExtractionError(source, name, f"{exc} in '{value}'") from exc
            logger.info("eml_address_fold_recovery", source=source, header=name, error=str(exc))

        cleaned = recover_folded_addresses(raw)
        try:
            addresses.extend(parse_address_list(cleaned))
        except AddressParseError as exc:
            raise ExtractionError(
                source, name, f"recipient list '{cleaned}' is malformed: {exc}"
            ) from exc
    return addresses


def _sent_date(message: RawMessage, source: str) -> datetime:
    values = message.get_all("Date")
    if not values:
        raise ExtractionError(source, "Date", "email didn't have a Date header")
    try:
        return parse_sent_date(values[0])
    except ValueError as exc:
        raise ExtractionError(source, "Date", f"{exc} (raw value '{values[0]}')") from exc


def _references(message: RawMessage) -> list[str]:
    tokens: list[str] = []
    for value in message.get_all("References"):
        tokens.extend((decode_header_text(value) or "").split())
    return tokens


def extract_record(
    message: RawMessage,
    source: str | PurePath,
    *,
    record_name: str | None = None,
    suffix: str = ".eml",
) -> EmailRecord:
    """Build an ``EmailRecord`` from a parsed message.

    Args:
        message: Parsed message.
        source: Source identifier (usually the file path), used in errors and
            to derive the record name.
        record_name: Record name to use instead of deriving one from
            ``source``.
        suffix: Extension stripped when deriving the record name.

    Returns:
        EmailRecord: The extracted metadata.

    Raises:
        ExtractionError: If the source identifier is empty, the Date header is
            missing or unparseable, or an address header cannot be parsed even
            after fold recovery.
    """
    source_id = str(source).strip()
    if not source_id:
        raise ExtractionError("<unknown>", "source", "no source identifier")

    sent_date = _sent_date(message, source_id)

    with _field(source_id, "Subject"):
        subject = decode_header_text(message.get("Subject"))

    participants: dict[str, AddressList | None] = {}
    for header in ("From", "To", "Cc", "Bcc"):
        with _field(source_id, header):
            participants[header] = _address_header(message, header, source_id)

    with _field(source_id, "Message-ID"):
        message_id = _first_header(message, MESSAGE_ID_HEADERS)
    with _field(source_id, "References"):
        references = _references(message)
    with _field(source_id, "In-Reply-To"):
        in_reply_to = _first_header(message, IN_REPLY_TO_HEADERS)
    with _field(source_id, "Thread-Index"):
        thread_index = _first_header(message, THREAD_INDEX_HEADERS)

    record = EmailRecord(
        message_id=message_id,
        record_name=record_name or _fallback_record_name(source_id, suffix),
        source_path=source_id,
        subject=subject,
        from_addrs=participants["From"],
        to_addrs=participants["To"],
        cc_addrs=participants["Cc"],
        bcc_addrs=participants["Bcc"],
        sent_date=sent_date,
        references=references,
        in_reply_to=in_reply_to,
        thread_index=thread_index,
        header_count=len(message.headers),
        line_count=message.body_line_count,
    )
    logger.debug("eml_record_extracted", source=source_id, message_id=message_id)
    return record


def load_message(path: Path, suffix: str = ".eml") -> tuple[str, RawMessage]:
    """Check the file name, then read and parse an EML file.

    Returns:
        The record name and the parsed message.

    Raises:
        SourceRejectedError: If the file is not an EML file, is missing, or
            has no header block.
        SystemFailureError: If the file exists but cannot be read.
    """
    record_name = derive_record_name(path, suffix)
    try:
        data = path.read_bytes()
    except (FileNotFoundError, IsADirectoryError) as exc:
        raise SourceRejectedError(str(path), f"EML file was not found: {exc}") from exc
    except OSError as exc:
        raise SystemFailureError(f"Failed reading '{path}': {exc}") from exc
    return record_name, parse_message(data, str(path))


def load_record(path: Path, suffix: str = ".eml") -> EmailRecord:
    """Read, parse and extract a single EML file."""
    record_name, message = load_message(path, suffix)
    return extract_record(message, path, record_name=record_name, suffix=suffix)

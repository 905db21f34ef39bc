"""Date header normalization."""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime


def normalize_date_value(value: str) -> str:
    """Strip a trailing parenthetical zone comment from a Date value.

    Some exports append a redundant named zone after the numeric offset,
    e.g. ``Tue, 1 Jan 2019 10:00:00 +1000 (AEST)``. Everything from the last
    ``(`` onwards is removed, together with the space separating it.
    """
    value = value.strip()
    i = value.rfind("(")
    if i != -1:
        head = value[:i]
        if head.endswith((" ", "\t")):
            head = head[:-1]
        value = head
    return value.strip()


def parse_sent_date(value: str) -> datetime:
    """Parse an RFC 5322 date into an offset-aware datetime.

    A ``-0000`` (or missing) zone is taken to be UTC.

    Raises:
        ValueError: If the value is not a valid internet date-time.
    """
    cleaned = normalize_date_value(value)
    if not cleaned:
        raise ValueError(f"empty date value '{value}'")
    try:
        dt = parsedate_to_datetime(cleaned)
    except (TypeError, ValueError, IndexError, OverflowError) as exc:
        raise ValueError(f"unparseable date '{value}'") from exc
    if dt is None:
        raise ValueError(f"unparseable date '{value}'")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt

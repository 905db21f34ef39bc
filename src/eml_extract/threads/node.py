"""Thread graph node."""

from __future__ import annotations

from dataclasses import dataclass, field

from eml_extract.models import EmailRecord


@dataclass(eq=False)
class ThreadNode:
    """One message (real or placeholder) in the reply/reference graph.

    Edges hold graph keys rather than node objects; the ``ThreadGraph`` owns
    every node and resolves keys back to nodes.
    """

    key: str
    record: EmailRecord
    replying_to: str | None = None
    replies: set[str] = field(default_factory=set)
    referenced_by: set[str] = field(default_factory=set)
    broken_thread: bool = False
    thread_length: int = 0

    @property
    def message_id(self) -> str | None:
        return self.record.message_id

    @property
    def is_placeholder(self) -> bool:
        return self.record.is_placeholder

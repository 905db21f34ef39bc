"""Identifier-keyed reply/reference graph shared across a batch.

All mutation goes through a single lock, so extraction may run in parallel
while records are added to the graph one at a time.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator

import structlog

from eml_extract.models import EmailRecord
from eml_extract.threads.node import ThreadNode

logger = structlog.get_logger()


def _node_key(record: EmailRecord) -> str:
    # Messages without an ID cannot be referenced, but still need a slot.
    return record.message_id or f"<no-id:{record.record_name}>"


class ThreadGraph:
    """Owns every ``ThreadNode`` of a batch, keyed by message ID."""

    def __init__(self) -> None:
        self._nodes: dict[str, ThreadNode] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, key: object) -> bool:
        return key in self._nodes

    def __iter__(self) -> Iterator[ThreadNode]:
        return iter(list(self._nodes.values()))

    def get(self, key: str | None) -> ThreadNode | None:
        if key is None:
            return None
        return self._nodes.get(key)

    def resolve(self, keys: set[str]) -> list[ThreadNode]:
        """Turn a set of edge keys into nodes, sorted by key."""
        return [self._nodes[k] for k in sorted(keys) if k in self._nodes]

    def placeholders(self) -> list[ThreadNode]:
        return [node for node in self._nodes.values() if node.is_placeholder]

    def add_record(self, record: EmailRecord) -> ThreadNode:
        """Insert a real record, upgrading a placeholder with the same ID."""
        with self._lock:
            return self._add_record(record)[0]

    def _add_record(self, record: EmailRecord) -> tuple[ThreadNode, bool]:
        """Return the node for ``record`` and whether the record was taken.

        A real record is taken when it creates or upgrades a node; a second
        real record with the same ID is not.
        """
        key = _node_key(record)
        node = self._nodes.get(key)
        if node is None:
            node = ThreadNode(key=key, record=record)
            self._nodes[key] = node
            return node, True

        if node.is_placeholder and not record.is_placeholder:
            node.record.upgrade_from(record)
            logger.debug("thread_placeholder_upgraded", message_id=key)
            return node, True
        if not record.is_placeholder:
            logger.warning(
                "thread_duplicate_message_id",
                message_id=key,
                kept=node.record.record_name,
                ignored=record.record_name,
            )
        return node, False

    def link(self, child: ThreadNode, parent: ThreadNode | None) -> None:
        """Record that ``child`` replies to ``parent``.

        A missing parent marks the child's thread as broken.
        """
        with self._lock:
            self._link(child, parent)

    def _link(self, child: ThreadNode, parent: ThreadNode | None) -> None:
        if parent is None:
            child.broken_thread = True
            return
        child.replying_to = parent.key
        parent.replies.add(child.key)

    def record_reference(self, referencer: ThreadNode, referenced_id: str) -> ThreadNode:
        """Note that ``referencer`` references ``referenced_id``.

        A placeholder node is created first if the ID has not been seen.
        """
        with self._lock:
            return self._record_reference(referencer, referenced_id)

    def _record_reference(self, referencer: ThreadNode, referenced_id: str) -> ThreadNode:
        node = self._nodes.get(referenced_id)
        if node is None:
            placeholder = EmailRecord.placeholder(referenced_id, referencer.record.record_name)
            node = ThreadNode(key=referenced_id, record=placeholder)
            self._nodes[referenced_id] = node
            logger.debug(
                "thread_placeholder_created",
                message_id=referenced_id,
                referenced_by=referencer.key,
            )
        node.referenced_by.add(referencer.key)
        return node

    def ingest(self, record: EmailRecord) -> ThreadNode:
        """Add a record and wire up its references and in-reply-to edges."""
        with self._lock:
            node, taken = self._add_record(record)
            if not taken:
                # Ignored duplicate; the kept record's edges stand.
                return node
            for ref in record.references:
                if ref != node.key:
                    self._record_reference(node, ref)
            if record.in_reply_to == node.key:
                # A message cannot reply to itself.
                self._link(node, None)
            elif record.in_reply_to:
                parent = self._record_reference(node, record.in_reply_to)
                self._link(node, parent)
            return node

"""Reply/reference graph of the messages in a batch."""

from .graph import ThreadGraph
from .node import ThreadNode

__all__ = ["ThreadGraph", "ThreadNode"]

"""EML source parsing.

This package turns raw message source into a generic header/body tree and
identifies the body parts that are handed off to attachment storage.
"""

from .attachments import AttachmentPart, TempDirAttachmentStore, iter_attachments
from .message_parser import parse_message

__all__ = ["AttachmentPart", "TempDirAttachmentStore", "iter_attachments", "parse_message"]

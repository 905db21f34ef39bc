"""Markup emission of extracted email metadata."""

from .markup import escape_text, sanitize_element_name
from .writer import EmailsDocumentWriter, render_headers, render_record

__all__ = [
    "EmailsDocumentWriter",
    "escape_text",
    "render_headers",
    "render_record",
    "sanitize_element_name",
]

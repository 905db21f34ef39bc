"""Data models for EML Extract.

This module contains the typed metadata record produced by extraction and the
generic header/body tree produced by parsing.
"""

from eml_extract.models.email_record import AddressList, EmailRecord
from eml_extract.models.raw_message import RawHeader, RawMessage

__all__ = ["AddressList", "EmailRecord", "RawHeader", "RawMessage"]

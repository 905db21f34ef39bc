"""Metadata extraction from parsed EML messages.

This package turns the generic header set of a message into a typed
``EmailRecord``: decoding encoded words, repairing broken address folding and
normalizing dates along the way.
"""

from .addresses import parse_address_list, recover_folded_addresses
from .dates import normalize_date_value, parse_sent_date
from .decoding import decode_header_text
from .headers import derive_record_name, extract_record, load_message, load_record

__all__ = [
    "decode_header_text",
    "derive_record_name",
    "extract_record",
    "load_message",
    "load_record",
    "normalize_date_value",
    "parse_address_list",
    "parse_sent_date",
    "recover_folded_addresses",
]

"""Extracted metadata for a single email message.

A record is either real (built from a parsed EML source) or a placeholder
standing in for a message that other messages reference but which was never
seen. Placeholders carry only a message ID and a record name, and are
upgraded in place when the real message turns up.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

AddressList = list[str | None]

_EXTRACTED_FIELDS = (
    "source_path",
    "subject",
    "from_addrs",
    "to_addrs",
    "cc_addrs",
    "bcc_addrs",
    "sent_date",
    "references",
    "in_reply_to",
    "thread_index",
    "header_count",
    "line_count",
)


class EmailRecord(BaseModel):
    """Metadata extracted from one EML file."""

    model_config = ConfigDict(validate_assignment=True)

    # Identity
    message_id: str | None = Field(default=None, description="Message-ID header")
    record_name: str = Field(description="EML file name without its extension")
    source_path: str | None = Field(default=None, description="Path of the EML file")
    is_placeholder: bool = Field(
        default=False,
        description="True if referenced by another email but never seen",
    )

    # Participants. None means the header was absent; a None entry means an
    # address slot that could not be resolved.
    subject: str | None = Field(default=None, description="Decoded Subject header")
    from_addrs: AddressList | None = Field(default=None, description="From addresses")
    to_addrs: AddressList | None = Field(default=None, description="To addresses")
    cc_addrs: AddressList | None = Field(default=None, description="Cc addresses")
    bcc_addrs: AddressList | None = Field(default=None, description="Bcc addresses")

    sent_date: datetime | None = Field(default=None, description="Parsed Date header")

    # Threading hints
    references: list[str] = Field(default_factory=list, description="References tokens")
    in_reply_to: str | None = Field(default=None, description="In-Reply-To header")
    thread_index: str | None = Field(default=None, description="Thread-Index header")

    # Accounting
    header_count: int = Field(default=0, ge=0, description="Number of header occurrences")
    line_count: int = Field(default=0, ge=0, description="Number of lines in the body")

    @field_validator("sent_date")
    @classmethod
    def _require_offset(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.utcoffset() is None:
            raise ValueError("sent_date must carry a UTC offset")
        return value

    @classmethod
    def placeholder(cls, message_id: str, record_name: str) -> EmailRecord:
        """Build a placeholder for a referenced but unseen message."""
        return cls(message_id=message_id, record_name=record_name, is_placeholder=True)

    def upgrade_from(self, real: EmailRecord) -> None:
        """Fill this placeholder with the fields of the real message.

        The message ID is kept as the graph key; everything else is copied.
        """
        if not self.is_placeholder:
            raise ValueError(f"Record '{self.record_name}' is not a placeholder")
        if real.message_id != self.message_id:
            raise ValueError(
                f"Cannot upgrade placeholder '{self.message_id}' from '{real.message_id}'"
            )
        self.record_name = real.record_name
        for name in _EXTRACTED_FIELDS:
            setattr(self, name, getattr(real, name))
        self.is_placeholder = False

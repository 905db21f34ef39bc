"""Custom exceptions for EML Extract."""

from __future__ import annotations


class EmlExtractError(Exception):
    """Base exception for all EML Extract errors."""


class SourceRejectedError(EmlExtractError):
    """Exception raised when an input is not an EML-class source.

    The caller skips the input and continues the batch.
    """

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Ignoring '{source}': {reason}")


class ParseError(SourceRejectedError):
    """Exception raised when a source has no discernible header block."""


class ExtractionError(EmlExtractError):
    """Exception raised when a required field cannot be extracted.

    Aborts extraction of the current message only.
    """

    def __init__(self, source: str, field: str, reason: str) -> None:
        self.source = source
        self.field = field
        self.reason = reason
        super().__init__(f"Failed in extracting {field} from '{source}': {reason}")


class AddressParseError(ValueError):
    """Exception raised when an address list fails strict parsing."""


class SystemFailureError(EmlExtractError):
    """Exception raised for I/O failures unrelated to message content.

    This is the only error class that terminates a batch run.
    """


class ConfigurationError(EmlExtractError):
    """Exception raised for configuration related errors."""

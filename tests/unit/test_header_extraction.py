"""Unit tests for EmailRecord extraction from parsed messages."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from eml_extract.exceptions import ExtractionError, SourceRejectedError
from eml_extract.extraction import (
    decode_header_text,
    derive_record_name,
    extract_record,
    load_message,
    load_record,
    parse_address_list,
)
from eml_extract.parsing import parse_message

DATE = "Date: Tue, 1 Jan 2019 10:00:00 +1000\r\n"


def _extract(headers: str, source: str = "/mail/test.eml"):
    return extract_record(parse_message(headers + "\r\nbody\r\n"), source)


class TestDecodeHeaderText:
    """Test suite for encoded-word decoding."""

    def test_plain_text_unchanged(self) -> None:
        assert decode_header_text("Quarterly report") == "Quarterly report"

    def test_quoted_printable_word(self) -> None:
        assert decode_header_text("=?utf-8?q?Caf=C3=A9?=") == "Café"

    def test_base64_word(self) -> None:
        assert decode_header_text("=?utf-8?b?Q2Fmw6k=?=") == "Café"

    def test_unknown_charset_kept_literal(self) -> None:
        """Test that an unsupported charset leaves the encoded text as-is."""
        value = "=?x-no-such-charset?q?abc?="

        assert decode_header_text(value) == value

    def test_none(self) -> None:
        assert decode_header_text(None) is None


class TestDeriveRecordName:
    """Test suite for record name derivation."""

    def test_strips_extension_and_whitespace(self) -> None:
        assert derive_record_name(Path("/archive/2019/Message One .EML")) == "Message One"

    def test_plain_name(self) -> None:
        assert derive_record_name("inbox/msg-1.eml") == "msg-1"

    def test_rejects_other_extensions(self) -> None:
        with pytest.raises(SourceRejectedError):
            derive_record_name("notes.txt")


class TestExtractRecord:
    """Test suite for extract_record."""

    def test_basic_fields(self, simple_eml: bytes) -> None:
        record = extract_record(parse_message(simple_eml), "/mail/simple.eml")

        assert record.record_name == "simple"
        assert record.source_path == "/mail/simple.eml"
        assert record.is_placeholder is False
        assert record.subject == "Quarterly report"
        assert record.from_addrs == ["alice@example.com"]
        assert record.to_addrs == ["bob@example.com", "carol@example.com"]
        assert record.cc_addrs == ["dave@example.com"]
        assert record.bcc_addrs is None
        assert record.sent_date == datetime(2019, 1, 1, 10, tzinfo=timezone(timedelta(hours=10)))
        assert record.message_id == "<msg-1@example.com>"
        assert record.references == ["<root@example.com>", "<msg-0@example.com>"]
        assert record.in_reply_to == "<msg-0@example.com>"
        assert record.thread_index == "AdSh1234=="
        assert record.header_count == 11
        assert record.line_count == 3

    def test_missing_date_fails(self) -> None:
        with pytest.raises(ExtractionError) as exc_info:
            _extract("From: a@example.com\r\nSubject: no date\r\n")

        assert exc_info.value.field == "Date"
        assert exc_info.value.source == "/mail/test.eml"

    def test_unparseable_date_names_raw_value(self) -> None:
        with pytest.raises(ExtractionError) as exc_info:
            _extract("Date: sometime last week\r\n")

        assert exc_info.value.field == "Date"
        assert "sometime last week" in str(exc_info.value)
        assert "/mail/test.eml" in str(exc_info.value)

    def test_date_zone_comment_stripped(self) -> None:
        with_comment = _extract("Date: Tue, 1 Jan 2019 10:00:00 +1000 (AEST)\r\n")
        without = _extract(DATE)

        assert with_comment.sent_date == without.sent_date

    def test_empty_source_fails(self) -> None:
        with pytest.raises(ExtractionError):
            extract_record(parse_message(DATE), "  ")

    def test_encoded_subject(self) -> None:
        record = _extract(DATE + "Subject: =?utf-8?q?Caf=C3=A9?=\r\n")

        assert record.subject == "Café"

    def test_absent_optional_fields(self) -> None:
        record = _extract(DATE)

        assert record.subject is None
        assert record.from_addrs is None
        assert record.message_id is None
        assert record.references == []
        assert record.in_reply_to is None
        assert record.thread_index is None

    def test_legacy_message_id_fallback(self) -> None:
        record = _extract(DATE + "$MessageID: <legacy@example.com>\r\n")

        assert record.message_id == "<legacy@example.com>"

    def test_standard_message_id_preferred(self) -> None:
        record = _extract(DATE + "$MessageID: <legacy@example.com>\r\nMessage-ID: <std@example.com>\r\n")

        assert record.message_id == "<std@example.com>"

    def test_underscore_in_reply_to(self) -> None:
        record = _extract(DATE + "In_Reply_To: <parent@example.com>\r\n")

        assert record.in_reply_to == "<parent@example.com>"

    def test_thread_index_underscore_spelling_wins(self) -> None:
        record = _extract(DATE + "Thread-Index: native\r\nThread_Index: normalized\r\n")

        assert record.thread_index == "normalized"

    def test_thread_index_empty_value_skipped(self) -> None:
        record = _extract(DATE + "Thread_Index: \r\nThread-Index: native\r\n")

        assert record.thread_index == "native"

    def test_references_split_on_whitespace(self) -> None:
        record = _extract(DATE + "References: <a@x>\r\n\t<b@x>  <c@x>\r\n")

        assert record.references == ["<a@x>", "<b@x>", "<c@x>"]

    def test_null_address_slot_preserved(self) -> None:
        """Test that an unresolvable address keeps its slot instead of shrinking the list."""
        record = _extract(DATE + 'To: "Nobody" <>, a@example.com, "Also nobody" <>\r\n')

        assert record.to_addrs == [None, "a@example.com", None]

    def test_repeated_address_headers_concatenated(self) -> None:
        record = _extract(DATE + "Cc: a@example.com\r\nCc: b@example.com\r\n")

        assert record.cc_addrs == ["a@example.com", "b@example.com"]

    def test_malformed_from_fails_without_recovery(self) -> None:
        with pytest.raises(ExtractionError) as exc_info:
            _extract(DATE + "From: fred@exam\r\n ple.com\r\n")

        assert exc_info.value.field == "From"

    def test_unrecoverable_recipients_fail(self) -> None:
        with pytest.raises(ExtractionError) as exc_info:
            _extract(DATE + "Bcc: <a@example.com\r\n")

        assert exc_info.value.field == "Bcc"
        assert "<a@example.com" in str(exc_info.value)

    def test_stray_quote_artifact_recovered(self) -> None:
        record = _extract(DATE + "To: Fred <'fred@example.com'>\r\n")

        assert record.to_addrs == ["fred@example.com"]


class TestFoldRecovery:
    """Test suite for recovery of folds injected into long address lines."""

    def test_mid_address_fold_recovered(self) -> None:
        """Test that a fold inserted mid-address parses like the unfolded original."""
        addresses = [f"recipient{n:03d}@example.com" for n in range(60)]
        original = ", ".join(addresses)
        assert len(original) > 998

        # Break the line inside one of the addresses, as the exporter does.
        cut = original.index("recipient045@exam") + len("recipient045@exam")
        folded = original[:cut] + "\r\n " + original[cut:]

        record = _extract(DATE + f"To: {folded}\r\n")

        assert record.to_addrs == parse_address_list(original)
        assert len(record.to_addrs) == 60

    def test_legitimate_fold_untouched(self) -> None:
        record = _extract(DATE + "Cc: a@example.com,\r\n b@example.com\r\n")

        assert record.cc_addrs == ["a@example.com", "b@example.com"]

    def test_tab_fold_inside_address(self) -> None:
        record = _extract(DATE + "To: Fred\r\n\t<fred@example.com>, jo@exam\r\n ple.com\r\n")

        assert record.to_addrs == ["fred@example.com", "jo@example.com"]


class TestLoadRecord:
    """Test suite for loading EML files from disk."""

    def test_load_record(self, write_eml, simple_eml: bytes) -> None:
        path = write_eml("Report .eml", simple_eml)

        record = load_record(path)

        assert record.record_name == "Report"
        assert record.source_path == str(path)
        assert record.subject == "Quarterly report"

    def test_wrong_extension_rejected_before_reading(self, tmp_path: Path) -> None:
        with pytest.raises(SourceRejectedError):
            load_message(tmp_path / "missing.msg")

    def test_missing_file_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(SourceRejectedError):
            load_message(tmp_path / "missing.eml")

    def test_custom_suffix(self, write_eml, simple_eml: bytes) -> None:
        path = write_eml("export.mime", simple_eml)

        record = load_record(path, suffix=".mime")

        assert record.record_name == "export"

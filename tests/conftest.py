"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture
def mock_settings(tmp_path: Path):
    """Provide settings writing into a temporary directory."""
    from eml_extract.config import Settings

    return Settings(
        output_dir=tmp_path / "out",
        log_level="DEBUG",
        debug=True,
    )


@pytest.fixture
def simple_eml() -> bytes:
    """A small single-part message with CRLF line endings."""
    return (
        "Received: from mx1.example.com by mx2.example.com\r\n"
        "Received: from client.example.com by mx1.example.com\r\n"
        "From: Alice Example <alice@example.com>\r\n"
        "To: bob@example.com, \"Carol C.\" <carol@example.com>\r\n"
        "Cc: dave@example.com\r\n"
        "Subject: Quarterly report\r\n"
        "Date: Tue, 1 Jan 2019 10:00:00 +1000\r\n"
        "Message-ID: <msg-1@example.com>\r\n"
        "References: <root@example.com> <msg-0@example.com>\r\n"
        "In-Reply-To: <msg-0@example.com>\r\n"
        "Thread-Index: AdSh1234==\r\n"
        "\r\n"
        "Hi Bob,\r\n"
        "\r\n"
        "The report is attached.\r\n"
    ).encode("utf-8")


@pytest.fixture
def multipart_eml() -> bytes:
    """A multipart message with a text part and a base64 PDF attachment."""
    return (
        "From: alice@example.com\n"
        "To: bob@example.com\n"
        "Subject: Report\n"
        "Date: Wed, 2 Jan 2019 09:30:00 +0000\n"
        "Message-ID: <msg-2@example.com>\n"
        "MIME-Version: 1.0\n"
        'Content-Type: multipart/mixed; boundary="XYZ"\n'
        "\n"
        "This is a multi-part message in MIME format.\n"
        "--XYZ\n"
        "Content-Type: text/plain; charset=utf-8\n"
        "\n"
        "Hello\n"
        "--XYZ\n"
        'Content-Type: application/pdf; name="report.pdf"\n'
        "Content-Transfer-Encoding: base64\n"
        "\n"
        "SGVsbG8gUERG\n"
        "--XYZ--\n"
        "epilogue\n"
    ).encode("utf-8")


@pytest.fixture
def write_eml(tmp_path: Path) -> Callable[[str, bytes], Path]:
    """Write message source into the temporary source directory."""
    source_dir = tmp_path / "src"
    source_dir.mkdir()

    def _write(name: str, content: bytes) -> Path:
        path = source_dir / name
        path.write_bytes(content)
        return path

    return _write

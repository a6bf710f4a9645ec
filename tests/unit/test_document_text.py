from __future__ import annotations

import pytest

from jobtracker.core.documents import extract_text, file_extension, guess_mime_type, preview_kind


@pytest.mark.parametrize(
    ("file_name", "kind"),
    [
        ("resume.pdf", "pdf"),
        ("photo.JPG", "image"),
        ("diagram.png", "image"),
        ("notes.md", "text"),
        ("page.html", "text"),
        ("data.json", "text"),
        ("letter.docx", "download"),
        ("README", "download"),
    ],
)
def test_preview_kind(file_name: str, kind: str) -> None:
    assert preview_kind(file_name) == kind


def test_file_extension_is_lowercased() -> None:
    assert file_extension("Resume.PDF") == "pdf"
    assert file_extension("noext") == ""


def test_guess_mime_type_prefers_declared_value() -> None:
    assert guess_mime_type("resume.txt", "text/plain") == "text/plain"
    assert guess_mime_type("resume.pdf", "application/octet-stream") == "application/pdf"
    assert guess_mime_type("unknown.zzz") == "application/octet-stream"


def test_extract_text_decodes_plain_text() -> None:
    assert extract_text("resume.txt", "text/plain", "Python developer".encode()) == "Python developer"
    assert extract_text("resume.md", "", b"# Jane") == "# Jane"


def test_extract_text_returns_none_for_unsupported_types() -> None:
    assert extract_text("resume.docx", "application/octet-stream", b"PK\x03\x04") is None

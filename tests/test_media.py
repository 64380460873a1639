"""Tests for data URI handling and résumé text extraction."""

from __future__ import annotations

import base64
import unittest
from pathlib import Path

import docx  # type: ignore
import pytest  # type: ignore

from talentai.media import (
    DOCX_MIME,
    PDF_MIME,
    TEXT_MIME,
    InvalidDataURIError,
    UnsupportedFileError,
    encode_data_uri,
    extract_text,
    file_to_data_uri,
    parse_data_uri,
    shorten_uri,
)


class TestParseDataURI(unittest.TestCase):
    """Strict parsing of ``data:<mimetype>;base64,<data>`` strings."""

    def test_round_trip(self) -> None:
        uri = encode_data_uri(b"hello", "text/plain")
        self.assertEqual(uri, "data:text/plain;base64,aGVsbG8=")
        media = parse_data_uri(uri)
        self.assertEqual(media.mime_type, "text/plain")
        self.assertEqual(media.data, b"hello")
        self.assertEqual(media.raw, uri)
        self.assertEqual(media.size, 5)

    def test_parameters_are_allowed(self) -> None:
        media = parse_data_uri("data:text/plain;charset=utf-8;base64,aGk=")
        self.assertEqual(media.data, b"hi")

    def test_rejects_malformed(self) -> None:
        for bad in (
            "hello",
            "data:;base64,aGk=",
            "data:text/plain,aGk=",
            "data:text/plain;base64,***",
            "data:text/plain;base64,aGk",
        ):
            with self.subTest(uri=bad):
                with self.assertRaises(InvalidDataURIError):
                    parse_data_uri(bad)

    def test_rejects_non_string(self) -> None:
        with self.assertRaises(InvalidDataURIError):
            parse_data_uri(None)  # type: ignore[arg-type]


def test_file_to_data_uri_text(tmp_path: Path) -> None:
    path = tmp_path / "resume.txt"
    path.write_text("Jane Doe\nPython", encoding="utf-8")
    uri = file_to_data_uri(str(path))
    assert uri.startswith(f"data:{TEXT_MIME};base64,")
    assert base64.b64decode(uri.split(",", 1)[1]) == b"Jane Doe\nPython"


def test_file_to_data_uri_rejects_type_and_size(tmp_path: Path) -> None:
    legacy = tmp_path / "resume.doc"
    legacy.write_bytes(b"\xd0\xcf")
    with pytest.raises(UnsupportedFileError):
        file_to_data_uri(str(legacy))
    big = tmp_path / "big.txt"
    big.write_bytes(b"x" * 2048)
    with pytest.raises(UnsupportedFileError):
        file_to_data_uri(str(big), max_size=1024)


def test_extract_text_from_docx(tmp_path: Path) -> None:
    document = docx.Document()
    document.add_paragraph("Jane Doe")
    document.add_paragraph("Senior Python Engineer")
    path = tmp_path / "resume.docx"
    document.save(str(path))
    uri = file_to_data_uri(str(path))
    assert uri.startswith(f"data:{DOCX_MIME};base64,")
    assert extract_text(uri) == "Jane Doe\nSenior Python Engineer"


def test_extract_text_plain_and_unsupported() -> None:
    assert extract_text(encode_data_uri("  café \n".encode("utf-8"), "text/plain")) == "café"
    with pytest.raises(UnsupportedFileError):
        extract_text(encode_data_uri(b"\x89PNG", "image/png"))


def test_shorten_uri() -> None:
    assert shorten_uri("short") == "short"
    assert shorten_uri("x" * 100, 10) == "x" * 10 + "..."


def _minimal_pdf(lines: list) -> bytes:
    """Build a one-page PDF that draws ``lines`` in Helvetica."""
    text_ops = ["BT", "/F1 12 Tf", "72 720 Td", "14 TL"]
    for line in lines:
        text_ops.append(f"({line}) Tj T*")
    text_ops.append("ET")
    stream = "\n".join(text_ops).encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length " + str(len(stream)).encode() + b" >>\nstream\n" + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"
    xref_at = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_at}\n%%EOF\n".encode()
    return bytes(out)


def test_extract_text_from_pdf(tmp_path: Path) -> None:
    path = tmp_path / "resume.pdf"
    path.write_bytes(_minimal_pdf(["Jane Doe", "Senior Python Engineer"]))
    uri = file_to_data_uri(str(path))
    assert uri.startswith(f"data:{PDF_MIME};base64,")
    text = extract_text(uri)
    assert "Jane Doe" in text
    assert "Senior Python Engineer" in text

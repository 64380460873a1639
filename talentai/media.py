"""
Résumé media handling.

Résumés are passed around as data URIs of the form
``data:<mimetype>;base64,<encoded_data>``.  This module converts files
to that form, parses data URIs back into bytes and extracts plain text
from the supported document types (PDF via ``pdfplumber``, DOCX via
``python-docx`` and plain text) for providers that cannot read the
documents directly.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import os
import re
from dataclasses import dataclass
from typing import Dict, Optional

import docx  # type: ignore
import pdfplumber  # type: ignore

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_MIME = "text/plain"

ALLOWED_RESUME_TYPES = (PDF_MIME, DOCX_MIME, TEXT_MIME)

_EXTENSION_TYPES: Dict[str, str] = {
    ".pdf": PDF_MIME,
    ".docx": DOCX_MIME,
    ".txt": TEXT_MIME,
}

_DATA_URI_RE = re.compile(
    r"^data:(?P<mime>[A-Za-z0-9!#$&^_.+-]+/[A-Za-z0-9!#$&^_.+-]+)"
    r"(?P<params>(?:;[A-Za-z0-9_.+-]+=[A-Za-z0-9_.+-]+)*)"
    r";base64,(?P<payload>[A-Za-z0-9+/=\s]*)$"
)


class InvalidDataURIError(ValueError):
    """Raised when a string is not a well-formed base64 data URI."""


class UnsupportedFileError(ValueError):
    """Raised when a résumé file has a disallowed type or size."""


@dataclass(frozen=True)
class DataURI:
    """A decoded data URI."""

    mime_type: str
    data: bytes
    raw: str

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    @property
    def size(self) -> int:
        return len(self.data)


def parse_data_uri(uri: str) -> DataURI:
    """Parse and decode a base64 data URI.

    Args:
        uri: String of the form ``data:<mimetype>;base64,<encoded_data>``.

    Returns:
        The decoded :class:`DataURI`.

    Raises:
        InvalidDataURIError: If the MIME type or ``;base64`` marker is
            missing, or the payload is not valid base64.
    """
    if not isinstance(uri, str):
        raise InvalidDataURIError("Data URI must be a string")
    match = _DATA_URI_RE.match(uri.strip())
    if not match:
        raise InvalidDataURIError(
            f"Expected 'data:<mimetype>;base64,<encoded_data>', got {shorten_uri(uri, 40)!r}"
        )
    payload = re.sub(r"\s+", "", match.group("payload"))
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidDataURIError(f"Invalid base64 payload: {exc}") from exc
    return DataURI(mime_type=match.group("mime").lower(), data=data, raw=uri)


def encode_data_uri(data: bytes, mime_type: str) -> str:
    """Encode raw bytes as a base64 data URI."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def guess_resume_type(path: str) -> Optional[str]:
    """Return the résumé MIME type for a file path, or ``None`` if unsupported."""
    ext = os.path.splitext(path)[1].lower()
    return _EXTENSION_TYPES.get(ext)


def file_to_data_uri(path: str, max_size: Optional[int] = None) -> str:
    """Read a résumé file and return it as a data URI.

    Args:
        path: Path to a ``.pdf``, ``.docx`` or ``.txt`` file.
        max_size: Optional maximum file size in bytes.

    Raises:
        FileNotFoundError: If the file does not exist.
        UnsupportedFileError: If the file type is not allowed or the
            file exceeds ``max_size``.
    """
    mime_type = guess_resume_type(path)
    if mime_type is None:
        raise UnsupportedFileError(
            f"{os.path.basename(path)}: only PDF, DOCX, and TXT files are allowed."
        )
    size = os.path.getsize(path)
    if max_size is not None and size > max_size:
        raise UnsupportedFileError(
            f"{os.path.basename(path)}: each file must be less than {max_size // (1024 * 1024)}MB."
        )
    with open(path, "rb") as f:
        data = f.read()
    logger.debug("Encoded %s (%d bytes, %s)", path, size, mime_type)
    return encode_data_uri(data, mime_type)


def extract_text(uri: DataURI | str) -> str:
    """Extract plain text from a résumé data URI.

    PDF pages are joined with newlines and DOCX paragraphs likewise.
    Text payloads are decoded as UTF-8 with replacement characters.

    Raises:
        InvalidDataURIError: If ``uri`` is a malformed string.
        UnsupportedFileError: If the MIME type has no text extractor.
    """
    media = parse_data_uri(uri) if isinstance(uri, str) else uri
    if media.mime_type == PDF_MIME:
        pages = []
        with pdfplumber.open(io.BytesIO(media.data)) as pdf:
            for page in pdf.pages:
                pages.append(page.extract_text() or "")
        return "\n".join(pages).strip()
    if media.mime_type == DOCX_MIME:
        document = docx.Document(io.BytesIO(media.data))
        return "\n".join(p.text for p in document.paragraphs).strip()
    if media.mime_type.startswith("text/"):
        return media.data.decode("utf-8", errors="replace").strip()
    raise UnsupportedFileError(f"Cannot extract text from {media.mime_type}")


def shorten_uri(uri: str, length: int = 70) -> str:
    """Truncate a data URI for log output."""
    if len(uri) <= length:
        return uri
    return uri[:length] + "..."

"""Content type detection for served blobs and uploaded avatars."""

from __future__ import annotations

import re
from dataclasses import dataclass

SNIFF_LEN = 1024

TEXT_PLAIN = "text/plain; charset=utf-8"
SVG_MIME_TYPE = "image/svg+xml"
APPLICATION_OCTET_STREAM = "application/octet-stream"

_SVG_COMMENT = re.compile(rb"(?s)<!--.*?-->")
_SVG_TAG = re.compile(rb"(?si)\A\s*(?:(<!DOCTYPE\s+svg([\s:]+.*?>|>))\s*)*<svg[\s>/]")
_SVG_TAG_IN_XML = re.compile(rb"(?si)\A\s*<\?xml.*?>\s*(?:(<!DOCTYPE\s+svg([\s:]+.*?>|>))\s*)*<svg[\s>/]")

# (prefix, mime type); checked in order.
_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"%PDF-", "application/pdf"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
)

# Bytes that never appear in text files (WHATWG "binary data bytes").
_BINARY_BYTES = frozenset(
    {0x00, 0x01, 0x02, 0x03, 0x04, 0x05, 0x06, 0x07, 0x08, 0x0B, 0x0E, 0x0F}
    | set(range(0x10, 0x1B))
    | {0x1C, 0x1D, 0x1E, 0x1F}
)


@dataclass(frozen=True)
class SniffedType:
    content_type: str

    @property
    def is_text(self) -> bool:
        return self.content_type.startswith("text/")

    @property
    def is_image(self) -> bool:
        return self.content_type.startswith("image/")

    @property
    def is_svg_image(self) -> bool:
        return self.content_type.startswith(SVG_MIME_TYPE)

    @property
    def is_pdf(self) -> bool:
        return self.content_type.startswith("application/pdf")


def _is_binary(data: bytes) -> bool:
    return any(byte in _BINARY_BYTES for byte in data)


def _looks_like_text(data: bytes) -> bool:
    if _is_binary(data):
        return False
    try:
        data.decode("utf-8")
    except UnicodeDecodeError as exc:
        # A multi-byte sequence cut at the sniff boundary is still text.
        return exc.start >= len(data) - 3 and exc.reason == "unexpected end of data"
    return True


def _detect_by_signature(data: bytes) -> str | None:
    for prefix, mime in _SIGNATURES:
        if data.startswith(prefix):
            return mime
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return None


def detect_content_type(data: bytes) -> SniffedType:
    """Detect the content type of ``data`` from its leading bytes."""
    head = data[:SNIFF_LEN]

    detected = _detect_by_signature(head)
    if detected is not None:
        return SniffedType(detected)

    if head and _looks_like_text(head):
        stripped = _SVG_COMMENT.sub(b"", head)
        if _SVG_TAG.search(stripped) or _SVG_TAG_IN_XML.search(stripped):
            return SniffedType(SVG_MIME_TYPE)
        return SniffedType(TEXT_PLAIN)

    if not head:
        return SniffedType(TEXT_PLAIN)

    return SniffedType(APPLICATION_OCTET_STREAM)

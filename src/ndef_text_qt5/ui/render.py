# src/ndef_text_qt5/ui/render.py
# Plain-text rendering of session results for the result view (no Qt imports).
from __future__ import annotations
from typing import List

from ..nfc.errors import ErrorKind
from ..nfc.records import describe_record
from ..nfc.session import TagResult
from ..utils.hexdump import format_pages

# One-line explanation per failure kind shown to the user
KIND_HINTS = {
    ErrorKind.UNSUPPORTED_TAG: "Not a supported tag (page-addressed Type 2 tags only).",
    ErrorKind.CONNECTION_FAILED: "Failed to connect to tag. Keep it on the reader and retry.",
    ErrorKind.MALFORMED_TLV: "Tag content is malformed or was cut off.",
    ErrorKind.NO_NDEF_MESSAGE: "Tag holds no NDEF message.",
    ErrorKind.NO_NDEF_CONTENT: "NDEF message holds no text record.",
    ErrorKind.WRITE_PROTECTED: "Tag is write-protected.",
    ErrorKind.WRITE_FAILED: "Write failed; the tag may now hold a mix of old and new data.",
    ErrorKind.MESSAGE_TOO_LONG: "Text is too long for this tag.",
}


def render_read(result: TagResult) -> str:
    lines: List[str] = []
    if result.ok:
        lines.append(f"Content: {result.text}")
        lines.append(f"Language: {result.language}")
    else:
        lines.append(f"[{result.kind.name}] {KIND_HINTS.get(result.kind, result.message)}")
        if result.message:
            lines.append(f"  {result.message}")
    if result.truncated:
        lines.append(f"(read stopped early, {len(result.image)} bytes parsed)")

    for i, rec in enumerate(result.records):
        lines.append(f"Record {i}: {describe_record(rec)}")

    # raw pages when there is nothing better to show
    if not result.ok and result.image:
        lines.append("")
        lines.append("Raw data:")
        lines.append(format_pages(result.image))
    return "\n".join(lines)


def render_write(result: TagResult) -> str:
    if result.ok:
        return f"Wrote {result.pages_written} pages: '{result.text}'"
    hint = KIND_HINTS.get(result.kind, result.message)
    if result.kind is ErrorKind.WRITE_FAILED and result.page is not None:
        return f"[{result.kind.name}] page {result.page}: {hint}"
    return f"[{result.kind.name}] {hint} {result.message}".rstrip()

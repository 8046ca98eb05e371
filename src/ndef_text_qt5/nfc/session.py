# src/ndef_text_qt5/nfc/session.py
# Read/write sessions against a PageTag: page loop, message encoder, tagged results.
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..config.settings import Settings
from .device import PageTag
from .errors import ErrorKind, TagError, TagIOError
from .events import EventSink, emitter
from .records import SHORT_RECORD_MAX, NdefRecord, decode_records, encode_record, extract_text
from .text_record import LANGUAGE, TEXT_TYPE, encode_text_payload
from .tlv import (
    CAPABILITY_CONTAINER,
    CONTENT_OFFSET,
    CONTENT_PAGE,
    PAGE_SIZE,
    data_area_size,
    encode_ndef_tlv,
    find_ndef_message,
    is_write_protected,
    pad_to_page,
)

log = logging.getLogger(__name__)


@dataclass
class TagResult:
    """Outcome of one read or write session; callers match on `kind`."""
    ok: bool
    kind: Optional[ErrorKind] = None
    text: Optional[str] = None
    language: Optional[str] = None
    records: List[NdefRecord] = field(default_factory=list)
    image: bytes = b""
    truncated: bool = False
    pages_written: int = 0
    page: Optional[int] = None
    message: str = ""


@dataclass
class ParsedTag:
    records: List[NdefRecord]
    text: Optional[str]
    language: Optional[str]


# --- read path ---

def read_memory(tag: PageTag, max_pages: int, block_pages: int = 4,
                sink: Optional[EventSink] = None) -> Tuple[bytes, bool]:
    """Read pages from page 0 until max_pages or the first failing call.

    Returns (bytes, truncated). Bytes read before a failure are kept.
    The next read starts after the whole pages the reader actually
    returned, so a block_pages value below the reader's block size
    never stitches pages in twice.
    """
    emit = emitter(sink, "read")
    limit = max_pages * PAGE_SIZE
    out = bytearray()
    page = 0
    while page < max_pages:
        try:
            chunk = tag.read_pages(page)
        except TagIOError as e:
            emit(f"read failed at page {page}, keeping {len(out)} bytes ({e})", page)
            log.info("Truncated read at page %d: %s", page, e)
            return bytes(out), True
        got = len(chunk) // PAGE_SIZE
        if got < block_pages:
            out.extend(chunk)
            emit(f"short block at page {page}: {len(chunk)} bytes", page)
            return bytes(out[:limit]), True
        out.extend(chunk[:got * PAGE_SIZE])
        page += got
    emit(f"read {min(len(out), limit)} bytes ({max_pages} pages)")
    return bytes(out[:limit]), False


def parse_memory(image: bytes, sink: Optional[EventSink] = None) -> ParsedTag:
    """Run the decode pipeline on a memory image that starts at page 0."""
    message = find_ndef_message(image[CONTENT_OFFSET:], sink)
    records = decode_records(message, sink)
    tp = extract_text(records, sink)
    if tp is None:
        return ParsedTag(records=records, text=None, language=None)
    return ParsedTag(records=records, text=tp.text, language=tp.language)


def decode_text(image: bytes, sink: Optional[EventSink] = None) -> str:
    """Text of a memory image, or TagError (NO_NDEF_CONTENT if no text record)."""
    parsed = parse_memory(image, sink)
    if parsed.text is None:
        raise TagError(ErrorKind.NO_NDEF_CONTENT, "no text record in NDEF message")
    return parsed.text


# --- write path ---

def encode_text_message(text: str) -> bytes:
    """One Well Known 'T' short record, MB and ME set (header D1)."""
    return encode_record(TEXT_TYPE, encode_text_payload(text))


def encode_text_image(text: str) -> bytes:
    """Full page image: capability block, NDEF TLV, terminator, zero padding."""
    return pad_to_page(CAPABILITY_CONTAINER + encode_ndef_tlv(encode_text_message(text)))


# UTF-8 text bytes that still fit one short record next to status byte and language
MAX_TEXT_BYTES = SHORT_RECORD_MAX - 1 - len(LANGUAGE)


def text_fits(text: str) -> bool:
    return len((text or "").encode("utf-8")) <= MAX_TEXT_BYTES


def write_image(tag: PageTag, image: bytes, sink: Optional[EventSink] = None) -> int:
    """Write image[16:] page by page from page 4. Returns pages written.

    Pages 0..3 (UID, lock bytes, CC) are never written. The first failing
    page aborts with WRITE_FAILED; earlier pages stay written.
    """
    emit = emitter(sink, "write")
    content = pad_to_page(image[CONTENT_OFFSET:])
    written = 0
    for i in range(0, len(content), PAGE_SIZE):
        page = CONTENT_PAGE + i // PAGE_SIZE
        try:
            tag.write_page(page, content[i:i + PAGE_SIZE])
        except TagIOError as e:
            emit(f"write failed at page {page} after {written} pages ({e})", page)
            raise TagError(ErrorKind.WRITE_FAILED, f"write failed at page {page}", page=page) from e
        written += 1
    emit(f"wrote {written} pages from page {CONTENT_PAGE}", CONTENT_PAGE)
    return written


# --- sessions ---

def _failed(err: TagError, **kw) -> TagResult:
    return TagResult(ok=False, kind=err.kind, page=err.page, message=err.message, **kw)


def read_tag(tag: PageTag, settings: Optional[Settings] = None,
             sink: Optional[EventSink] = None) -> TagResult:
    """Connect, read the memory image best-effort, decode the text, close."""
    s = settings or Settings()
    emit = emitter(sink, "session")
    try:
        tag.connect()
    except TagError as e:
        emit(f"connect failed: {e.message}")
        return _failed(e)

    try:
        image, truncated = read_memory(tag, s.max_pages, s.block_pages, sink)
        if truncated:
            emit(f"{ErrorKind.TRUNCATED_READ.value}: parsing {len(image)} bytes best-effort")
        return decode_image(image, truncated, sink)
    finally:
        tag.close()


def decode_image(image: bytes, truncated: bool = False,
                 sink: Optional[EventSink] = None) -> TagResult:
    """parse_memory() as a TagResult; used for live reads and pasted dumps."""
    try:
        parsed = parse_memory(image, sink)
    except TagError as e:
        emitter(sink, "session")(f"decode failed: {e.message}")
        return _failed(e, image=image, truncated=truncated)

    if parsed.text is None:
        return TagResult(ok=False, kind=ErrorKind.NO_NDEF_CONTENT, records=parsed.records,
                         image=image, truncated=truncated,
                         message="NDEF message contains no text record")
    log.debug("Decoded %d chars (lang=%s)", len(parsed.text), parsed.language)
    return TagResult(ok=True, text=parsed.text, language=parsed.language,
                     records=parsed.records, image=image, truncated=truncated)


def write_tag(tag: PageTag, text: str, settings: Optional[Settings] = None,
              sink: Optional[EventSink] = None) -> TagResult:
    """Encode text, check the capability block, write the pages, close.

    settings is accepted for symmetry with read_tag; the write layout is fixed.
    """
    emit = emitter(sink, "session")
    try:
        image = encode_text_image(text)
    except TagError as e:
        emit(f"encode failed: {e.message}")
        return _failed(e)

    try:
        tag.connect()
    except TagError as e:
        emit(f"connect failed: {e.message}")
        return _failed(e, image=image)

    try:
        try:
            header = tag.read_pages(0)
        except TagIOError as e:
            emit(f"capability container unreadable ({e})", 0)
            return TagResult(ok=False, kind=ErrorKind.CONNECTION_FAILED, image=image,
                             message=f"cannot read capability container: {e}")
        if len(header) < CONTENT_OFFSET:
            emit(f"capability block short: {len(header)} bytes", 0)
            return TagResult(ok=False, kind=ErrorKind.CONNECTION_FAILED, image=image,
                             message=f"capability container incomplete ({len(header)} bytes)")

        if is_write_protected(header):
            emit(f"access byte 0x{header[15]:02X} denies writing", 3)
            return TagResult(ok=False, kind=ErrorKind.WRITE_PROTECTED, image=image,
                             message="tag is write-protected")

        area = data_area_size(header)
        needed = len(image) - CONTENT_OFFSET
        if area is not None and needed > area:
            return TagResult(ok=False, kind=ErrorKind.MESSAGE_TOO_LONG, image=image,
                             message=f"message needs {needed} bytes, tag offers {area}")

        try:
            pages = write_image(tag, image, sink)
        except TagError as e:
            return _failed(e, image=image, pages_written=e.page - CONTENT_PAGE)
        log.info("Wrote %d pages (%d text chars)", pages, len(text or ""))
        return TagResult(ok=True, text=text, image=image, pages_written=pages)
    finally:
        tag.close()

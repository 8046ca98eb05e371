# src/ndef_text_qt5/nfc/tlv.py
# Type 2 Tag memory layout: capability block (pages 0..3) and the TLV area from page 4.
# Beyond the plain `tag u8-length value` walk, 0x00 is a one-byte NULL TLV and a
# length byte of 0xFF introduces the three-byte `FF hi lo` form (NFC Forum Type 2).
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, Optional

from .errors import ErrorKind, TagError
from .events import EventSink, emitter

PAGE_SIZE = 4
CONTENT_OFFSET = 16     # byte offset of page 4
CONTENT_PAGE = CONTENT_OFFSET // PAGE_SIZE

TLV_NULL = 0x00
TLV_NDEF = 0x03
TLV_TERMINATOR = 0xFE
TLV_LONG_LENGTH = 0xFF

CC_MAGIC = 0xE1

# Pages 0..3 as written by the encoder: UID/lock bytes followed by the CC
# proper (E1 = NDEF magic, 11 = version 1.1, 12 = 144 byte data area, 00 = read/write).
CAPABILITY_CONTAINER = bytes([
    0x04, 0x35, 0x79, 0xC0,
    0x52, 0x4A, 0x74, 0x80,
    0xEC, 0x48, 0x00, 0x00,
    0xE1, 0x11, 0x12, 0x00,
])


@dataclass(frozen=True)
class TlvBlock:
    tag: int
    length: int
    value: bytes
    offset: int     # offset of the tag byte


def _read_length(data: bytes, i: int):
    """Return (length, header_size) for the TLV whose tag byte is at i."""
    n = len(data)
    if i + 1 >= n:
        raise TagError(ErrorKind.MALFORMED_TLV, f"TLV at offset {i} has no length byte")
    l = data[i + 1]
    if l != TLV_LONG_LENGTH:
        return l, 2
    # three-byte form: FF hi lo
    if i + 3 >= n:
        raise TagError(ErrorKind.MALFORMED_TLV, f"TLV at offset {i} has a cut long length")
    return (data[i + 2] << 8) | data[i + 3], 4


def iter_tlv(data: bytes) -> Iterator[TlvBlock]:
    """Yield TLV blocks left to right; the terminator is yielded last (empty value).

    NULL TLVs are single padding bytes and are not yielded. Raises
    MALFORMED_TLV when a length field points past the end of the buffer.
    """
    i = 0
    n = len(data)
    while i < n:
        t = data[i]
        if t == TLV_NULL:
            i += 1
            continue
        if t == TLV_TERMINATOR:
            yield TlvBlock(tag=t, length=0, value=b"", offset=i)
            return
        length, hsize = _read_length(data, i)
        if i + hsize + length > n:
            raise TagError(
                ErrorKind.MALFORMED_TLV,
                f"TLV 0x{t:02X} at offset {i} declares {length} bytes, {n - i - hsize} left",
            )
        yield TlvBlock(tag=t, length=length, value=bytes(data[i + hsize:i + hsize + length]), offset=i)
        i += hsize + length


def find_ndef_message(data: bytes, sink: Optional[EventSink] = None) -> bytes:
    """Return the value of the first NDEF Message TLV in the content area."""
    emit = emitter(sink, "tlv")
    for block in iter_tlv(data):
        if block.tag == TLV_NDEF:
            emit(f"NDEF message TLV, {block.length} bytes", block.offset)
            return block.value
        if block.tag == TLV_TERMINATOR:
            emit("terminator TLV before any NDEF message", block.offset)
            raise TagError(ErrorKind.NO_NDEF_MESSAGE, f"terminator at offset {block.offset}, no NDEF message")
        emit(f"skipping TLV 0x{block.tag:02X} ({block.length} bytes)", block.offset)
    raise TagError(ErrorKind.MALFORMED_TLV, "TLV area exhausted without NDEF message or terminator")


def encode_ndef_tlv(message: bytes) -> bytes:
    """Wrap an NDEF message as `03 len message FE` (long length form from 255 bytes)."""
    n = len(message)
    if n < TLV_LONG_LENGTH:
        head = bytes([TLV_NDEF, n])
    elif n <= 0xFFFE:
        head = bytes([TLV_NDEF, TLV_LONG_LENGTH, n >> 8, n & 0xFF])
    else:
        raise TagError(ErrorKind.MESSAGE_TOO_LONG, f"NDEF message of {n} bytes")
    return head + bytes(message) + bytes([TLV_TERMINATOR])


def pad_to_page(data: bytes) -> bytes:
    rem = len(data) % PAGE_SIZE
    return bytes(data) + b"\x00" * ((PAGE_SIZE - rem) % PAGE_SIZE)


# --- capability container ---

def cc_bytes(block: bytes) -> bytes:
    """The 4 CC bytes (page 3) out of a memory image starting at page 0."""
    return bytes(block[12:16])


def is_write_protected(block: bytes) -> bool:
    """True if the CC access byte denies write access (low nibble != 0)."""
    cc = cc_bytes(block)
    if len(cc) < 4:
        return False
    return (cc[3] & 0x0F) != 0


def data_area_size(block: bytes) -> Optional[int]:
    """Declared data area in bytes, or None if page 3 is not an NDEF CC."""
    cc = cc_bytes(block)
    if len(cc) < 4 or cc[0] != CC_MAGIC:
        return None
    return cc[2] * 8

# src/ndef_text_qt5/nfc/records.py
# NDEF record layer: header flags, record decode/encode, human-readable descriptions.
from __future__ import annotations
import struct
from dataclasses import dataclass
from typing import List, Optional

from .errors import ErrorKind, TagError
from .events import EventSink, emitter
from .text_record import TEXT_TYPE, TextPayload, decode_text_payload

TNF_EMPTY = 0x00
TNF_WELL_KNOWN = 0x01
TNF_MEDIA = 0x02
TNF_ABSOLUTE_URI = 0x03
TNF_EXTERNAL = 0x04
TNF_UNKNOWN = 0x05
TNF_UNCHANGED = 0x06

TNF_NAMES = {
    TNF_EMPTY: "Empty",
    TNF_WELL_KNOWN: "WellKnown",
    TNF_MEDIA: "Media",
    TNF_ABSOLUTE_URI: "AbsoluteURI",
    TNF_EXTERNAL: "External",
    TNF_UNKNOWN: "Unknown",
    TNF_UNCHANGED: "Unchanged",
}

URI_TYPE = b"U"

# URI record identifier codes (NFC Forum URI RTD), index = prefix byte
URI_PREFIXES = (
    "", "http://www.", "https://www.", "http://", "https://",
    "tel:", "mailto:", "ftp://anonymous:anonymous@", "ftp://ftp.",
    "ftps://", "sftp://", "smb://", "nfs://", "ftp://", "dav://",
    "news:", "telnet://", "imap:", "rtsp://", "urn:", "pop:",
    "sip:", "sips:", "tftp:", "btspp://", "btl2cap://", "btgoep://",
    "tcpobex://", "irdaobex://", "file://", "urn:epc:id:", "urn:epc:tag:",
    "urn:epc:pat:", "urn:epc:raw:", "urn:epc:", "urn:nfc:",
)

SHORT_RECORD_MAX = 0xFF


@dataclass(frozen=True)
class RecordHeader:
    mb: bool = False    # message begin
    me: bool = False    # message end
    cf: bool = False    # chunk flag
    sr: bool = False    # short record
    il: bool = False    # id length present
    tnf: int = TNF_EMPTY

    @classmethod
    def from_byte(cls, b: int) -> "RecordHeader":
        return cls(
            mb=(b & 0x80) != 0,
            me=(b & 0x40) != 0,
            cf=(b & 0x20) != 0,
            sr=(b & 0x10) != 0,
            il=(b & 0x08) != 0,
            tnf=b & 0x07,
        )

    def to_byte(self) -> int:
        return ((0x80 if self.mb else 0)
                | (0x40 if self.me else 0)
                | (0x20 if self.cf else 0)
                | (0x10 if self.sr else 0)
                | (0x08 if self.il else 0)
                | (self.tnf & 0x07))


@dataclass(frozen=True)
class NdefRecord:
    header: RecordHeader
    type: bytes
    id: bytes
    payload: bytes
    offset: int = 0     # offset of the header byte inside the NDEF message

    @property
    def tnf(self) -> int:
        return self.header.tnf

    def is_text(self) -> bool:
        return self.header.tnf == TNF_WELL_KNOWN and self.type == TEXT_TYPE


class _Cursor:
    """Bounds-checked reader over the NDEF message bytes."""
    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def remaining(self) -> int:
        return len(self.data) - self.pos

    def take(self, n: int, what: str) -> bytes:
        if n > self.remaining():
            raise TagError(
                ErrorKind.MALFORMED_TLV,
                f"{what} needs {n} bytes at offset {self.pos}, {self.remaining()} left",
            )
        out = self.data[self.pos:self.pos + n]
        self.pos += n
        return out

    def byte(self, what: str) -> int:
        return self.take(1, what)[0]


def decode_records(message: bytes, sink: Optional[EventSink] = None) -> List[NdefRecord]:
    """Decode records from an NDEF message until ME is set or the bytes run out."""
    emit = emitter(sink, "record")
    cur = _Cursor(bytes(message))
    records: List[NdefRecord] = []

    while cur.remaining() > 0:
        start = cur.pos
        hdr = RecordHeader.from_byte(cur.byte("record header"))
        type_len = cur.byte("type length")
        if hdr.sr:
            payload_len = cur.byte("payload length")
        else:
            payload_len = struct.unpack(">I", cur.take(4, "payload length"))[0]
        id_len = cur.byte("id length") if hdr.il else 0

        rtype = cur.take(type_len, "type")
        rid = cur.take(id_len, "id")
        payload = cur.take(payload_len, "payload")

        rec = NdefRecord(header=hdr, type=rtype, id=rid, payload=payload, offset=start)
        records.append(rec)
        emit(f"record {len(records) - 1}: {describe_record(rec)}", start)
        if hdr.cf:
            emit("chunked record, not reassembled", start)
        if hdr.me:
            break

    return records


def extract_text(records: List[NdefRecord], sink: Optional[EventSink] = None) -> Optional[TextPayload]:
    """Return the text of the qualifying Text record, or None.

    Each qualifying record replaces the previous one, so the last one wins.
    """
    emit = emitter(sink, "record")
    found: Optional[TextPayload] = None
    for i, rec in enumerate(records):
        if not rec.is_text():
            emit(f"record {i} ignored (TNF={rec.tnf}, type={rec.type!r})", rec.offset)
            continue
        found = decode_text_payload(rec.payload, sink)
    return found


def encode_record(rtype: bytes, payload: bytes, tnf: int = TNF_WELL_KNOWN,
                  mb: bool = True, me: bool = True) -> bytes:
    """Encode one short record (SR=1, no id)."""
    if len(payload) > SHORT_RECORD_MAX:
        raise TagError(
            ErrorKind.MESSAGE_TOO_LONG,
            f"payload of {len(payload)} bytes does not fit a short record",
        )
    hdr = RecordHeader(mb=mb, me=me, sr=True, tnf=tnf)
    return bytes([hdr.to_byte(), len(rtype), len(payload)]) + bytes(rtype) + bytes(payload)


def describe_record(rec: NdefRecord) -> str:
    """Short human-readable summary (Text / URI / other) for logs and the UI."""
    payload = rec.payload
    if rec.tnf == TNF_WELL_KNOWN:
        if rec.type == TEXT_TYPE and payload:
            try:
                tp = decode_text_payload(payload)
            except TagError:
                return f"Text(malformed, {len(payload)} bytes)"
            return f"Text('{tp.text}', lang={tp.language})"
        if rec.type == URI_TYPE and payload:
            code = payload[0]
            prefix = URI_PREFIXES[code] if code < len(URI_PREFIXES) else ""
            return f"URI('{prefix}{payload[1:].decode('utf-8', errors='replace')}')"
        return f"WellKnown(type={rec.type!r}, {len(payload)} bytes)"
    name = TNF_NAMES.get(rec.tnf, "Reserved")
    return f"{name}(TNF={rec.tnf}, type={rec.type!r}, {len(payload)} bytes)"

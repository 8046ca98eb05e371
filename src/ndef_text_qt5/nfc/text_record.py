# src/ndef_text_qt5/nfc/text_record.py
# NFC Forum Text RTD payload: status byte, language code, text.
#   status bit 7     -> UTF-16 flag
#   status bits 0..5 -> language code length (0..63)
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from .errors import ErrorKind, TagError
from .events import EventSink, emitter

TEXT_TYPE = b"T"
LANGUAGE = "en"

STATUS_UTF16 = 0x80
STATUS_LANG_MASK = 0x3F


@dataclass(frozen=True)
class TextPayload:
    language: str
    text: str
    utf16: bool = False


def decode_text_payload(payload: bytes, sink: Optional[EventSink] = None) -> TextPayload:
    """Split a Text record payload into language code and text.

    The text is always decoded as UTF-8; the UTF-16 flag is reported but not
    honoured.
    """
    emit = emitter(sink, "text")
    if not payload:
        raise TagError(ErrorKind.MALFORMED_TLV, "text payload has no status byte")

    status = payload[0]
    lang_len = status & STATUS_LANG_MASK
    utf16 = (status & STATUS_UTF16) != 0
    if 1 + lang_len > len(payload):
        raise TagError(
            ErrorKind.MALFORMED_TLV,
            f"language code length {lang_len} exceeds payload of {len(payload)} bytes",
        )

    language = payload[1:1 + lang_len].decode("ascii", errors="replace")
    text = payload[1 + lang_len:].decode("utf-8", errors="replace")
    if utf16:
        emit("UTF-16 flag set, decoding as UTF-8 anyway")
    emit(f"text record lang={language!r}, {len(payload) - 1 - lang_len} text bytes")
    return TextPayload(language=language, text=text, utf16=utf16)


def encode_text_payload(text: str) -> bytes:
    """Build a UTF-8 Text payload with the fixed language code 'en'."""
    lang = LANGUAGE.encode("ascii")
    status = len(lang) & STATUS_LANG_MASK
    return bytes([status]) + lang + (text or "").encode("utf-8")

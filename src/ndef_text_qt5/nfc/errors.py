# src/ndef_text_qt5/nfc/errors.py
# Error taxonomy shared by the codec, the page primitive and the sessions.
from __future__ import annotations
import enum
from typing import Optional


class ErrorKind(enum.Enum):
    UNSUPPORTED_TAG = "unsupported_tag"
    CONNECTION_FAILED = "connection_failed"
    TRUNCATED_READ = "truncated_read"      # advisory only, never a failed result
    MALFORMED_TLV = "malformed_tlv"
    NO_NDEF_MESSAGE = "no_ndef_message"
    NO_NDEF_CONTENT = "no_ndef_content"
    WRITE_PROTECTED = "write_protected"
    WRITE_FAILED = "write_failed"
    MESSAGE_TOO_LONG = "message_too_long"


class TagError(Exception):
    """Codec or session failure of a specific kind.

    `page` is only set for WRITE_FAILED (the page whose write call failed).
    """
    def __init__(self, kind: ErrorKind, message: str = "", page: Optional[int] = None):
        super().__init__(message or kind.value)
        self.kind = kind
        self.message = message or kind.value
        self.page = page

    def __repr__(self) -> str:
        extra = f", page={self.page}" if self.page is not None else ""
        return f"TagError({self.kind.name}, {self.message!r}{extra})"


class TagIOError(Exception):
    """Raised by a page primitive when a single read or write call fails."""
    def __init__(self, page: int, message: str = ""):
        super().__init__(message or f"I/O error at page {page}")
        self.page = page

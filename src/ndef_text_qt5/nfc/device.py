# src/ndef_text_qt5/nfc/device.py
# Contract of the page primitive the sessions run against.
from __future__ import annotations
from typing import Protocol


class PageTag(Protocol):
    """A connected-on-demand Type 2 tag.

    read_pages(start) returns the 16 bytes of pages start..start+3 and
    write_page(page, data4) writes one 4-byte page; both raise TagIOError
    when the call fails. connect() raises TagError (CONNECTION_FAILED or
    UNSUPPORTED_TAG).
    """
    def connect(self) -> None: ...

    def read_pages(self, start_page: int) -> bytes: ...

    def write_page(self, page: int, data4: bytes) -> None: ...

    def close(self) -> None: ...

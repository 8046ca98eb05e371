# tests/conftest.py
# In-memory Type 2 tag implementing the PageTag contract, for session tests.
from __future__ import annotations
from typing import List, Optional, Tuple

import pytest

from ndef_text_qt5.nfc.errors import ErrorKind, TagError, TagIOError


def HEX(s: str) -> bytes:
    return bytes.fromhex(s)


# "test" as written by the encoder (pages 0..7)
TEST_IMAGE = HEX(
    "04 35 79 C0 52 4A 74 80 EC 48 00 00 E1 11 12 00"
    "03 0B D1 01 07 54 02 65 6E 74 65 73 74 FE 00 00"
)


class MemoryTag:
    """Pages in a bytearray; reads return 4 pages, reads past the end fail.

    fail_read_page / fail_write_page make that page (and every later read)
    fail with TagIOError.
    """
    def __init__(self, image: bytes = b"", pages: int = 48,
                 fail_read_page: Optional[int] = None,
                 fail_write_page: Optional[int] = None,
                 connect_error: Optional[ErrorKind] = None):
        self.mem = bytearray(image) + bytearray(max(0, pages * 4 - len(image)))
        self.fail_read_page = fail_read_page
        self.fail_write_page = fail_write_page
        self.connect_error = connect_error
        self.connected = False
        self.closed = 0
        self.reads: List[int] = []
        self.writes: List[Tuple[int, bytes]] = []

    @property
    def pages(self) -> int:
        return len(self.mem) // 4

    def connect(self) -> None:
        if self.connect_error is not None:
            raise TagError(self.connect_error, "simulated connect failure")
        self.connected = True

    def read_pages(self, start_page: int) -> bytes:
        self.reads.append(start_page)
        if self.fail_read_page is not None and start_page + 3 >= self.fail_read_page:
            raise TagIOError(start_page, "simulated field loss")
        if start_page >= self.pages:
            raise TagIOError(start_page, "page out of range")
        return bytes(self.mem[start_page * 4:start_page * 4 + 16])

    def write_page(self, page: int, data4: bytes) -> None:
        assert len(data4) == 4
        if self.fail_write_page is not None and page >= self.fail_write_page:
            raise TagIOError(page, "simulated write failure")
        self.writes.append((page, bytes(data4)))
        self.mem[page * 4:page * 4 + 4] = data4

    def close(self) -> None:
        self.connected = False
        self.closed += 1


@pytest.fixture()
def blank_tag():
    cc = HEX("04 35 79 C0 52 4A 74 80 EC 48 00 00 E1 11 12 00")
    return MemoryTag(cc + HEX("03 00 FE 00"))


@pytest.fixture()
def test_tag():
    return MemoryTag(TEST_IMAGE)

# src/ndef_text_qt5/nfc/pcsc.py
# PC/SC page primitive for Type 2 tags (NTAG/Ultralight) plus reader helpers.
from __future__ import annotations
import logging
import time
from typing import List, Optional, Tuple

from smartcard.System import readers
from smartcard.CardConnection import CardConnection
from smartcard.Exceptions import CardConnectionException, NoCardException

from .errors import ErrorKind, TagError, TagIOError

log = logging.getLogger(__name__)

SW_OK = (0x90, 0x00)

# PC/SC part 3 storage-card ATR: 3B 8F 80 01 80 4F 0C A0 00 00 03 06 SS NN NN ...
# SS = standard (03 = ISO 14443A part 3), NN NN = card name.
ATR_RID = [0xA0, 0x00, 0x00, 0x03, 0x06]
CARD_NAME_ULTRALIGHT = 0x0003


def list_readers() -> List:
    """Return available PC/SC readers."""
    try:
        return readers()
    except Exception:
        return []


def connect_first_reader() -> Optional[CardConnection]:
    """Create connection object to the first available reader (not yet connected)."""
    rlist = list_readers()
    if not rlist:
        return None
    return rlist[0].createConnection()


def wait_for_card(timeout_s: float = 30.0, poll_interval_s: float = 0.5) -> Optional[CardConnection]:
    """Poll the first reader until a card is present or timeout."""
    conn = connect_first_reader()
    if conn is None:
        return None
    deadline = time.time() + timeout_s
    while time.time() < deadline:
        try:
            conn.connect()  # will raise until a card is present
            return conn
        except (NoCardException, CardConnectionException):
            time.sleep(poll_interval_s)
    return None


def read_atr(conn: CardConnection) -> bytes:
    """Return ATR bytes of the connected card (already connected)."""
    atr = conn.getATR()
    return bytes(atr) if atr else b""


def read_uid(conn: CardConnection) -> Tuple[Optional[bytes], int, int]:
    """
    Try to read card UID using a common APDU for ACR122/ACR125x:
    FF CA 00 00 00  -> returns UID, SW1, SW2
    Not all readers/cards support this. Handle gracefully.
    """
    try:
        cmd = [0xFF, 0xCA, 0x00, 0x00, 0x00]
        data, sw1, sw2 = conn.transmit(cmd)
        if (sw1, sw2) == SW_OK:
            return bytes(data), sw1, sw2
        return None, sw1, sw2
    except Exception:
        return None, 0x6F, 0x00  # 6F00 = generic error


def storage_card_name(atr: bytes) -> Optional[int]:
    """Card name from a PC/SC storage-card ATR, or None for any other ATR."""
    b = list(atr or b"")
    if len(b) < 15 or b[4] != 0x80 or b[5] != 0x4F:
        return None
    if b[7:12] != ATR_RID:
        return None
    return (b[13] << 8) | b[14]


def is_supported_atr(atr: bytes) -> bool:
    """Accept Ultralight/NTAG storage cards; reject other named storage cards.

    ATRs that are not in storage-card form are accepted; a reader that does
    not report a card name is given the benefit of the doubt.
    """
    name = storage_card_name(atr)
    return name is None or name == CARD_NAME_ULTRALIGHT


# --- APDUs ---
def _cmd_read_page_group(start_page: int):
    """PC/SC READ BINARY for 4 pages (16 bytes) starting at start_page."""
    return [0xFF, 0xB0, 0x00, start_page & 0xFF, 0x10]


def _cmd_write_single_page(page: int, data4: bytes):
    """PC/SC UPDATE BINARY for one 4-byte page."""
    return [0xFF, 0xD6, 0x00, page & 0xFF, 0x04] + list(data4)


def _tx(conn, apdu: list):
    data, sw1, sw2 = conn.transmit(apdu)
    return bytes(data), sw1, sw2


class PcscPageTag:
    """Page primitive on top of a pyscard CardConnection."""
    def __init__(self, conn: CardConnection, delay_ms: int = 0):
        self.conn = conn
        self.delay_ms = delay_ms
        self.atr = b""

    def connect(self) -> None:
        try:
            self.conn.connect()
        except NoCardException as e:
            raise TagError(ErrorKind.CONNECTION_FAILED, f"no card present: {e}") from e
        except CardConnectionException as e:
            raise TagError(ErrorKind.CONNECTION_FAILED, f"cannot connect: {e}") from e
        self.atr = read_atr(self.conn)
        if not is_supported_atr(self.atr):
            name = storage_card_name(self.atr)
            self.close()
            raise TagError(ErrorKind.UNSUPPORTED_TAG,
                           f"card name 0x{name:04X} is not a page-addressed Type 2 tag")

    def read_pages(self, start_page: int) -> bytes:
        try:
            data, sw1, sw2 = _tx(self.conn, _cmd_read_page_group(start_page))
        except CardConnectionException as e:
            raise TagIOError(start_page, f"READ page 0x{start_page:02X}: {e}") from e
        if (sw1, sw2) != SW_OK:
            raise TagIOError(start_page, f"READ page 0x{start_page:02X}: SW1/SW2={sw1:02X}/{sw2:02X}")
        return data

    def write_page(self, page: int, data4: bytes) -> None:
        if not isinstance(data4, (bytes, bytearray)) or len(data4) != 4:
            raise ValueError("write_page expects exactly 4 bytes")
        try:
            _, sw1, sw2 = _tx(self.conn, _cmd_write_single_page(page, data4))
        except CardConnectionException as e:
            raise TagIOError(page, f"WRITE page 0x{page:02X}: {e}") from e
        if (sw1, sw2) != SW_OK:
            raise TagIOError(page, f"WRITE page 0x{page:02X}: SW1/SW2={sw1:02X}/{sw2:02X}")
        if self.delay_ms:
            time.sleep(self.delay_ms / 1000.0)

    def close(self) -> None:
        try:
            self.conn.disconnect()
        except Exception as e:
            log.debug("disconnect failed: %s", e)

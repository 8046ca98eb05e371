# src/ndef_text_qt5/utils/hexdump.py
from typing import List, Optional

PAGE_SIZE = 4


def fmt_hex(b: Optional[bytes]) -> str:
    """Format bytes as spaced uppercase hex ('' for None/empty)."""
    if not b:
        return ""
    return " ".join(f"{x:02X}" for x in b)


def fmt_ascii(b: bytes) -> str:
    return "".join(chr(x) if 32 <= x < 127 else "." for x in b)


def parse_hex(text: str) -> bytes:
    """Parse 'AA BB 0xCC' / 'AABBCC' into bytes; raises ValueError on junk."""
    s = (text or "").replace("0x", "").replace("0X", "").replace(",", " ")
    s = "".join(s.split())
    if len(s) % 2:
        raise ValueError(f"odd number of hex digits: {len(s)}")
    return bytes.fromhex(s)


def page_lines(image: bytes, first_page: int = 0) -> List[str]:
    """One line per 4-byte page: 'Page 04: 03 0B D1 01   |....|'."""
    lines = []
    for i in range(0, len(image), PAGE_SIZE):
        page = image[i:i + PAGE_SIZE]
        lines.append(f"Page {first_page + i // PAGE_SIZE:02d}: {fmt_hex(page):<11}   |{fmt_ascii(page)}|")
    return lines


def format_pages(image: bytes, first_page: int = 0) -> str:
    return "\n".join(page_lines(image, first_page))

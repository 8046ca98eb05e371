# tests/ntag_dump.py
# Dump Type-2 tag pages (NTAG/Ultralight family) via PC/SC.
# - Uses the same best-effort read loop as the app (stops at the first unreadable block).
# - Prints one line per page (HEX + ASCII) and the decoded text, if any.
# - Writes the raw image to a binary file.
# - Run while a tag is on the reader.

from __future__ import annotations
import sys
import argparse

from ndef_text_qt5.nfc.errors import TagError
from ndef_text_qt5.nfc.pcsc import PcscPageTag, connect_first_reader, list_readers
from ndef_text_qt5.nfc.session import decode_image, read_memory
from ndef_text_qt5.utils.hexdump import format_pages


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Dump NTAG/Ultralight pages via PC/SC.")
    p.add_argument("--end", type=int, default=47, help="Last page inclusive (default: 47)")
    p.add_argument("--outfile", default="ntag_dump.bin", help="Output binary filename (default: ntag_dump.bin)")
    return p.parse_args()


def main():
    args = parse_args()

    if args.end < 3:
        print("[ERROR] Invalid range. The dump needs at least pages 0..3.")
        sys.exit(1)

    if not list_readers():
        print("[ERROR] No PC/SC reader found.")
        sys.exit(1)

    conn = connect_first_reader()
    if conn is None:
        print("[ERROR] Failed to get connection object for first reader.")
        sys.exit(1)

    tag = PcscPageTag(conn)
    try:
        tag.connect()
    except TagError as e:
        print(f"[ERROR] {e.message}. Place a tag on the reader.")
        sys.exit(1)

    try:
        image, truncated = read_memory(tag, max_pages=args.end + 1)
    finally:
        tag.close()

    print(format_pages(image))
    if truncated:
        print(f"[WARN] Read stopped at page {len(image) // 4}.")

    result = decode_image(image, truncated)
    if result.ok:
        print(f"\n[OK] Text: {result.text!r} (lang={result.language})")
    else:
        print(f"\n[INFO] {result.kind.name}: {result.message}")

    with open(args.outfile, "wb") as f:
        f.write(image)
    print(f"Saved {len(image)} bytes to {args.outfile}")


if __name__ == "__main__":
    main()

# tests/test_tlv.py
import pytest

from ndef_text_qt5.nfc.errors import ErrorKind, TagError
from ndef_text_qt5.nfc.events import EventLog
from ndef_text_qt5.nfc.records import decode_records
from ndef_text_qt5.nfc.tlv import (
    CAPABILITY_CONTAINER,
    TLV_TERMINATOR,
    data_area_size,
    encode_ndef_tlv,
    find_ndef_message,
    is_write_protected,
    iter_tlv,
    pad_to_page,
)


def HEX(s):
    return bytes.fromhex(s)


def test_find_ndef_message():
    data = HEX("03 0B D1 01 07 54 02 65 6E 74 65 73 74 FE 00 00")
    assert find_ndef_message(data) == HEX("D1 01 07 54 02 65 6E 74 65 73 74")


def test_unknown_tlv_is_skipped():
    events = EventLog()
    msg = find_ndef_message(HEX("05 02 AA BB 03 03 D1 00 00"), events)
    assert msg == HEX("D1 00 00")
    recs = decode_records(msg)
    assert len(recs) == 1
    assert recs[0].header.tnf == 1
    assert recs[0].header.me
    assert recs[0].type == b"" and recs[0].payload == b""
    assert any("skipping TLV 0x05" in line for line in events.lines())


def test_null_tlvs_are_padding():
    assert find_ndef_message(HEX("00 00 03 01 AA FE")) == b"\xAA"


def test_lock_control_tlv_before_ndef():
    # Lock Control TLV (01 03 ...) as found on NTAG216
    data = HEX("01 03 A0 0C 34 03 03 D1 00 00 FE")
    assert find_ndef_message(data) == HEX("D1 00 00")


def test_first_ndef_block_is_authoritative():
    assert find_ndef_message(HEX("03 01 AA 03 01 BB FE")) == b"\xAA"


def test_long_length_form():
    msg = bytes(range(256)) * 2
    data = HEX("03 FF 02 00") + msg + HEX("FE")
    assert find_ndef_message(data) == msg


def test_terminator_before_ndef():
    with pytest.raises(TagError) as ei:
        find_ndef_message(HEX("FE 03 01 AA"))
    assert ei.value.kind is ErrorKind.NO_NDEF_MESSAGE


def test_exhausted_without_terminator_is_malformed():
    with pytest.raises(TagError) as ei:
        find_ndef_message(HEX("05 01 AA"))
    assert ei.value.kind is ErrorKind.MALFORMED_TLV


def test_empty_buffer_is_malformed():
    with pytest.raises(TagError) as ei:
        find_ndef_message(b"")
    assert ei.value.kind is ErrorKind.MALFORMED_TLV


def test_ndef_length_past_end_is_malformed():
    # first 20 bytes of the "test" image minus the 16 CC bytes
    with pytest.raises(TagError) as ei:
        find_ndef_message(HEX("03 0B D1 01"))
    assert ei.value.kind is ErrorKind.MALFORMED_TLV


def test_missing_length_byte_is_malformed():
    with pytest.raises(TagError) as ei:
        find_ndef_message(HEX("05"))
    assert ei.value.kind is ErrorKind.MALFORMED_TLV


def test_unknown_span_past_end_is_malformed():
    with pytest.raises(TagError) as ei:
        find_ndef_message(HEX("05 09 AA BB"))
    assert ei.value.kind is ErrorKind.MALFORMED_TLV


def test_iter_tlv_lists_blocks_and_terminator():
    blocks = list(iter_tlv(HEX("00 05 02 AA BB 03 01 CC FE 99")))
    assert [(b.tag, b.offset) for b in blocks] == [(0x05, 1), (0x03, 5), (TLV_TERMINATOR, 8)]
    assert blocks[0].value == HEX("AA BB")


def test_encode_ndef_tlv():
    assert encode_ndef_tlv(HEX("D1 00 00")) == HEX("03 03 D1 00 00 FE")


def test_encode_ndef_tlv_long_form():
    msg = b"\x00" * 300
    assert encode_ndef_tlv(msg)[:4] == HEX("03 FF 01 2C")
    assert find_ndef_message(encode_ndef_tlv(msg)) == msg


def test_pad_to_page():
    assert pad_to_page(b"\x01\x02\x03") == b"\x01\x02\x03\x00"
    assert pad_to_page(b"\x01\x02\x03\x04") == b"\x01\x02\x03\x04"
    assert pad_to_page(b"") == b""


def test_capability_container_access():
    assert not is_write_protected(CAPABILITY_CONTAINER)
    locked = CAPABILITY_CONTAINER[:15] + b"\x0F"
    assert is_write_protected(locked)
    assert data_area_size(CAPABILITY_CONTAINER) == 144


def test_data_area_unknown_without_magic():
    assert data_area_size(b"\x00" * 16) is None
    assert not is_write_protected(b"\x00" * 8)

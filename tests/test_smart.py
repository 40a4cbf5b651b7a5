"""Tests for the vendor block decoder."""

from storage_health.models import SmartAttribute
from storage_health.smart import decode_attributes, find_attribute


def test_decode_reads_record_fields(smart_block):
    block = smart_block((5, 10, 100, 99, 7))

    attrs = decode_attributes(block)

    assert attrs == [SmartAttribute(id=5, current_value=100, worst_value=99, threshold=10, raw_value=7)]


def test_decode_multiple_records_in_order(smart_block):
    block = smart_block((1, 6, 200, 200, 0), (9, 0, 98, 98, 26280), (194, 0, 35, 50, 35))

    assert [a.id for a in decode_attributes(block)] == [1, 9, 194]


def test_raw_value_is_little_endian(smart_block):
    attrs = decode_attributes(smart_block((9, 0, 100, 100, 0x01020304)))

    assert attrs[0].raw_value == 0x01020304


def test_raw_value_ignores_high_order_bytes(smart_record):
    block = b"\x10\x00" + smart_record(9, raw=0xFFFFFFFF, raw_high=0x0102)

    assert decode_attributes(block)[0].raw_value == 0xFFFFFFFF


def test_unused_slots_are_skipped(smart_block):
    block = smart_block((0, 50, 1, 1, 1234), (5, 10, 100, 100, 0), (0, 0, 0, 0, 0))

    attrs = decode_attributes(block)

    assert [a.id for a in attrs] == [5]


def test_missing_block_yields_nothing():
    assert decode_attributes(None) == []
    assert decode_attributes(b"") == []
    assert decode_attributes(b"\x10\x00") == []


def test_short_blocks_yield_nothing(smart_record):
    record = smart_record(5, raw=3)
    for length in range(0, 11):
        assert decode_attributes(b"\x10\x00" + record[:length]) == []


def test_eleven_bytes_after_header_is_enough(smart_record):
    block = b"\x10\x00" + smart_record(5, raw=3)[:11]

    assert [a.raw_value for a in decode_attributes(block)] == [3]


def test_truncated_trailing_record_is_dropped(smart_block, smart_record):
    block = smart_block((5, 10, 100, 100, 1)) + smart_record(197, raw=4)[:6]

    assert [a.id for a in decode_attributes(block)] == [5]


def test_accepts_list_of_ints(smart_block):
    block = list(smart_block((9, 0, 100, 100, 100)))

    assert decode_attributes(block)[0].raw_value == 100


def test_malformed_input_does_not_raise():
    assert decode_attributes(["not", "bytes"]) == []
    assert decode_attributes(bytearray(5)) == []


def test_full_size_block(smart_block):
    # drivers report a 512 byte buffer padded with zero slots
    block = smart_block((5, 10, 100, 100, 0), (9, 0, 90, 90, 8760))
    block = block + bytes(512 - len(block))

    attrs = decode_attributes(block)

    assert [a.id for a in attrs] == [5, 9]


def test_find_attribute(smart_block):
    attrs = decode_attributes(smart_block((5, 10, 100, 100, 0), (9, 0, 90, 90, 8760)))

    assert find_attribute(attrs, 9).raw_value == 8760
    assert find_attribute(attrs, 197) is None

import io

import pytest

from bgkit.imago import byteorder


def test_write_uint16_be_bytes():
    buf = io.BytesIO()
    byteorder.write_uint16_be(buf, 0x1234)
    assert buf.getvalue() == b"\x12\x34"


def test_write_uint16_le_bytes():
    buf = io.BytesIO()
    byteorder.write_uint16_le(buf, 0x1234)
    assert buf.getvalue() == b"\x34\x12"


def test_read_uint16_orders_differ():
    assert byteorder.read_uint16_be(io.BytesIO(b"\x12\x34")) == 0x1234
    assert byteorder.read_uint16_le(io.BytesIO(b"\x34\x12")) == 0x1234


def test_read_uint16_be_high_bit():
    assert byteorder.read_uint16_be(io.BytesIO(b"\xff\x80")) == 0xFF80


def test_read_int16_le_negative():
    assert byteorder.read_int16_le(io.BytesIO(b"\xff\xff")) == -1


@pytest.mark.parametrize("value", [-32768, -1, 0, 1, 1000, 32767])
def test_int16_roundtrip(value):
    for write, read in (
        (byteorder.write_int16_le, byteorder.read_int16_le),
        (byteorder.write_int16_be, byteorder.read_int16_be),
    ):
        buf = io.BytesIO()
        write(buf, value)
        buf.seek(0)
        assert read(buf) == value


@pytest.mark.parametrize("value", [0, 1, 0x8000, 0xFFFF])
def test_uint16_roundtrip(value):
    for write, read in (
        (byteorder.write_uint16_le, byteorder.read_uint16_le),
        (byteorder.write_uint16_be, byteorder.read_uint16_be),
    ):
        buf = io.BytesIO()
        write(buf, value)
        buf.seek(0)
        assert read(buf) == value


def test_read_uint32_be():
    assert byteorder.read_uint32_be(io.BytesIO(b"\x00\x00\x01\x00")) == 256


def test_short_read_raises():
    with pytest.raises(EOFError):
        byteorder.read_uint32_be(io.BytesIO(b"\x01\x02"))


def test_reads_advance_stream():
    buf = io.BytesIO(b"\x00\x01\x00\x02")
    assert byteorder.read_uint16_be(buf) == 1
    assert byteorder.read_uint16_be(buf) == 2
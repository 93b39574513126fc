import io
import struct

import pytest

from bgkit.imago import rgbe
from bgkit.imago.formats import ImageError, PixelFormat
from bgkit.imago.pixmap import Pixmap


def _rgbf(width, height, values):
    return Pixmap(width, height, PixelFormat.RGBF, struct.pack(f"<{len(values)}f", *values))


def _floats(pixmap):
    return struct.unpack(f"<{len(pixmap.pixels) // 4}f", bytes(pixmap.pixels))


def test_black_encodes_to_zero_bytes():
    assert rgbe.float_to_rgbe(0.0, 0.0, 0.0) == b"\0\0\0\0"


def test_white_worked_example():
    assert rgbe.float_to_rgbe(1.0, 1.0, 1.0) == bytes((128, 128, 128, 129))
    assert rgbe.rgbe_to_float(bytes((128, 128, 128, 129))) == (1.0, 1.0, 1.0)


def test_zero_exponent_decodes_to_black():
    assert rgbe.rgbe_to_float(bytes((200, 10, 30, 0))) == (0.0, 0.0, 0.0)


@pytest.mark.parametrize("color", [(0.25, 0.5, 0.75), (3.0, 10.0, 0.1), (1e-3, 2e-3, 5e-4)])
def test_float_rgbe_round_trip(color):
    decoded = rgbe.rgbe_to_float(rgbe.float_to_rgbe(*color))
    top = max(color)
    for got, want in zip(decoded, color):
        assert abs(got - want) <= top / 100


def test_default_header_bytes():
    out = io.BytesIO()
    rgbe.write_header(out, 3, 2)
    assert out.getvalue() == b"#?RGBE\nFORMAT=32-bit_rle_rgbe\n\n-Y 2 +X 3\n"


def test_header_round_trip_with_fields():
    out = io.BytesIO()
    header = rgbe.RgbeHeader(programtype="RADIANCE", gamma=2.2, exposure=0.5)
    rgbe.write_header(out, 640, 480, header)
    out.seek(0)
    width, height, got = rgbe.read_header(out)
    assert (width, height) == (640, 480)
    assert got.programtype == "RADIANCE"
    assert got.gamma == pytest.approx(2.2)
    assert got.exposure == pytest.approx(0.5)


def test_header_without_optional_fields():
    out = io.BytesIO()
    rgbe.write_header(out, 5, 7)
    out.seek(0)
    width, height, header = rgbe.read_header(out)
    assert (width, height) == (5, 7)
    assert header.programtype == "RGBE"
    assert header.gamma is None
    assert header.exposure is None


def test_header_missing_format_is_rejected():
    with pytest.raises(ImageError):
        rgbe.read_header(io.BytesIO(b"#?RGBE\n\n-Y 2 +X 3\n"))


def test_header_bad_signature_is_rejected():
    with pytest.raises(ImageError):
        rgbe.read_header(io.BytesIO(b"P6\n2 2\n255\n"))


def test_check_accepts_rgbe_and_restores_position():
    out = io.BytesIO()
    rgbe.write_header(out, 1, 1)
    out.write(bytes(4))
    out.seek(0)
    assert rgbe.check(out) is True
    assert out.tell() == 0


def test_check_rejects_other_data():
    stream = io.BytesIO(b"\x89PNG\r\n\x1a\n" + bytes(20))
    assert rgbe.check(stream) is False
    assert stream.tell() == 0


@pytest.mark.parametrize("width,height", [(4, 3), (16, 2), (9, 5)])
def test_pixmap_round_trip(width, height):
    values = [((i * 7) % 13) / 4.0 + 0.1 for i in range(width * height * 3)]
    src = _rgbf(width, height, values)
    out = io.BytesIO()
    rgbe.write(src, out)
    out.seek(0)
    back = rgbe.read(out)
    assert (back.width, back.height, back.fmt) == (width, height, PixelFormat.RGBF)
    got = _floats(back)
    for start in range(0, len(values), 3):
        top = max(values[start:start + 3])
        for g, w in zip(got[start:start + 3], values[start:start + 3]):
            assert abs(g - w) <= top / 100


def test_uniform_image_compresses():
    width, height = 64, 4
    src = _rgbf(width, height, [0.5, 0.25, 0.125] * (width * height))
    out = io.BytesIO()
    rgbe.write(src, out)
    header = io.BytesIO()
    rgbe.write_header(header, width, height)
    assert len(out.getvalue()) - len(header.getvalue()) < width * height * 4


def test_integer_image_is_converted_on_write():
    src = Pixmap(2, 1, PixelFormat.RGB24, bytes((255, 0, 0, 0, 255, 0)))
    out = io.BytesIO()
    rgbe.write(src, out)
    out.seek(0)
    back = rgbe.read(out)
    got = _floats(back)
    assert got[0] == pytest.approx(1.0)
    assert got[1] == 0.0
    assert got[4] == pytest.approx(1.0)


def test_flat_data_at_rle_width_is_read():
    width, height = 8, 2
    out = io.BytesIO()
    rgbe.write_header(out, width, height)
    for _ in range(width * height):
        out.write(rgbe.float_to_rgbe(0.5, 0.5, 0.5))
    out.seek(0)
    back = rgbe.read(out)
    assert _floats(back) == (0.5,) * (width * height * 3)


def test_wrong_scanline_width_is_rejected():
    out = io.BytesIO()
    rgbe.write_header(out, 8, 1)
    out.write(bytes((2, 2, 0, 9)))
    out.seek(0)
    with pytest.raises(ImageError):
        rgbe.read(out)


def test_zero_length_packet_is_rejected():
    out = io.BytesIO()
    rgbe.write_header(out, 8, 1)
    out.write(bytes((2, 2, 0, 8, 0, 0)))
    out.seek(0)
    with pytest.raises(ImageError):
        rgbe.read(out)


def test_truncated_pixels_are_rejected():
    out = io.BytesIO()
    rgbe.write_header(out, 2, 2)
    out.write(bytes(6))
    out.seek(0)
    with pytest.raises(ImageError):
        rgbe.read(out)
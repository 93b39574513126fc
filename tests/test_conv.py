import struct

import pytest

from bgkit.imago.conv import convert_pixels, pack, unpack
from bgkit.imago.formats import ImageError, PixelFormat, pixel_size


def test_unpack_grey8_replicates_and_sets_alpha():
    assert unpack(PixelFormat.GREY8, bytes([0, 255])) == [
        (0.0, 0.0, 0.0, 1.0),
        (1.0, 1.0, 1.0, 1.0),
    ]


def test_rgb24_to_rgba32_adds_opaque_alpha():
    src = bytes([0, 255, 0, 255, 0, 255])
    assert convert_pixels(src, PixelFormat.RGB24, PixelFormat.RGBA32) == bytes(
        [0, 255, 0, 255, 255, 0, 255, 255]
    )


def test_rgba32_to_rgb24_drops_alpha():
    src = bytes([255, 0, 255, 7, 0, 255, 0, 0])
    assert convert_pixels(src, PixelFormat.RGBA32, PixelFormat.RGB24) == bytes(
        [255, 0, 255, 0, 255, 0]
    )


def test_grey8_to_rgb24_and_back():
    src = bytes([0, 51, 102, 153, 204, 255])
    rgb = convert_pixels(src, PixelFormat.GREY8, PixelFormat.RGB24)
    assert len(rgb) == 3 * len(src)
    assert convert_pixels(rgb, PixelFormat.RGB24, PixelFormat.GREY8) == src


def test_grey8_is_channel_mean():
    src = bytes([255, 0, 0])
    assert convert_pixels(src, PixelFormat.RGB24, PixelFormat.GREY8) == bytes([85])


def test_same_format_returns_copy():
    src = bytearray([1, 2, 3])
    out = convert_pixels(src, PixelFormat.RGB24, PixelFormat.RGB24)
    assert out == bytes(src)
    src[0] = 9
    assert out[0] == 1


def test_pack_clamps_integer_channels():
    out = pack(PixelFormat.RGBA32, [(2.0, -1.0, 1.0, 0.0)])
    assert out == bytes([255, 0, 255, 0])


def test_bgra32_byte_order_and_round_trip():
    pixels = [(1.0, 0.0, 0.0, 1.0)]
    data = pack(PixelFormat.BGRA32, pixels)
    assert data == bytes([0, 0, 255, 255])
    assert unpack(PixelFormat.BGRA32, data) == pixels


def test_rgb565_white_and_red():
    assert unpack(PixelFormat.RGB565, b"\xff\xff") == [(1.0, 1.0, 1.0, 1.0)]
    assert pack(PixelFormat.RGB565, [(1.0, 0.0, 0.0, 1.0)]) == struct.pack("<H", 0xF800)
    assert pack(PixelFormat.RGB565, [(1.0, 1.0, 1.0, 1.0)]) == b"\xff\xff"


def test_rgb565_round_trip_extremes():
    data = struct.pack("<3H", 0x0000, 0xFFFF, 0xF800)
    back = convert_pixels(
        convert_pixels(data, PixelFormat.RGB565, PixelFormat.RGBF),
        PixelFormat.RGBF,
        PixelFormat.RGB565,
    )
    assert back == data


def test_float_formats_round_trip():
    pixels = [(0.25, 0.5, 0.75, 0.125), (1.0, 0.0, 2.0, 1.0)]
    data = pack(PixelFormat.RGBAF, pixels)
    assert len(data) == 2 * pixel_size(PixelFormat.RGBAF)
    assert unpack(PixelFormat.RGBAF, data) == pixels


def test_rgbf_to_rgbaf_sets_alpha_one():
    data = pack(PixelFormat.RGBF, [(0.5, 0.25, 0.75, 0.0)])
    out = convert_pixels(data, PixelFormat.RGBF, PixelFormat.RGBAF)
    assert unpack(PixelFormat.RGBAF, out) == [(0.5, 0.25, 0.75, 1.0)]


def test_greyf_holds_channel_mean():
    data = pack(PixelFormat.GREYF, [(0.0, 0.5, 1.0, 1.0)])
    assert unpack(PixelFormat.GREYF, data) == [(0.5, 0.5, 0.5, 1.0)]


def test_integer_to_float_to_integer_round_trip():
    src = bytes([0, 51, 102, 255, 153, 204, 255, 0])
    floats = convert_pixels(src, PixelFormat.RGBA32, PixelFormat.RGBAF)
    assert convert_pixels(floats, PixelFormat.RGBAF, PixelFormat.RGBA32) == src


def test_partial_pixel_raises():
    with pytest.raises(ImageError):
        unpack(PixelFormat.RGB24, bytes([1, 2]))


def test_unknown_format_raises():
    with pytest.raises(ImageError):
        pack(99, [(0.0, 0.0, 0.0, 1.0)])
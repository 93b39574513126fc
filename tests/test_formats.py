import pytest

from bgkit.imago.formats import (
    ImageError,
    PixelFormat,
    gl_format,
    gl_internal_format,
    gl_type,
    has_alpha,
    is_float,
    is_greyscale,
    pixel_size,
)


@pytest.mark.parametrize(
    "fmt, size",
    [
        (PixelFormat.GREY8, 1),
        (PixelFormat.RGB24, 3),
        (PixelFormat.RGBA32, 4),
        (PixelFormat.BGRA32, 4),
        (PixelFormat.GREYF, 4),
        (PixelFormat.RGBF, 12),
        (PixelFormat.RGBAF, 16),
        (PixelFormat.RGB565, 2),
    ],
)
def test_pixel_size(fmt, size):
    assert pixel_size(fmt) == size


def test_pixel_size_accepts_plain_int():
    assert pixel_size(1) == pixel_size(PixelFormat.RGB24)


def test_unknown_format_raises():
    with pytest.raises(ImageError):
        pixel_size(42)
    with pytest.raises(ImageError):
        is_float(-1)


def test_is_float():
    floats = {f for f in PixelFormat if is_float(f)}
    assert floats == {PixelFormat.GREYF, PixelFormat.RGBF, PixelFormat.RGBAF}


def test_has_alpha():
    alpha = {f for f in PixelFormat if has_alpha(f)}
    assert alpha == {PixelFormat.RGBA32, PixelFormat.RGBAF}


def test_is_greyscale():
    grey = {f for f in PixelFormat if is_greyscale(f)}
    assert grey == {PixelFormat.GREY8, PixelFormat.GREYF}


def test_gl_format():
    assert gl_format(PixelFormat.GREY8) == 0x1909
    assert gl_format(PixelFormat.GREYF) == 0x1909
    assert gl_format(PixelFormat.RGB24) == 0x1907
    assert gl_format(PixelFormat.RGBAF) == 0x1908
    assert gl_format(PixelFormat.BGRA32) == 0
    assert gl_format(PixelFormat.RGB565) == 0


def test_gl_type():
    assert gl_type(PixelFormat.RGBA32) == 0x1401
    assert gl_type(PixelFormat.RGBF) == 0x1406
    assert gl_type(PixelFormat.RGB565) == 0


def test_gl_internal_format():
    assert gl_internal_format(PixelFormat.GREY8) == 0x1909
    assert gl_internal_format(PixelFormat.GREYF) == 0x8818
    assert gl_internal_format(PixelFormat.RGBF) == 0x8815
    assert gl_internal_format(PixelFormat.RGBAF) == 0x8814
    assert gl_internal_format(PixelFormat.BGRA32) == 0
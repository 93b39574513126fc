"""Pixel formats and the properties derived from them."""

from __future__ import annotations

from enum import IntEnum


class ImageError(Exception):
    """Raised when an image cannot be created, converted, read or written."""


class PixelFormat(IntEnum):
    """Layout of a single pixel in a pixel buffer."""

    GREY8 = 0
    RGB24 = 1
    RGBA32 = 2
    GREYF = 3
    RGBF = 4
    RGBAF = 5
    BGRA32 = 6
    RGB565 = 7


# OpenGL enumerants, defined here so that nothing depends on an OpenGL binding.
GL_UNSIGNED_BYTE = 0x1401
GL_FLOAT = 0x1406
GL_LUMINANCE = 0x1909
GL_RGB = 0x1907
GL_RGBA = 0x1908
GL_RGBA32F = 0x8814
GL_RGB32F = 0x8815
GL_LUMINANCE32F = 0x8818

_FLOAT_SIZE = 4

_PIXEL_SIZES = {
    PixelFormat.GREY8: 1,
    PixelFormat.RGB24: 3,
    PixelFormat.RGBA32: 4,
    PixelFormat.BGRA32: 4,
    PixelFormat.GREYF: _FLOAT_SIZE,
    PixelFormat.RGBF: 3 * _FLOAT_SIZE,
    PixelFormat.RGBAF: 4 * _FLOAT_SIZE,
    PixelFormat.RGB565: 2,
}

_GL_FORMATS = {
    PixelFormat.GREY8: GL_LUMINANCE,
    PixelFormat.GREYF: GL_LUMINANCE,
    PixelFormat.RGB24: GL_RGB,
    PixelFormat.RGBF: GL_RGB,
    PixelFormat.RGBA32: GL_RGBA,
    PixelFormat.RGBAF: GL_RGBA,
}

_GL_TYPES = {
    PixelFormat.GREY8: GL_UNSIGNED_BYTE,
    PixelFormat.RGB24: GL_UNSIGNED_BYTE,
    PixelFormat.RGBA32: GL_UNSIGNED_BYTE,
    PixelFormat.GREYF: GL_FLOAT,
    PixelFormat.RGBF: GL_FLOAT,
    PixelFormat.RGBAF: GL_FLOAT,
}

_GL_INTERNAL_FORMATS = {
    PixelFormat.GREY8: GL_LUMINANCE,
    PixelFormat.RGB24: GL_RGB,
    PixelFormat.RGBA32: GL_RGBA,
    PixelFormat.GREYF: GL_LUMINANCE32F,
    PixelFormat.RGBF: GL_RGB32F,
    PixelFormat.RGBAF: GL_RGBA32F,
}


def _as_format(fmt: int) -> PixelFormat:
    try:
        return PixelFormat(fmt)
    except ValueError:
        raise ImageError(f"unknown pixel format: {fmt!r}") from None


def pixel_size(fmt: int) -> int:
    """Return the number of bytes one pixel of ``fmt`` occupies."""
    return _PIXEL_SIZES[_as_format(fmt)]


def is_float(fmt: int) -> bool:
    """Return True if ``fmt`` stores floating point components."""
    return PixelFormat.GREYF <= _as_format(fmt) <= PixelFormat.RGBAF


def has_alpha(fmt: int) -> bool:
    """Return True if ``fmt`` is one of the RGBA formats."""
    return _as_format(fmt) in (PixelFormat.RGBA32, PixelFormat.RGBAF)


def is_greyscale(fmt: int) -> bool:
    """Return True if ``fmt`` holds a single luminance channel."""
    return _as_format(fmt) in (PixelFormat.GREY8, PixelFormat.GREYF)


def gl_format(fmt: int) -> int:
    """Return the OpenGL pixel data format for ``fmt``, or 0 if there is none."""
    return _GL_FORMATS.get(_as_format(fmt), 0)


def gl_type(fmt: int) -> int:
    """Return the OpenGL pixel data type for ``fmt``, or 0 if there is none."""
    return _GL_TYPES.get(_as_format(fmt), 0)


def gl_internal_format(fmt: int) -> int:
    """Return the OpenGL internal texture format for ``fmt``, or 0 if there is none."""
    return _GL_INTERNAL_FORMATS.get(_as_format(fmt), 0)
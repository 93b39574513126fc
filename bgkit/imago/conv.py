"""Conversion of pixel buffers between pixel formats.

Pixels are unpacked to ``(r, g, b, a)`` tuples of floats in the nominal range
0..1, then packed into the target layout. Multi-byte components (floats and
RGB565 words) are stored little-endian.
"""

from __future__ import annotations

import struct
from typing import Callable, Iterable, List, Sequence, Tuple

from .formats import ImageError, PixelFormat, pixel_size

Color = Tuple[float, float, float, float]

_F1 = struct.Struct("<f")
_F3 = struct.Struct("<3f")
_F4 = struct.Struct("<4f")
_U16 = struct.Struct("<H")


def _byte(value: float) -> int:
    return min(max(int(value * 255.0), 0), 255)


def _chunks(data: bytes, size: int) -> Iterable[bytes]:
    view = memoryview(data)
    return (view[start:start + size] for start in range(0, len(view), size))


# ---- unpacking ----

def _unpack_grey8(data: bytes) -> List[Color]:
    result = []
    for byte in data:
        v = byte / 255.0
        result.append((v, v, v, 1.0))
    return result


def _unpack_rgb24(data: bytes) -> List[Color]:
    return [(r / 255.0, g / 255.0, b / 255.0, 1.0) for r, g, b in _chunks(data, 3)]


def _unpack_rgba32(data: bytes) -> List[Color]:
    return [
        (r / 255.0, g / 255.0, b / 255.0, a / 255.0)
        for r, g, b, a in _chunks(data, 4)
    ]


def _unpack_bgra32(data: bytes) -> List[Color]:
    return [
        (r / 255.0, g / 255.0, b / 255.0, a / 255.0)
        for b, g, r, a in _chunks(data, 4)
    ]


def _unpack_greyf(data: bytes) -> List[Color]:
    return [(v, v, v, 1.0) for (v,) in _F1.iter_unpack(data)]


def _unpack_rgbf(data: bytes) -> List[Color]:
    return [(r, g, b, 1.0) for r, g, b in _F3.iter_unpack(data)]


def _unpack_rgbaf(data: bytes) -> List[Color]:
    return [tuple(px) for px in _F4.iter_unpack(data)]  # type: ignore[misc]


def _unpack_rgb565(data: bytes) -> List[Color]:
    result = []
    for (p,) in _U16.iter_unpack(data):
        b = (p & 0x1F) << 3
        if b & 8:
            b |= 7  # replicate the lowest bit into the missing ones
        g = (p >> 2) & 0xFC
        if g & 4:
            g |= 3
        r = (p >> 8) & 0xF8
        if r & 8:
            r |= 7
        result.append((r / 255.0, g / 255.0, b / 255.0, 1.0))
    return result


# ---- packing ----

def _pack_grey8(pixels: Sequence[Color]) -> bytes:
    return bytes(
        min(max(int(255.0 * (r + g + b) / 3.0), 0), 255) for r, g, b, _ in pixels
    )


def _pack_rgb24(pixels: Sequence[Color]) -> bytes:
    out = bytearray()
    for r, g, b, _ in pixels:
        out += bytes((_byte(r), _byte(g), _byte(b)))
    return bytes(out)


def _pack_rgba32(pixels: Sequence[Color]) -> bytes:
    out = bytearray()
    for r, g, b, a in pixels:
        out += bytes((_byte(r), _byte(g), _byte(b), _byte(a)))
    return bytes(out)


def _pack_bgra32(pixels: Sequence[Color]) -> bytes:
    out = bytearray()
    for r, g, b, a in pixels:
        out += bytes((_byte(b), _byte(g), _byte(r), _byte(a)))
    return bytes(out)


def _pack_greyf(pixels: Sequence[Color]) -> bytes:
    return b"".join(_F1.pack((r + g + b) / 3.0) for r, g, b, _ in pixels)


def _pack_rgbf(pixels: Sequence[Color]) -> bytes:
    return b"".join(_F3.pack(r, g, b) for r, g, b, _ in pixels)


def _pack_rgbaf(pixels: Sequence[Color]) -> bytes:
    return b"".join(_F4.pack(r, g, b, a) for r, g, b, a in pixels)


def _pack_rgb565(pixels: Sequence[Color]) -> bytes:
    out = bytearray()
    for r, g, b, _ in pixels:
        r5 = min(max(int(r * 31.0), 0), 31)
        g6 = min(max(int(g * 63.0), 0), 63)
        b5 = min(max(int(b * 31.0), 0), 31)
        out += _U16.pack((r5 << 11) | (g6 << 5) | b5)
    return bytes(out)


_UNPACKERS: dict[PixelFormat, Callable[[bytes], List[Color]]] = {
    PixelFormat.GREY8: _unpack_grey8,
    PixelFormat.RGB24: _unpack_rgb24,
    PixelFormat.RGBA32: _unpack_rgba32,
    PixelFormat.BGRA32: _unpack_bgra32,
    PixelFormat.GREYF: _unpack_greyf,
    PixelFormat.RGBF: _unpack_rgbf,
    PixelFormat.RGBAF: _unpack_rgbaf,
    PixelFormat.RGB565: _unpack_rgb565,
}

_PACKERS: dict[PixelFormat, Callable[[Sequence[Color]], bytes]] = {
    PixelFormat.GREY8: _pack_grey8,
    PixelFormat.RGB24: _pack_rgb24,
    PixelFormat.RGBA32: _pack_rgba32,
    PixelFormat.BGRA32: _pack_bgra32,
    PixelFormat.GREYF: _pack_greyf,
    PixelFormat.RGBF: _pack_rgbf,
    PixelFormat.RGBAF: _pack_rgbaf,
    PixelFormat.RGB565: _pack_rgb565,
}


def unpack(fmt: int, data: bytes) -> List[Color]:
    """Decode a pixel buffer of format ``fmt`` into ``(r, g, b, a)`` tuples."""
    size = pixel_size(fmt)
    data = bytes(data)
    if len(data) % size:
        raise ImageError(
            f"buffer of {len(data)} bytes is not a whole number of "
            f"{PixelFormat(fmt).name} pixels"
        )
    return _UNPACKERS[PixelFormat(fmt)](data)


def pack(fmt: int, pixels: Iterable[Color]) -> bytes:
    """Encode ``(r, g, b, a)`` tuples into a pixel buffer of format ``fmt``."""
    pixel_size(fmt)  # validates the format
    return _PACKERS[PixelFormat(fmt)](list(pixels))


def convert_pixels(data: bytes, src_fmt: int, dst_fmt: int) -> bytes:
    """Convert a pixel buffer from ``src_fmt`` to ``dst_fmt``."""
    if PixelFormat(pixel_size(src_fmt) and src_fmt) == PixelFormat(
        pixel_size(dst_fmt) and dst_fmt
    ):
        return bytes(data)
    return pack(dst_fmt, unpack(src_fmt, data))
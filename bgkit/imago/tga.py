"""Truevision Targa (TGA) files: true colour images."""

from __future__ import annotations

import struct
from itertools import islice
from typing import BinaryIO, Iterator

from .conv import convert_pixels
from .formats import ImageError, PixelFormat
from .pixmap import Pixmap

SUFFIX = ".tga:.targa"

SIGNATURE = b"TRUEVISION-XFILE."

_HEADER = struct.Struct("<BBBHHBHHHHBB")
_FOOTER = struct.Struct("<II18s")

_TYPE_RGBA = 2
_TYPE_RLE_RGBA = 10
_DESC_ALPHA_BITS = 0x0F
_DESC_TOP_DOWN = 0x20


def check(stream: BinaryIO) -> bool:
    """Tell whether ``stream`` ends with the TGA 2.0 footer signature."""
    pos = stream.tell()
    try:
        try:
            stream.seek(-18, 2)
        except (OSError, ValueError):
            return False
        return stream.read(len(SIGNATURE)) == SIGNATURE
    finally:
        stream.seek(pos)


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) < size:
        raise ImageError("truncated TGA file")
    return data


def _rle_pixels(stream: BinaryIO, pixel_bytes: int) -> Iterator[bytes]:
    """Yield pixels from run-length encoded packets, packets spanning rows."""
    while True:
        packet = _read_exact(stream, 1)[0]
        count = (packet & 0x7F) + 1
        if packet & 0x80:
            pixel = _read_exact(stream, pixel_bytes)
            for _ in range(count):
                yield pixel
        else:
            for _ in range(count):
                yield _read_exact(stream, pixel_bytes)


def _swap_red_blue(data: bytes, pixel_bytes: int) -> bytes:
    out = bytearray(data)
    out[0::pixel_bytes] = data[2::pixel_bytes]
    out[2::pixel_bytes] = data[0::pixel_bytes]
    return bytes(out)


def read(stream: BinaryIO) -> Pixmap:
    """Read a true colour (raw or RLE) TGA image from ``stream``."""
    (idlen, cmap_type, img_type, _cmap_first, cmap_len, cmap_entry_sz,
     _x, _y, width, height, _bpp, desc) = _HEADER.unpack(
        _read_exact(stream, _HEADER.size)
    )

    if img_type not in (_TYPE_RGBA, _TYPE_RLE_RGBA):
        raise ImageError("only true color tga images are supported")

    stream.seek(idlen, 1)
    if cmap_type == 1:
        stream.seek(cmap_len * cmap_entry_sz // 8, 1)

    alpha = bool(desc & _DESC_ALPHA_BITS)
    pixel_bytes = 4 if alpha else 3
    fmt = PixelFormat.RGBA32 if alpha else PixelFormat.RGB24
    count = width * height

    if img_type == _TYPE_RLE_RGBA:
        data = b"".join(islice(_rle_pixels(stream, pixel_bytes), count))
    else:
        data = _read_exact(stream, count * pixel_bytes)
    data = _swap_red_blue(data, pixel_bytes)

    if count == 0:
        return Pixmap(width, height, fmt, b"")

    row_size = width * pixel_bytes
    rows = [data[start:start + row_size] for start in range(0, len(data), row_size)]
    if not desc & _DESC_TOP_DOWN:
        rows.reverse()
    return Pixmap(width, height, fmt, b"".join(rows))


def write(pixmap: Pixmap, stream: BinaryIO) -> None:
    """Write ``pixmap`` as an uncompressed, top-down true colour TGA file."""
    if not (0 <= pixmap.width <= 0xFFFF and 0 <= pixmap.height <= 0xFFFF):
        raise ImageError("image too large for a TGA file")

    alpha = pixmap.has_alpha()
    fmt = PixelFormat.RGBA32 if alpha else PixelFormat.RGB24
    pixel_bytes = 4 if alpha else 3
    data = pixmap.pixels
    if pixmap.fmt != fmt:
        data = convert_pixels(data, pixmap.fmt, fmt)
    data = bytes(data)

    desc = _DESC_TOP_DOWN | (8 if alpha else 0)
    stream.write(_HEADER.pack(
        0, 0, _TYPE_RGBA, 0, 0, 0, 0, 0,
        pixmap.width, pixmap.height, pixel_bytes * 8, desc,
    ))
    stream.write(_swap_red_blue(data, pixel_bytes))
    stream.write(_FOOTER.pack(0, 0, SIGNATURE + b"\0"))
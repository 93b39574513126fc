"""Portable pixmap and greymap files (P6, P5 and text P3)."""

from __future__ import annotations

import re
import struct
from typing import BinaryIO, Optional

from .formats import ImageError, PixelFormat
from .pixmap import Pixmap

SUFFIX = ".ppm:.pgm:.pnm"

_MAGICS = (b"P6", b"P3", b"P5")
_LINE_LIMIT = 255
_TWO_INTS = re.compile(rb"\s*([+-]?\d+)\s*([+-]?\d+)")
_ONE_INT = re.compile(rb"\s*([+-]?\d+)")
_HEADER = "P{}\n#written by libimago2\n{} {}\n{}\n"


def check(stream: BinaryIO) -> bool:
    """Tell whether ``stream`` starts with a supported PNM signature."""
    pos = stream.tell()
    try:
        magic = stream.read(2)
    finally:
        stream.seek(pos)
    return magic in _MAGICS


def _readline(stream: BinaryIO) -> bytes:
    line = bytearray()
    while len(line) < _LINE_LIMIT:
        c = stream.read(1)
        if not c:
            break
        line += c
        if c == b"\n":
            break
    return bytes(line)


def _atoi(token: bytes) -> int:
    match = _ONE_INT.match(token)
    return int(match.group(1)) if match else 0


def _cdiv(num: int, den: int) -> int:
    quotient = abs(num) // den
    return -quotient if num < 0 else quotient


def read(stream: BinaryIO) -> Pixmap:
    """Read a PNM image from ``stream``."""
    line = _readline(stream)
    magic = line[:2]
    if magic not in _MAGICS:
        raise ImageError("not a PNM file")
    greyscale = magic == b"P5"
    text = magic == b"P3"

    width: Optional[int] = None
    height: Optional[int] = None
    maxval: Optional[int] = None
    got = 1
    while got < 3:
        line = _readline(stream)
        if not line:
            break
        if line.startswith(b"#"):
            continue
        if got == 1:
            match = _TWO_INTS.match(line)
            if not match:
                raise ImageError("malformed PNM size line")
            width, height = int(match.group(1)), int(match.group(2))
        else:
            match = _ONE_INT.match(line)
            if not match:
                raise ImageError("malformed PNM maxval line")
            maxval = int(match.group(1))
        got += 1

    if width is None or height is None or maxval is None:
        raise ImageError("truncated PNM header")
    if width < 1 or height < 1 or maxval <= 0 or maxval > 65535:
        raise ImageError("invalid PNM header values")

    wide = maxval >= 256
    numval = width * height * (1 if greyscale else 3)
    if wide:
        fmt = PixelFormat.GREYF if greyscale else PixelFormat.RGBF
    else:
        fmt = PixelFormat.GREY8 if greyscale else PixelFormat.RGB24

    if text:
        values = [_atoi(tok) for tok in stream.read().split()[:numval]]
        values += [0] * (numval - len(values))
        if wide:
            pixels = struct.pack(f"<{numval}f", *(v / maxval for v in values))
        else:
            pixels = bytes(_cdiv(v * 255, maxval) & 0xFF for v in values)
        return Pixmap(width, height, fmt, pixels)

    size = numval * (2 if wide else 1)
    data = stream.read(size)
    if len(data) < size:
        raise ImageError("truncated PNM pixel data")
    if maxval == 255:
        pixels = data
    elif not wide:
        pixels = bytes((c * 255 // maxval) & 0xFF for c in data)
    else:
        samples = struct.unpack(f">{numval}H", data)
        pixels = struct.pack(f"<{numval}f", *(v / maxval for v in samples))
    return Pixmap(width, height, fmt, pixels)


def write(pixmap: Pixmap, stream: BinaryIO) -> None:
    """Write ``pixmap`` as a binary PPM or PGM file."""
    if pixmap.pixels is None:
        raise ImageError("image has no pixel buffer")
    greyscale = pixmap.is_greyscale()
    nval = 1 if greyscale else 3
    magic = 5 if greyscale else 6
    img = pixmap

    if img.fmt in (PixelFormat.RGBA32, PixelFormat.RGB24, PixelFormat.GREY8):
        if img.fmt == PixelFormat.RGBA32:
            img = img.copy()
            img.convert(PixelFormat.RGB24)
        assert img.pixels is not None
        stream.write(_HEADER.format(magic, img.width, img.height, 255).encode("ascii"))
        stream.write(bytes(img.pixels[:img.width * img.height * nval]))
        return

    if img.fmt in (PixelFormat.RGBAF, PixelFormat.RGBF, PixelFormat.GREYF):
        if img.fmt == PixelFormat.RGBAF:
            img = img.copy()
            img.convert(PixelFormat.RGBF)
        assert img.pixels is not None
        stream.write(
            _HEADER.format(magic, img.width, img.height, 65535).encode("ascii")
        )
        count = img.width * img.height * nval
        values = struct.unpack(f"<{count}f", bytes(img.pixels[:count * 4]))
        maxfval = max((0.0, *values))
        if maxfval > 0.0:
            samples = [min(max(int(v / maxfval * 65535.0), 0), 65535) for v in values]
        else:
            samples = [0] * count
        stream.write(struct.pack(f">{count}H", *samples))
        return

    raise ImageError(f"cannot write {img.fmt.name} images as PNM")
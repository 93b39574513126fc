"""Radiance RGBE (.hdr/.pic) files with run-length encoded scanlines."""

from __future__ import annotations

import math
import re
import struct
from dataclasses import dataclass
from itertools import chain
from typing import BinaryIO, Iterable, List, Optional, Sequence, Tuple

from .formats import ImageError, PixelFormat
from .pixmap import Pixmap

SUFFIX = ".rgbe:.pic:.hdr"

FORMAT_LINE = b"FORMAT=32-bit_rle_rgbe\n"

_LINE_LIMIT = 127
_PROGRAMTYPE_LIMIT = 15
_MIN_RUN_LENGTH = 4
_MAX_RLE_WIDTH = 0x7FFF
_MIN_RLE_WIDTH = 8

_FLOAT = rb"([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
_GAMMA = re.compile(rb"GAMMA=\s*" + _FLOAT)
_EXPOSURE = re.compile(rb"EXPOSURE=\s*" + _FLOAT)
_SIZE = re.compile(rb"-Y\s*([+-]?\d+)\s*\+X\s*([+-]?\d+)")

_RGB = struct.Struct("<3f")

Rgb = Tuple[float, float, float]


@dataclass
class RgbeHeader:
    """Optional header fields; ``None`` means the field is absent."""

    programtype: Optional[str] = None
    gamma: Optional[float] = None
    exposure: Optional[float] = None


def float_to_rgbe(red: float, green: float, blue: float) -> bytes:
    """Encode one float colour as four RGBE bytes."""
    v = max(red, green, blue)
    if v < 1e-32:
        return bytes(4)
    mantissa, exponent = math.frexp(v)
    scale = mantissa * 256.0 / v
    return bytes(
        (
            int(red * scale) & 0xFF,
            int(green * scale) & 0xFF,
            int(blue * scale) & 0xFF,
            (exponent + 128) & 0xFF,
        )
    )


def rgbe_to_float(rgbe: Sequence[int]) -> Rgb:
    """Decode four RGBE bytes into a float colour; 0..1 maps back into 0..1."""
    r, g, b, e = rgbe[0], rgbe[1], rgbe[2], rgbe[3]
    if not e:
        return 0.0, 0.0, 0.0
    f = math.ldexp(1.0, e - (128 + 8))
    return r * f, g * f, b * f


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


def _next_line(stream: BinaryIO) -> bytes:
    line = _readline(stream)
    if not line:
        raise ImageError("truncated RGBE header")
    return line


def read_header(stream: BinaryIO) -> Tuple[int, int, RgbeHeader]:
    """Read an RGBE header; return ``(width, height, header)``."""
    line = _next_line(stream)
    if not line.startswith(b"#?"):
        raise ImageError("not an RGBE file")

    programtype = bytearray()
    for byte in line[2:2 + _PROGRAMTYPE_LIMIT]:
        if byte == 0 or chr(byte).isspace():
            break
        programtype.append(byte)
    header = RgbeHeader(programtype=programtype.decode("latin-1"))

    format_found = False
    line = _next_line(stream)
    while line and line != b"\n":
        if line == FORMAT_LINE:
            format_found = True
        elif (match := _GAMMA.match(line)) is not None:
            header.gamma = float(match.group(1))
        elif (match := _EXPOSURE.match(line)) is not None:
            header.exposure = float(match.group(1))
        line = _next_line(stream)

    if not format_found:
        raise ImageError("RGBE header lacks the 32-bit_rle_rgbe format line")

    match = _SIZE.match(_next_line(stream))
    if match is None:
        raise ImageError("malformed RGBE size line")
    height, width = int(match.group(1)), int(match.group(2))
    return width, height, header


def write_header(
    stream: BinaryIO, width: int, height: int, header: Optional[RgbeHeader] = None
) -> None:
    """Write a minimal RGBE header for an image of ``width`` by ``height``."""
    programtype = "RGBE"
    if header is not None and header.programtype is not None:
        programtype = header.programtype
    lines = [f"#?{programtype}\n"]
    if header is not None and header.gamma is not None:
        lines.append(f"GAMMA={header.gamma:g}\n")
    if header is not None and header.exposure is not None:
        lines.append(f"EXPOSURE={header.exposure:g}\n")
    lines.append("FORMAT=32-bit_rle_rgbe\n\n")
    lines.append(f"-Y {height} +X {width}\n")
    stream.write("".join(lines).encode("latin-1"))


def check(stream: BinaryIO) -> bool:
    """Tell whether ``stream`` starts with a valid RGBE header."""
    pos = stream.tell()
    try:
        read_header(stream)
    except ImageError:
        return False
    finally:
        stream.seek(pos)
    return True


# ---- pixel data ----

def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) < size:
        raise ImageError("RGBE read error: truncated pixel data")
    return data


def _read_flat(stream: BinaryIO, count: int) -> List[Rgb]:
    return [rgbe_to_float(_read_exact(stream, 4)) for _ in range(count)]


def _decode_channel(stream: BinaryIO, width: int) -> bytes:
    out = bytearray()
    while len(out) < width:
        ctl, value = _read_exact(stream, 2)
        remaining = width - len(out)
        if ctl > 128:
            count = ctl - 128
            if count > remaining:
                raise ImageError("RGBE bad file format: bad scanline data")
            out += bytes((value,)) * count
        else:
            count = ctl
            if count == 0 or count > remaining:
                raise ImageError("RGBE bad file format: bad scanline data")
            out.append(value)
            if count > 1:
                out += _read_exact(stream, count - 1)
    return bytes(out)


def _read_pixels_rle(stream: BinaryIO, width: int, height: int) -> List[Rgb]:
    if width < _MIN_RLE_WIDTH or width > _MAX_RLE_WIDTH:
        return _read_flat(stream, width * height)

    pixels: List[Rgb] = []
    for row in range(height):
        rgbe = _read_exact(stream, 4)
        if rgbe[0] != 2 or rgbe[1] != 2 or rgbe[2] & 0x80:
            # not run length encoded: the rest of the file is flat
            pixels.append(rgbe_to_float(rgbe))
            pixels += _read_flat(stream, width * (height - row) - 1)
            return pixels
        if (rgbe[2] << 8 | rgbe[3]) != width:
            raise ImageError("RGBE bad file format: wrong scanline width")
        channels = [_decode_channel(stream, width) for _ in range(4)]
        pixels += (rgbe_to_float(p) for p in zip(*channels))
    return pixels


def _encode_rle(data: bytes) -> bytes:
    """Run-length encode one channel of a scanline."""
    out = bytearray()
    n = len(data)
    cur = 0
    while cur < n:
        beg = cur
        run = old_run = 0
        # find the next run of at least _MIN_RUN_LENGTH, if there is one
        while run < _MIN_RUN_LENGTH and beg < n:
            beg += run
            old_run = run
            run = 1
            while beg + run < n and run < 127 and data[beg] == data[beg + run]:
                run += 1
        # a short run just before the long one is written as a run too
        if old_run > 1 and old_run == beg - cur:
            out += bytes((128 + old_run, data[cur]))
            cur = beg
        while cur < beg:
            count = min(beg - cur, 128)
            out.append(count)
            out += data[cur:cur + count]
            cur += count
        if run >= _MIN_RUN_LENGTH:
            out += bytes((128 + run, data[beg]))
            cur += run
    return bytes(out)


def _encode_pixels_rle(pixels: Sequence[Rgb], width: int, height: int) -> bytes:
    if width < _MIN_RLE_WIDTH or width > _MAX_RLE_WIDTH:
        return b"".join(float_to_rgbe(*p) for p in pixels)

    out = bytearray()
    marker = bytes((2, 2, width >> 8, width & 0xFF))
    for start in range(0, width * height, width):
        encoded = [float_to_rgbe(*p) for p in pixels[start:start + width]]
        out += marker
        for channel in zip(*encoded):
            out += _encode_rle(bytes(channel))
    return bytes(out)


def _pack(pixels: Iterable[Rgb], count: int) -> bytes:
    return struct.pack(f"<{3 * count}f", *chain.from_iterable(pixels))


def read(stream: BinaryIO) -> Pixmap:
    """Read an RGBE image from ``stream`` as an RGBF pixmap."""
    width, height, _ = read_header(stream)
    if width < 0 or height < 0:
        raise ImageError(f"invalid RGBE image size: {width}x{height}")
    pixels = _read_pixels_rle(stream, width, height)
    return Pixmap(width, height, PixelFormat.RGBF, _pack(pixels, width * height))


def write(pixmap: Pixmap, stream: BinaryIO) -> None:
    """Write ``pixmap`` as a run-length encoded RGBE file."""
    if pixmap.pixels is None:
        raise ImageError("image has no pixel buffer")
    img = pixmap.copy()
    img.convert(PixelFormat.RGBF)
    assert img.pixels is not None
    pixels = list(_RGB.iter_unpack(bytes(img.pixels)))
    write_header(stream, img.width, img.height)
    stream.write(_encode_pixels_rle(pixels, img.width, img.height))
"""PNG files: 8 and 16 bit greyscale, RGB and RGBA images."""

from __future__ import annotations

import io
import struct
from array import array
from typing import BinaryIO

from PIL import Image, PngImagePlugin

from .formats import ImageError, PixelFormat
from .pixmap import Pixmap

SUFFIX = ".png"

SIGNATURE = b"\x89PNG\r\n\x1a\n"

_COLOR_GRAY = 0
_COLOR_RGB = 2
_COLOR_RGBA = 6

_FORMATS = {
    (_COLOR_RGB, 8): PixelFormat.RGB24,
    (_COLOR_RGB, 16): PixelFormat.RGBF,
    (_COLOR_RGBA, 8): PixelFormat.RGBA32,
    (_COLOR_RGBA, 16): PixelFormat.RGBAF,
    (_COLOR_GRAY, 8): PixelFormat.GREY8,
    (_COLOR_GRAY, 16): PixelFormat.GREYF,
}

_MODES = {
    PixelFormat.GREY8: "L",
    PixelFormat.RGB24: "RGB",
    PixelFormat.RGBA32: "RGBA",
    PixelFormat.GREYF: "I",
    PixelFormat.RGBF: "RGB",
    PixelFormat.RGBAF: "RGBA",
}


def check(stream: BinaryIO) -> bool:
    """Tell whether ``stream`` starts with the PNG signature."""
    pos = stream.tell()
    try:
        return stream.read(len(SIGNATURE)) == SIGNATURE
    finally:
        stream.seek(pos)


def _header(data: bytes) -> PixelFormat:
    if data[:8] != SIGNATURE:
        raise ImageError("not a PNG file")
    if len(data) < 26 or data[12:16] != b"IHDR":
        raise ImageError("malformed PNG file: missing IHDR")
    bits, colour = struct.unpack(">BB", data[24:26])
    fmt = _FORMATS.get((colour, bits))
    if fmt is None:
        raise ImageError(
            f"unsupported PNG: color type {colour} with {bits} bits per channel"
        )
    return fmt


def _float_samples(im: Image.Image, fmt: PixelFormat):
    """Return (samples, full scale) for a 16 bit image."""
    if fmt == PixelFormat.GREYF:
        count = im.width * im.height
        if im.mode == "I;16":
            return struct.unpack(f"<{count}H", im.tobytes()), 65535.0
        if im.mode == "I;16B":
            return struct.unpack(f">{count}H", im.tobytes()), 65535.0
        return array("i", im.convert("I").tobytes()), 65535.0
    # colour images are decoded at 8 bits per channel
    return im.convert(_MODES[fmt]).tobytes(), 255.0


def read(stream: BinaryIO) -> Pixmap:
    """Read a PNG image from ``stream``; 16 bit images become float pixmaps."""
    data = stream.read()
    fmt = _header(data)
    try:
        with Image.open(io.BytesIO(data)) as im:
            im.load()
            width, height = im.size
            if fmt in (PixelFormat.GREYF, PixelFormat.RGBF, PixelFormat.RGBAF):
                samples, scale = _float_samples(im, fmt)
                pixels = struct.pack(f"<{len(samples)}f", *(s / scale for s in samples))
            else:
                mode = _MODES[fmt]
                pixels = (im if im.mode == mode else im.convert(mode)).tobytes()
    except (OSError, ValueError, SyntaxError, struct.error) as exc:
        raise ImageError(f"failed to decode PNG: {exc}") from exc
    return Pixmap(width, height, fmt, pixels)


def write(pixmap: Pixmap, stream: BinaryIO) -> None:
    """Write ``pixmap`` as an 8 bit PNG; float images are converted first."""
    if pixmap.pixels is None:
        raise ImageError("image has no pixel buffer")
    img = pixmap
    if img.is_float():
        img = img.copy()
        img.to_integer()
    if img.fmt not in (PixelFormat.GREY8, PixelFormat.RGB24, PixelFormat.RGBA32):
        raise ImageError(f"cannot write {img.fmt.name} images as PNG")
    assert img.pixels is not None

    info = PngImagePlugin.PngInfo()
    info.add_text("Software", "libimago2")
    try:
        im = Image.frombytes(_MODES[img.fmt], (img.width, img.height), bytes(img.pixels))
        im.save(stream, format="PNG", pnginfo=info)
    except (OSError, ValueError, SystemError) as exc:
        raise ImageError(f"failed to encode PNG: {exc}") from exc
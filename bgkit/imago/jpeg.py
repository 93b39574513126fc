"""JPEG files, decoded to and encoded from RGB24 pixmaps."""

from __future__ import annotations

import io
from typing import BinaryIO

from PIL import Image

from .formats import ImageError, PixelFormat
from .pixmap import Pixmap

SUFFIX = ".jpg:.jpeg"

QUALITY = 95

_SIGNATURES = (b"\xff\xd8\xff\xe0", b"\xff\xd8\xff\xe1", b"\xff\xd8\xff\xdb")


def check(stream: BinaryIO) -> bool:
    """Tell whether ``stream`` starts like a JPEG/JFIF/EXIF file."""
    pos = stream.tell()
    try:
        sig = stream.read(10)
    finally:
        stream.seek(pos)
    if len(sig) < 10:
        return False
    return sig[:4] in _SIGNATURES or sig[6:10] == b"JFIF"


def read(stream: BinaryIO) -> Pixmap:
    """Read a JPEG image from ``stream`` as an RGB24 pixmap."""
    data = stream.read()
    try:
        with Image.open(io.BytesIO(data), formats=["JPEG"]) as im:
            im.load()
            rgb = im if im.mode == "RGB" else im.convert("RGB")
            width, height = rgb.size
            pixels = rgb.tobytes()
    except (OSError, ValueError, SyntaxError) as exc:
        raise ImageError(f"failed to decode JPEG: {exc}") from exc
    return Pixmap(width, height, PixelFormat.RGB24, pixels)


def write(pixmap: Pixmap, stream: BinaryIO) -> None:
    """Write ``pixmap`` as a JPEG of quality 95, converting to RGB24 first."""
    if pixmap.pixels is None:
        raise ImageError("image has no pixel buffer")
    img = pixmap
    if img.fmt != PixelFormat.RGB24:
        img = img.copy()
        img.convert(PixelFormat.RGB24)
    assert img.pixels is not None
    if img.width < 1 or img.height < 1:
        raise ImageError("cannot write an empty image as JPEG")
    try:
        im = Image.frombytes("RGB", (img.width, img.height), bytes(img.pixels))
        im.save(stream, format="JPEG", quality=QUALITY)
    except (OSError, ValueError, SystemError) as exc:
        raise ImageError(f"failed to encode JPEG: {exc}") from exc
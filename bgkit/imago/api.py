"""Loading and saving images through the registered file types."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import BinaryIO, Tuple, Union

from . import jpeg, lbm, png, ppm, rgbe, tga
from .formats import ImageError, PixelFormat
from .pixmap import Pixmap
from .registry import FileType, Registry

PathLike = Union[str, "os.PathLike[str]"]

# Registration order; the last registered type is tried first.
_MODULES = (
    ("jpeg", jpeg),
    ("lbm", lbm),
    ("png", png),
    ("ppm", ppm),
    ("rgbe", rgbe),
    ("tga", tga),
)


@lru_cache(maxsize=None)
def default_registry() -> Registry:
    """Return the shared registry holding every supported file type."""
    registry = Registry()
    for name, module in _MODULES:
        registry.register(
            FileType(module.SUFFIX, module.check, module.read, module.write, name)
        )
    return registry


def read(stream: BinaryIO) -> Pixmap:
    """Read an image from a seekable binary stream, detecting its type."""
    filetype = default_registry().find_format(stream)
    if filetype is None:
        raise ImageError("unrecognised image file format")
    return filetype.read(stream)


def write(pixmap: Pixmap, stream: BinaryIO) -> None:
    """Write ``pixmap``; its type is chosen by the suffix of its name.

    Without a name, or with an unknown suffix, the first registered type is
    used.
    """
    registry = default_registry()
    filetype = registry.guess_format(pixmap.name) if pixmap.name else None
    if filetype is None:
        filetype = registry.get(0)
    filetype.write(pixmap, stream)


def load(filename: PathLike) -> Pixmap:
    """Load the image file ``filename``."""
    with open(filename, "rb") as f:
        return read(f)


def save(pixmap: Pixmap, filename: PathLike) -> None:
    """Save ``pixmap`` to ``filename``, naming it after the file."""
    pixmap.name = os.fspath(filename)
    with open(filename, "wb") as f:
        write(pixmap, f)


def load_pixels(
    filename: PathLike, fmt: int = PixelFormat.RGBA32
) -> Tuple[bytes, int, int]:
    """Load an image and return ``(pixels, width, height)`` in format ``fmt``."""
    pixmap = load(filename)
    if pixmap.fmt != fmt:
        pixmap.convert(fmt)
    assert pixmap.pixels is not None
    return bytes(pixmap.pixels), pixmap.width, pixmap.height


def save_pixels(
    filename: PathLike,
    pixels: bytes,
    width: int,
    height: int,
    fmt: int = PixelFormat.RGBA32,
) -> None:
    """Save a raw pixel buffer of format ``fmt`` as an image file."""
    save(Pixmap(width, height, fmt, pixels), filename)
"""In-memory images: a pixel buffer with its size and pixel format."""

from __future__ import annotations

import struct
from typing import Optional, Tuple

from . import formats
from .conv import convert_pixels
from .formats import ImageError, PixelFormat

_FLOAT4 = struct.Struct("<4f")

_TO_FLOAT = {
    PixelFormat.GREY8: PixelFormat.GREYF,
    PixelFormat.RGB24: PixelFormat.RGBF,
    PixelFormat.RGBA32: PixelFormat.RGBAF,
}

_TO_INTEGER = {
    PixelFormat.GREYF: PixelFormat.GREY8,
    PixelFormat.RGBF: PixelFormat.RGB24,
    PixelFormat.RGBAF: PixelFormat.RGBA32,
}


def _validated(fmt: int) -> PixelFormat:
    formats.pixel_size(fmt)  # raises ImageError for unknown formats
    return PixelFormat(fmt)


class Pixmap:
    """An image held in memory.

    ``pixels`` is a ``bytearray`` of ``width * height * pixel_size`` bytes, or
    ``None`` when no buffer has been allocated yet. Float components are
    stored as little-endian 32-bit floats.
    """

    def __init__(
        self,
        width: int = 0,
        height: int = 0,
        fmt: int = PixelFormat.RGBA32,
        pixels: Optional[bytes] = None,
        name: Optional[str] = None,
    ) -> None:
        self.width = 0
        self.height = 0
        self.fmt = _validated(fmt)
        self.pixels: Optional[bytearray] = None
        self.name = name
        if pixels is not None or width or height:
            self.set_pixels(width, height, fmt, pixels)

    def __repr__(self) -> str:
        return (
            f"Pixmap(width={self.width}, height={self.height}, "
            f"fmt={self.fmt.name}, name={self.name!r})"
        )

    @property
    def pixel_size(self) -> int:
        """Number of bytes one pixel occupies."""
        return formats.pixel_size(self.fmt)

    def set_pixels(
        self,
        width: int,
        height: int,
        fmt: int = PixelFormat.RGBA32,
        pixels: Optional[bytes] = None,
    ) -> None:
        """Replace the pixel buffer; a missing ``pixels`` gives a zeroed one."""
        fmt = _validated(fmt)
        if width < 0 or height < 0:
            raise ImageError(f"invalid image size: {width}x{height}")
        size = width * height * formats.pixel_size(fmt)
        if pixels is None:
            buffer = bytearray(size)
        else:
            buffer = bytearray(pixels)
            if len(buffer) != size:
                raise ImageError(
                    f"expected {size} bytes of pixel data, got {len(buffer)}"
                )
        self.pixels = buffer
        self.width = width
        self.height = height
        self.fmt = fmt

    def copy(self) -> "Pixmap":
        """Return an independent copy of this image."""
        result = Pixmap(fmt=self.fmt, name=self.name)
        if self.pixels is not None:
            result.set_pixels(self.width, self.height, self.fmt, self.pixels)
        return result

    def convert(self, fmt: int) -> None:
        """Convert the pixel buffer to ``fmt`` in place."""
        fmt = _validated(fmt)
        if fmt == self.fmt:
            return
        if self.pixels is not None:
            self.pixels = bytearray(convert_pixels(bytes(self.pixels), self.fmt, fmt))
        self.fmt = fmt

    def set_format(self, fmt: int) -> None:
        """Set the pixel format, converting existing pixels if there are any."""
        if self.pixels is not None:
            self.convert(fmt)
        else:
            self.fmt = _validated(fmt)

    def to_float(self) -> None:
        """Convert an integer format to the matching floating point one."""
        target = _TO_FLOAT.get(self.fmt)
        if target is not None:
            self.convert(target)

    def to_integer(self) -> None:
        """Convert a floating point format to the matching integer one."""
        target = _TO_INTEGER.get(self.fmt)
        if target is not None:
            self.convert(target)

    def is_float(self) -> bool:
        return formats.is_float(self.fmt)

    def has_alpha(self) -> bool:
        return formats.has_alpha(self.fmt)

    def is_greyscale(self) -> bool:
        return formats.is_greyscale(self.fmt)

    # ---- single pixel access ----

    def _offset(self, x: int, y: int) -> int:
        if self.pixels is None:
            raise ImageError("image has no pixel buffer")
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} image")
        return (y * self.width + x) * self.pixel_size

    def set_pixel(self, x: int, y: int, pixel: bytes) -> None:
        """Store the raw bytes of one pixel."""
        size = self.pixel_size
        if len(pixel) != size:
            raise ImageError(f"pixel must be {size} bytes, got {len(pixel)}")
        start = self._offset(x, y)
        assert self.pixels is not None
        self.pixels[start:start + size] = pixel

    def get_pixel(self, x: int, y: int) -> bytes:
        """Return the raw bytes of one pixel."""
        start = self._offset(x, y)
        assert self.pixels is not None
        return bytes(self.pixels[start:start + self.pixel_size])

    def set_pixel1i(self, x: int, y: int, value: int) -> None:
        self.set_pixel4i(x, y, value, value, value, value)

    def set_pixel1f(self, x: int, y: int, value: float) -> None:
        self.set_pixel4f(x, y, value, value, value, value)

    def set_pixel4i(self, x: int, y: int, r: int, g: int, b: int, a: int) -> None:
        """Set a pixel from 0..255 components; extra components are dropped."""
        if self.is_float():
            self.set_pixel4f(x, y, r / 255.0, g / 255.0, b / 255.0, a / 255.0)
            return
        raw = bytes(v & 0xFF for v in (r, g, b, a))
        self.set_pixel(x, y, raw[:self.pixel_size])

    def set_pixel4f(self, x: int, y: int, r: float, g: float, b: float, a: float) -> None:
        """Set a pixel from 0..1 components; extra components are dropped."""
        if self.is_float():
            self.set_pixel(x, y, _FLOAT4.pack(r, g, b, a)[:self.pixel_size])
            return
        self.set_pixel4i(
            x, y, int(r * 255.0), int(g * 255.0), int(b * 255.0), int(a * 255.0)
        )

    def get_pixel1i(self, x: int, y: int) -> int:
        return self.get_pixel4i(x, y)[0]

    def get_pixel1f(self, x: int, y: int) -> float:
        return self.get_pixel4f(x, y)[0]

    def get_pixel4i(self, x: int, y: int) -> Tuple[int, int, int, int]:
        """Return a pixel as 0..255 components; missing components are 0."""
        raw = self.get_pixel(x, y)
        if self.is_float():
            values = _FLOAT4.unpack(raw.ljust(_FLOAT4.size, b"\0"))
            r, g, b, a = (int(v * 255.0) for v in values)
            return r, g, b, a
        r, g, b, a = raw.ljust(4, b"\0")[:4]
        return r, g, b, a

    def get_pixel4f(self, x: int, y: int) -> Tuple[float, float, float, float]:
        """Return a pixel as 0..1 components; missing components are 0."""
        raw = self.get_pixel(x, y)
        if self.is_float():
            r, g, b, a = _FLOAT4.unpack(raw.ljust(_FLOAT4.size, b"\0"))
            return r, g, b, a
        r, g, b, a = (v / 255.0 for v in raw.ljust(4, b"\0")[:4])
        return r, g, b, a
"""Interleaved bitmap (IFF ILBM) and packed bitmap (PBM) files."""

from __future__ import annotations

import struct
from typing import BinaryIO, NamedTuple, Optional, Tuple

from PIL import Image

from .conv import convert_pixels
from .formats import ImageError, PixelFormat
from .pixmap import Pixmap

SUFFIX = ".lbm:.ilbm:.iff"

IFF_FORM = b"FORM"
IFF_CAT = b"CAT "
IFF_LIST = b"LIST"
IFF_ILBM = b"ILBM"
IFF_PBM = b"PBM "
IFF_BMHD = b"BMHD"
IFF_CMAP = b"CMAP"
IFF_BODY = b"BODY"
IFF_CRNG = b"CRNG"

_CONTAINERS = (IFF_FORM, IFF_CAT, IFF_LIST)
_IMAGE_TYPES = (IFF_ILBM, IFF_PBM)

MASK_NONE = 0
MASK_PLANE = 1
MASK_COLORKEY = 2
MASK_LASSO = 3

_CHUNK_HEADER = struct.Struct(">4sI")
_BMHD = struct.Struct(">HHhhBBBBHBBhh")
_CRNG_SIZE = 8
_PALETTE_SIZE = 3 * 256


class BitmapHeader(NamedTuple):
    width: int
    height: int
    xoffs: int
    yoffs: int
    nplanes: int
    masking: int
    compression: int
    padding: int
    colorkey: int
    aspect_num: int
    aspect_denom: int
    pgwidth: int
    pgheight: int


def _read_chunk_header(stream: BinaryIO) -> Optional[Tuple[bytes, int]]:
    data = stream.read(_CHUNK_HEADER.size)
    if len(data) < _CHUNK_HEADER.size:
        return None
    return _CHUNK_HEADER.unpack(data)


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) < size:
        raise ImageError("truncated LBM file")
    return data


def check(stream: BinaryIO) -> bool:
    """Tell whether ``stream`` holds an ILBM or PBM form."""
    pos = stream.tell()
    try:
        while (header := _read_chunk_header(stream)) is not None:
            cid, size = header
            if cid in _CONTAINERS:
                if stream.read(4) in _IMAGE_TYPES:
                    return True
                size = max(size - 4, 0)
            stream.seek(size, 1)
        return False
    finally:
        stream.seek(pos)


def read(stream: BinaryIO) -> Pixmap:
    """Read the first ILBM or PBM image in ``stream`` as an RGB24 pixmap."""
    while (header := _read_chunk_header(stream)) is not None:
        cid, size = header
        if cid in _CONTAINERS:
            ftype = stream.read(4)
            size = max(size - 4, 0)
            if ftype in _IMAGE_TYPES:
                return _read_form(stream, ftype, size)
        stream.seek(size, 1)
    raise ImageError("no ILBM or PBM image found")


def _palettize(rgb: bytes, width: int, height: int) -> Tuple[bytes, bytes]:
    """Return a 768-byte palette and one palette index per pixel."""
    pixels = [bytes(p) for p in zip(*[iter(rgb)] * 3)]
    colours = list(dict.fromkeys(pixels))
    if len(colours) <= 256:
        lookup = {colour: index for index, colour in enumerate(colours)}
        palette = b"".join(colours)
        indices = bytes(lookup[p] for p in pixels)
    else:
        image = Image.frombytes("RGB", (width, height), rgb).quantize(colors=256)
        palette = bytes(image.getpalette()[:_PALETTE_SIZE])
        indices = image.tobytes()
    return palette.ljust(_PALETTE_SIZE, b"\0"), indices


def _chunk(cid: bytes, data: bytes) -> bytes:
    pad = b"\0" if len(data) & 1 else b""
    return _CHUNK_HEADER.pack(cid, len(data)) + data + pad


def write(pixmap: Pixmap, stream: BinaryIO) -> None:
    """Write ``pixmap`` as an uncompressed 8-bit paletted PBM form."""
    width, height = pixmap.width, pixmap.height
    if not (0 <= width <= 0x7FFF and 0 <= height <= 0x7FFF):
        raise ImageError("image too large for an LBM file")

    rgb = pixmap.pixels
    if pixmap.fmt != PixelFormat.RGB24:
        rgb = convert_pixels(rgb, pixmap.fmt, PixelFormat.RGB24)
    palette, indices = _palettize(bytes(rgb), width, height)

    bmhd = _BMHD.pack(width, height, 0, 0, 8, MASK_NONE, 0, 0, 0, 1, 1, width, height)
    body = IFF_PBM + _chunk(IFF_BMHD, bmhd) + _chunk(IFF_CMAP, palette) \
        + _chunk(IFF_BODY, indices)
    stream.write(_chunk(IFF_FORM, body))


def _read_form(stream: BinaryIO, ftype: bytes, size: int) -> Pixmap:
    start = stream.tell()
    bmhd: Optional[BitmapHeader] = None
    palette = bytearray(_PALETTE_SIZE)
    result: Optional[Pixmap] = None

    while True:
        header = _read_chunk_header(stream)
        if header is None or stream.tell() - start >= size:
            break
        cid, csize = header

        if cid == IFF_BMHD:
            if csize != _BMHD.size:
                raise ImageError(f"malformed LBM image: BMHD chunk of {csize} bytes")
            bmhd = BitmapHeader(*_BMHD.unpack(_read_exact(stream, _BMHD.size)))
            if bmhd.nplanes > 8:
                raise ImageError(
                    f"{bmhd.nplanes} planes found, only paletized LBM files supported"
                )

        elif cid == IFF_CMAP:
            if csize > len(palette):
                raise ImageError("malformed LBM image: palette too large")
            palette[:csize] = _read_exact(stream, csize)

        elif cid == IFF_CRNG:
            if csize != _CRNG_SIZE:
                raise ImageError("malformed LBM image: bad CRNG chunk")
            _read_exact(stream, _CRNG_SIZE)  # colour cycling is not supported

        elif cid == IFF_BODY:
            if bmhd is None:
                raise ImageError(
                    "malformed LBM image: encountered BODY chunk before BMHD"
                )
            if ftype == IFF_ILBM:
                indices = _read_body_ilbm(stream, bmhd)
            else:
                indices = _read_body_pbm(stream, bmhd)
            rgb = b"".join(bytes(palette[3 * c:3 * c + 3]) for c in indices)
            result = Pixmap(bmhd.width, bmhd.height, PixelFormat.RGB24, rgb)

        else:
            stream.seek(csize, 1)
            if stream.tell() & 1:
                stream.seek(1, 1)  # chunks start at even offsets

    if result is None:
        raise ImageError("malformed LBM image: no BODY chunk")
    return result


def _read_compressed_row(stream: BinaryIO, width: int) -> bytes:
    """Decode one ByteRun1 compressed row of ``width`` bytes."""
    row = bytearray()
    while len(row) < width:
        ctl = _read_exact(stream, 1)[0]
        if ctl == 0x80:
            continue
        if ctl < 0x80:
            row += _read_exact(stream, ctl + 1)
        else:
            row += _read_exact(stream, 1) * (257 - ctl)
    return bytes(row[:width])


def _read_body_ilbm(stream: BinaryIO, bmhd: BitmapHeader) -> bytes:
    """Gather bitplane rows into one colour index per pixel."""
    width = bmhd.width
    row_size = width // 8
    out = bytearray()
    for _ in range(bmhd.height):
        line = bytearray(width)
        for plane in range(bmhd.nplanes):
            if bmhd.compression:
                data = _read_compressed_row(stream, row_size)
            else:
                data = _read_exact(stream, row_size)
            bits = "".join(f"{byte:08b}" for byte in data)
            for k, bit in enumerate(bits[:width]):
                if bit == "1":
                    line[k] |= 1 << plane
        if bmhd.masking & MASK_PLANE:
            stream.seek(row_size, 1)
        out += line
    return bytes(out)


def _read_body_pbm(stream: BinaryIO, bmhd: BitmapHeader) -> bytes:
    if bmhd.compression:
        return b"".join(
            _read_compressed_row(stream, bmhd.width) for _ in range(bmhd.height)
        )
    return _read_exact(stream, bmhd.width * bmhd.height)
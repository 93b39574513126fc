"""Reading and writing fixed-endian integers on binary streams."""

from __future__ import annotations

import struct
from typing import BinaryIO

_I16_LE = struct.Struct("<h")
_I16_BE = struct.Struct(">h")
_U16_LE = struct.Struct("<H")
_U16_BE = struct.Struct(">H")
_U32_BE = struct.Struct(">I")


def _read(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) < size:
        raise EOFError(f"expected {size} bytes, got {len(data)}")
    return data


def _as_int16(value: int) -> int:
    return ((value + 0x8000) & 0xFFFF) - 0x8000


def read_int16_le(stream: BinaryIO) -> int:
    return _I16_LE.unpack(_read(stream, 2))[0]


def read_int16_be(stream: BinaryIO) -> int:
    return _I16_BE.unpack(_read(stream, 2))[0]


def read_uint16_le(stream: BinaryIO) -> int:
    return _U16_LE.unpack(_read(stream, 2))[0]


def read_uint16_be(stream: BinaryIO) -> int:
    return _U16_BE.unpack(_read(stream, 2))[0]


def read_uint32_be(stream: BinaryIO) -> int:
    return _U32_BE.unpack(_read(stream, 4))[0]


def write_int16_le(stream: BinaryIO, value: int) -> None:
    stream.write(_I16_LE.pack(_as_int16(value)))


def write_int16_be(stream: BinaryIO, value: int) -> None:
    stream.write(_I16_BE.pack(_as_int16(value)))


def write_uint16_le(stream: BinaryIO, value: int) -> None:
    stream.write(_U16_LE.pack(value & 0xFFFF))


def write_uint16_be(stream: BinaryIO, value: int) -> None:
    stream.write(_U16_BE.pack(value & 0xFFFF))
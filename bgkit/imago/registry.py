"""Registry of image file types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Callable, Iterator, List, Optional

from .pixmap import Pixmap


@dataclass(frozen=True)
class FileType:
    """An image file type and the functions that handle it.

    ``suffix`` is a colon separated list such as ``".jpg:.jpeg"``; it is used
    to choose a type when saving. ``check`` inspects a stream without moving
    it and tells whether the data is of this type.
    """

    suffix: str
    check: Callable[[BinaryIO], bool]
    read: Callable[[BinaryIO], Pixmap]
    write: Callable[[Pixmap, BinaryIO], None]
    name: str = ""


class Registry:
    """Ordered collection of file types; the latest registered comes first."""

    def __init__(self) -> None:
        self._types: List[FileType] = []

    def __len__(self) -> int:
        return len(self._types)

    def __iter__(self) -> Iterator[FileType]:
        return iter(self._types)

    def register(self, filetype: FileType) -> None:
        self._types.insert(0, filetype)

    def find_format(self, stream: BinaryIO) -> Optional[FileType]:
        """Return the first file type whose check accepts ``stream``."""
        for filetype in self._types:
            if filetype.check(stream):
                return filetype
        return None

    def guess_format(self, filename: str) -> Optional[FileType]:
        """Return the file type whose suffix list holds the suffix of ``filename``."""
        dot = filename.rfind(".")
        if dot < 0:
            return None
        suffix = filename[dot:]
        for filetype in self._types:
            if _suffix_listed(filetype.suffix, suffix):
                return filetype
        return None

    def get(self, index: int) -> FileType:
        if not 0 <= index < len(self._types):
            raise IndexError(f"no file type at index {index}")
        return self._types[index]


def _suffix_listed(suffixes: str, suffix: str) -> bool:
    pos = 0
    while pos < len(suffixes):
        start = suffixes.find(suffix, pos)
        if start < 0:
            return False
        end = start + len(suffix)
        if end == len(suffixes) or suffixes[end] == ":":
            return True
        pos = end
    return False
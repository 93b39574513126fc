"""In-memory tree of named nodes carrying named attribute values."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable, List, Optional, Sequence, TypeVar

T = TypeVar("T")


class ValueType(IntEnum):
    """Kind of data an attribute value holds."""

    STRING = 0
    NUMBER = 1
    VECTOR = 2
    ARRAY = 3


def _truncate(number: float) -> int:
    return int(number) if math.isfinite(number) else 0


@dataclass
class Value:
    """An attribute value.

    Numbers carry their text form in ``str`` as well as ``fnum`` and ``inum``.
    Vectors (arrays holding only numbers) fill ``vec`` and ``array``; other
    arrays fill only ``array``.
    """

    type: ValueType = ValueType.STRING
    str: Optional[str] = None
    inum: int = 0
    fnum: float = 0.0
    vec: Optional[List[float]] = None
    array: Optional[List["Value"]] = None

    @classmethod
    def from_str(cls, text: str) -> "Value":
        """Make a string value."""
        return cls(type=ValueType.STRING, str=text)

    @classmethod
    def from_int(cls, number: int) -> "Value":
        """Make a numeric value from an integer."""
        number = int(number)
        return cls(type=ValueType.NUMBER, str=f"{number:d}", inum=number,
                   fnum=float(number))

    @classmethod
    def from_float(cls, number: float) -> "Value":
        """Make a numeric value from a float."""
        number = float(number)
        return cls(type=ValueType.NUMBER, str=f"{number:g}",
                   inum=_truncate(number), fnum=number)

    @classmethod
    def _vector(cls, numbers: Sequence[float]) -> "Value":
        floats = [float(n) for n in numbers]
        return cls(type=ValueType.VECTOR, vec=floats,
                   array=[cls.from_float(n) for n in floats])

    @classmethod
    def from_ints(cls, numbers: Iterable[int]) -> "Value":
        """Make a number from one integer, or a vector from several."""
        numbers = list(numbers)
        if not numbers:
            raise ValueError("at least one number is required")
        if len(numbers) == 1:
            return cls.from_int(numbers[0])
        return cls._vector(numbers)

    @classmethod
    def from_floats(cls, numbers: Iterable[float]) -> "Value":
        """Make a number from one float, or a vector from several."""
        numbers = list(numbers)
        if not numbers:
            raise ValueError("at least one number is required")
        if len(numbers) == 1:
            return cls.from_float(numbers[0])
        return cls._vector(numbers)

    @classmethod
    def from_values(cls, values: Iterable["Value"]) -> "Value":
        """Make an array of deep copies; all-numeric arrays become vectors."""
        values = list(values)
        if len(values) <= 1:
            raise ValueError("an array needs at least two values")
        array = [v.copy() for v in values]
        if all(v.type == ValueType.NUMBER for v in array):
            return cls(type=ValueType.VECTOR, vec=[v.fnum for v in array],
                       array=array)
        return cls(type=ValueType.ARRAY, array=array)

    def copy(self) -> "Value":
        """Return a deep copy."""
        return Value(
            type=self.type,
            str=self.str,
            inum=self.inum,
            fnum=self.fnum,
            vec=None if self.vec is None else list(self.vec),
            array=None if self.array is None else [v.copy() for v in self.array],
        )


@dataclass(eq=False)
class Attr:
    """A named value belonging to at most one node."""

    name: Optional[str] = None
    value: Value = field(default_factory=Value)
    node: Optional["Node"] = field(default=None, repr=False)

    def copy(self) -> "Attr":
        """Return a deep copy that belongs to no node."""
        return Attr(self.name, self.value.copy())


def _remove_identical(items: List[T], item: T) -> None:
    for i, existing in enumerate(items):
        if existing is item:
            del items[i]
            return
    raise ValueError("item not found")


@dataclass(eq=False)
class Node:
    """A named node with ordered attributes and children."""

    name: Optional[str] = None
    attrs: List[Attr] = field(default_factory=list)
    children: List["Node"] = field(default_factory=list)
    parent: Optional["Node"] = field(default=None, repr=False)

    # ---- attributes ----

    def add_attr(self, attr: Attr) -> None:
        """Append ``attr``, moving it away from any other node it belongs to."""
        if attr.node is not None:
            if attr.node is self:
                return
            attr.node.remove_attr(attr)
        attr.node = self
        self.attrs.append(attr)

    def remove_attr(self, attr: Attr) -> None:
        """Detach ``attr``; raise ValueError if it is not an attribute here."""
        _remove_identical(self.attrs, attr)
        attr.node = None

    def get_attr(self, name: str) -> Optional[Attr]:
        """Return the first attribute called ``name``, or None."""
        return next((a for a in self.attrs if a.name == name), None)

    def get_attr_str(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return _as_str(self.get_attr(name), default)

    def get_attr_num(self, name: str, default: float = 0.0) -> float:
        return _as_num(self.get_attr(name), default)

    def get_attr_int(self, name: str, default: int = 0) -> int:
        return _as_int(self.get_attr(name), default)

    def get_attr_vec(self, name: str, default: Optional[List[float]] = None):
        return _as_vec(self.get_attr(name), default)

    def get_attr_array(self, name: str, default: Optional[List[Value]] = None):
        return _as_array(self.get_attr(name), default)

    # ---- children ----

    def add_child(self, child: "Node") -> None:
        """Append ``child``, moving it away from any previous parent."""
        if child.parent is not None:
            if child.parent is self:
                return
            child.parent.remove_child(child)
        child.parent = self
        self.children.append(child)

    def remove_child(self, child: "Node") -> None:
        """Detach ``child``; raise ValueError if it is not a child here."""
        _remove_identical(self.children, child)
        child.parent = None

    def get_child(self, name: str) -> Optional["Node"]:
        """Return the first child called ``name``, or None."""
        return next((c for c in self.children if c.name == name), None)

    def level(self) -> int:
        """Return the depth of this node; the root is at level 0."""
        depth = 0
        node = self.parent
        while node is not None:
            depth += 1
            node = node.parent
        return depth

    # ---- dotted path lookup ----

    def lookup(self, path: str) -> Optional[Attr]:
        """Find an attribute by a path such as ``"root.child.attr"``.

        The first component must name this node, the last names the attribute,
        and those between name successive children.
        """
        parts = path.split(".")
        if len(parts) < 2 or parts[0] != self.name:
            return None
        node: Optional[Node] = self
        for part in parts[1:-1]:
            node = node.get_child(part)
            if node is None:
                return None
        return node.get_attr(parts[-1])

    def lookup_str(self, path: str, default: Optional[str] = None) -> Optional[str]:
        return _as_str(self.lookup(path), default)

    def lookup_num(self, path: str, default: float = 0.0) -> float:
        return _as_num(self.lookup(path), default)

    def lookup_int(self, path: str, default: int = 0) -> int:
        return _as_int(self.lookup(path), default)

    def lookup_vec(self, path: str, default: Optional[List[float]] = None):
        return _as_vec(self.lookup(path), default)

    def lookup_array(self, path: str, default: Optional[List[Value]] = None):
        return _as_array(self.lookup(path), default)


def _as_str(attr: Optional[Attr], default):
    if attr is None or attr.value.str is None:
        return default
    return attr.value.str


def _as_num(attr: Optional[Attr], default):
    if attr is None or attr.value.type != ValueType.NUMBER:
        return default
    return attr.value.fnum


def _as_int(attr: Optional[Attr], default):
    if attr is None or attr.value.type != ValueType.NUMBER:
        return default
    return attr.value.inum


def _as_vec(attr: Optional[Attr], default):
    if attr is None or not attr.value.vec:
        return default
    return attr.value.vec


def _as_array(attr: Optional[Attr], default):
    if attr is None or not attr.value.array:
        return default
    return attr.value.array
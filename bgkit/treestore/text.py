"""Text form of a tree: reading and writing the brace-delimited syntax.

A document is a named root node::

    root {
        name = "value"
        size = [640, 480]
        child { flag = on }
    }

Values are numbers, quoted strings, bare identifiers (read as strings) and
bracketed arrays, which may nest. ``#`` starts a comment that runs to the end
of the line.
"""

from __future__ import annotations

import io
import logging
import os
import re
import string
from enum import Enum
from typing import BinaryIO, List, Optional, TextIO, Tuple, Union

from .tree import Attr, Node, Value, ValueType

__all__ = ["ParseError", "loads", "load_stream", "load", "dumps", "save_stream", "save"]

_log = logging.getLogger(__name__)

_SPACE = " \t\n\v\f\r"
_DIGITS = string.digits
_ALPHA = string.ascii_letters
_ALNUM = string.ascii_letters + string.digits
_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)")
_MAX_ARRAY = 31
_MAX_INDENT = 16


class ParseError(ValueError):
    """Raised when text cannot be read as a tree."""

    def __init__(self, message: str, line: int) -> None:
        super().__init__(f"line {line}: {message}")
        self.line = line


class _Tok(Enum):
    SYM = "symbol"
    ID = "identifier"
    NUM = "number"
    STR = "string"


Token = Tuple[_Tok, str]


class _Lexer:
    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0
        self.line = 1

    def _getc(self) -> Optional[str]:
        if self._pos >= len(self._text):
            return None
        c = self._text[self._pos]
        self._pos += 1
        return c

    def _peek(self) -> Optional[str]:
        if self._pos >= len(self._text):
            return None
        return self._text[self._pos]

    def next_token(self) -> Optional[Token]:
        """Return the next token, or None at the end of input."""
        while True:
            c = self._getc()
            if c is None:
                return None
            if c == "#":
                while (c := self._getc()) is not None and c != "\n":
                    pass
                if c is None:
                    return None
            if c not in _SPACE:
                break
            if c == "\n":
                self.line += 1

        if c in _DIGITS or c in "+-":
            chars = [c]
            found_dot = False
            while (n := self._peek()) is not None and (
                n in _DIGITS or (n == "." and not found_dot)
            ):
                chars.append(n)
                found_dot = found_dot or n == "."
                self._pos += 1
            return _Tok.NUM, "".join(chars)

        if c in _ALPHA:
            chars = [c]
            while (n := self._peek()) is not None and (n in _ALNUM or n == "_"):
                chars.append(n)
                self._pos += 1
            return _Tok.ID, "".join(chars)

        if c == '"':
            chars = []
            while (c := self._getc()) is not None and c != '"':
                chars.append(c)
                if c == "\n":
                    self.line += 1
            if c is None:
                return None
            return _Tok.STR, "".join(chars)

        return _Tok.SYM, c


def _atof(text: str) -> float:
    match = _NUMBER.match(text)
    return float(match.group(0)) if match else 0.0


class _Parser:
    def __init__(self, text: str) -> None:
        self._lex = _Lexer(text)

    def _next(self) -> Optional[Token]:
        return self._lex.next_token()

    def _fail(self, message: str) -> None:
        raise ParseError(message, self._lex.line)

    def _expect(self, kind: _Tok) -> str:
        tok = self._next()
        if tok is None or tok[0] is not kind:
            self._fail(f"expected {kind.value} token")
        assert tok is not None
        return tok[1]

    def parse(self) -> Node:
        name = self._expect(_Tok.ID)
        if self._expect(_Tok.SYM) != "{":
            self._fail("expected symbol: {")
        node = self._read_node()
        node.name = name
        return node

    def _read_node(self) -> Node:
        node = Node()
        while True:
            tok = self._next()
            if tok is None or tok[0] is not _Tok.ID:
                break
            ident = tok[1]
            sym = self._expect(_Tok.SYM)
            if sym == "=":
                value_tok = self._next()
                if value_tok is None:
                    self._fail("unexpected end of input")
                assert value_tok is not None
                node.add_attr(Attr(ident, self._read_value(value_tok)))
            elif sym == "{":
                child = self._read_node()
                child.name = ident
                node.add_child(child)
            else:
                self._fail(f"unexpected token: {sym}")

        if tok != (_Tok.SYM, "}"):
            self._fail("expected closing brace")
        return node

    def _read_value(self, tok: Token) -> Value:
        kind, text = tok
        if kind is _Tok.NUM:
            return Value.from_float(_atof(text))
        if kind is _Tok.SYM:
            if text in ("[", "{"):
                # the closing symbol is two code points after the opening one
                return self._read_array(chr(ord(text) + 2))
            _log.warning("unexpected rhs symbol: %s (line %d)", text, self._lex.line)
            return Value()
        return Value.from_str(text)

    def _read_array(self, endsym: str) -> Value:
        values: List[Value] = []
        while (tok := self._next()) is not None:
            value = self._read_value(tok)
            if len(values) < _MAX_ARRAY:
                values.append(value)
            sep = self._next()
            if sep is None or sep[0] is not _Tok.SYM or sep[1] not in (",", endsym):
                self._fail(f"expected comma or end symbol ('{endsym}')")
            assert sep is not None
            if sep[1] == endsym:
                break
        if len(values) < 2:
            self._fail("an array needs at least two elements")
        return Value.from_values(values)


def loads(text: str) -> Node:
    """Parse a tree from ``text``; anything after the root node is ignored."""
    return _Parser(text).parse()


def load_stream(stream: Union[TextIO, BinaryIO]) -> Node:
    """Parse a tree from a text or binary stream."""
    data = stream.read()
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8")
    return loads(data)


def load(filename: Union[str, "os.PathLike[str]"]) -> Node:
    """Parse a tree from the file ``filename``."""
    with open(filename, "rb") as f:
        return load_stream(f)


def _indent(level: int) -> str:
    return "\t" * min(level, _MAX_INDENT)


def _value_to_str(value: Value) -> str:
    if value.type == ValueType.NUMBER:
        return f"{value.fnum:g}"
    if value.type == ValueType.VECTOR:
        return "[" + ", ".join(f"{v:g}" for v in value.vec or []) + "]"
    if value.type == ValueType.ARRAY:
        return "[" + ", ".join(_value_to_str(v) for v in value.array or []) + "]"
    return f'"{value.str or ""}"'


def _write_node(node: Node, out: List[str]) -> None:
    level = node.level()
    inline = not node.children and len(node.attrs) <= 1
    out.append(f"{_indent(level)}{node.name or ''} {{" + ("" if inline else "\n"))
    for attr in node.attrs:
        value = _value_to_str(attr.value)
        if inline:
            out.append(f" {attr.name} = {value} ")
        else:
            out.append(f"{_indent(level + 1)}{attr.name} = {value}\n")
    for child in node.children:
        _write_node(child, out)
    out.append("}\n" if inline else f"{_indent(level)}}}\n")


def dumps(tree: Node) -> str:
    """Return the text form of ``tree``, indented by its depth in its tree."""
    out: List[str] = []
    _write_node(tree, out)
    return "".join(out)


def save_stream(tree: Node, stream: Union[TextIO, BinaryIO]) -> None:
    """Write the text form of ``tree`` to a text or binary stream."""
    text = dumps(tree)
    if isinstance(stream, io.TextIOBase):
        stream.write(text)
    else:
        stream.write(text.encode("utf-8"))  # type: ignore[arg-type]


def save(tree: Node, filename: Union[str, "os.PathLike[str]"]) -> None:
    """Write the text form of ``tree`` to the file ``filename``."""
    with open(filename, "w", encoding="utf-8", newline="") as f:
        save_stream(tree, f)
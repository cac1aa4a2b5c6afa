"""A JSON reader with optional comments, producing :class:`JsonValue` trees.

The grammar accepted is slightly looser than strict JSON: trailing commas in
arrays and objects are allowed, unknown string escapes yield the escaped
character, a lone ``-`` reads as zero and a NUL byte after the root value ends
the document.
"""

from __future__ import annotations

from enum import IntFlag
from typing import Optional, Union

from .jsonvalue import JsonType, JsonValue

_BOM = b"\xef\xbb\xbf"

_QUOTE = ord('"')
_BACKSLASH = ord("\\")
_NEWLINE = ord("\n")
_RETURN = ord("\r")
_WHITESPACE = frozenset(b" \t\r\n")
_DIGITS = frozenset(b"0123456789")
_SIMPLE_ESCAPES = {
    ord("b"): 0x08,
    ord("f"): 0x0C,
    ord("n"): 0x0A,
    ord("r"): 0x0D,
    ord("t"): 0x09,
}
_LITERALS = {
    ord("t"): (b"true", JsonType.BOOLEAN, True),
    ord("f"): (b"false", JsonType.BOOLEAN, False),
    ord("n"): (b"null", JsonType.NULL, None),
}


class _Flag(IntFlag):
    NEXT = 1 << 0
    REPROC = 1 << 1
    NEED_COMMA = 1 << 2
    SEEK_VALUE = 1 << 3
    ESCAPED = 1 << 4
    STRING = 1 << 5
    NEED_COLON = 1 << 6
    DONE = 1 << 7
    NUM_NEGATIVE = 1 << 8
    NUM_ZERO = 1 << 9
    NUM_E = 1 << 10
    NUM_E_GOT_SIGN = 1 << 11
    NUM_E_NEGATIVE = 1 << 12
    LINE_COMMENT = 1 << 13
    BLOCK_COMMENT = 1 << 14


_NUMBER_FLAGS = (
    _Flag.NUM_NEGATIVE
    | _Flag.NUM_E
    | _Flag.NUM_E_GOT_SIGN
    | _Flag.NUM_E_NEGATIVE
    | _Flag.NUM_ZERO
)


class JsonParseError(ValueError):
    """Raised when a document cannot be parsed; carries the line and column."""

    def __init__(self, message: str, line: int = 0, column: int = 0) -> None:
        # A NUL character ends the message, as the reported text always has.
        message = message.split("\0", 1)[0] or "Unknown error"
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column


def _hex_value(b: int) -> int:
    if 0x30 <= b <= 0x39:
        return b - 0x30
    if 0x61 <= b <= 0x66:
        return b - 0x61 + 10
    if 0x41 <= b <= 0x46:
        return b - 0x41 + 10
    return 0xFF


def _to_float(value: Union[int, float]) -> float:
    try:
        return float(value)
    except OverflowError:
        return float("inf") if value > 0 else float("-inf")


def _pow10(exponent: int) -> float:
    try:
        return 10.0 ** exponent
    except OverflowError:
        return float("inf")


def _decode(raw: bytearray) -> str:
    try:
        return raw.decode("utf-8", "surrogatepass")
    except UnicodeDecodeError:
        return raw.decode("utf-8", "replace")


def _utf8_of_escape(hi: int, lo: int) -> bytes:
    code = hi * 256 + lo
    if hi == 0 and lo <= 0x7F:
        return bytes((lo,))
    if code <= 0x7FF:
        return bytes((0xC0 | ((lo & 0xC0) >> 6) | ((hi & 0x7) << 2), 0x80 | (lo & 0x3F)))
    return bytes(
        (
            0xE0 | ((hi & 0xF0) >> 4),
            0x80 | ((hi & 0xF) << 2) | ((lo & 0xC0) >> 6),
            0x80 | (lo & 0x3F),
        )
    )


class _Parser:
    def __init__(self, data: bytes, enable_comments: bool) -> None:
        self.data = data
        self.end = len(data)
        self.comments = enable_comments
        self.i = -1
        self.line = 1
        self.line_begin = 0
        self.flags = _Flag.SEEK_VALUE
        self.top: Optional[JsonValue] = None
        self.root: Optional[JsonValue] = None
        self.string = bytearray()
        self.num_digits = 0
        self.num_fraction = 0
        self.num_e = 0
        self.num_int = 0
        self.num_dbl = 0.0

    # -- helpers -------------------------------------------------------

    def _byte(self, index: int) -> int:
        return self.data[index] if index < self.end else 0

    def _error(self, message: str, located: bool = True) -> JsonParseError:
        column = self.i - self.line_begin
        if located:
            message = f"{self.line}:{column}: {message}"
        return JsonParseError(message, self.line, column)

    def _whitespace(self, b: int) -> bool:
        if b not in _WHITESPACE:
            return False
        if b == _NEWLINE:
            self.line += 1
            self.line_begin = self.i
        return True

    def _new_value(self, kind: JsonType, payload=None) -> None:
        value = JsonValue(kind, payload, self.top)
        if self.root is None:
            self.root = value
        self.top = value

    # -- main loop -----------------------------------------------------

    def run(self) -> JsonValue:
        while True:
            self.i += 1
            b = self._byte(self.i)

            if self.flags & _Flag.STRING:
                if self._string_char(b):
                    continue
            else:
                if self.comments and self._comment_char(b):
                    continue
                if self.flags & _Flag.DONE:
                    if not b:
                        break
                    if self._whitespace(b):
                        continue
                    raise self._error(f"Trailing garbage: `{chr(b)}`")
                if self.flags & _Flag.SEEK_VALUE:
                    if self._seek_value(b):
                        continue
                elif self.top is not None:
                    if self.top.type is JsonType.OBJECT:
                        if self._object_char(b):
                            continue
                    elif self.top.type in (JsonType.INTEGER, JsonType.DOUBLE):
                        if self._number_char(b):
                            continue

            self._finish_step()

        assert self.root is not None
        return self.root

    def _finish_step(self) -> None:
        if self.flags & _Flag.REPROC:
            self.flags &= ~_Flag.REPROC
            self.i -= 1
        if not self.flags & _Flag.NEXT:
            return
        self.flags = (self.flags & ~_Flag.NEXT) | _Flag.NEED_COMMA
        top = self.top
        assert top is not None
        parent = top.parent
        if parent is None:
            self.flags |= _Flag.DONE
            return
        if parent.type is JsonType.ARRAY:
            self.flags |= _Flag.SEEK_VALUE
            parent.value.append(top)
        elif parent.type is JsonType.OBJECT:
            name, _ = parent.value[-1]
            parent.value[-1] = (name, top)
        self.top = parent

    # -- states ----------------------------------------------------------

    def _string_char(self, b: int) -> bool:
        if not b:
            raise self._error(
                f"Unexpected EOF in string (at {self.line}:{self.i - self.line_begin})",
                located=False,
            )
        if self.flags & _Flag.ESCAPED:
            self.flags &= ~_Flag.ESCAPED
            if b in _SIMPLE_ESCAPES:
                self.string.append(_SIMPLE_ESCAPES[b])
            elif b == ord("u"):
                self._unicode_escape(b)
            else:
                self.string.append(b)
            return True
        if b == _BACKSLASH:
            self.flags |= _Flag.ESCAPED
            return True
        if b != _QUOTE:
            self.string.append(b)
            return True

        text = _decode(self.string)
        self.string = bytearray()
        self.flags &= ~_Flag.STRING
        top = self.top
        assert top is not None
        if top.type is JsonType.OBJECT:
            top.value.append((text, None))
            self.flags |= _Flag.SEEK_VALUE | _Flag.NEED_COLON
            return True
        top.value = text
        self.flags |= _Flag.NEXT
        return False

    def _unicode_escape(self, b: int) -> None:
        nibbles = []
        if self.end - self.i >= 4:
            for _ in range(4):
                self.i += 1
                nibble = _hex_value(self._byte(self.i))
                if nibble == 0xFF:
                    break
                nibbles.append(nibble)
        if len(nibbles) != 4:
            raise self._error(
                f"Invalid character value `{chr(b)}` "
                f"(at {self.line}:{self.i - self.line_begin})",
                located=False,
            )
        hi = nibbles[0] * 16 + nibbles[1]
        lo = nibbles[2] * 16 + nibbles[3]
        self.string += _utf8_of_escape(hi, lo)

    def _comment_char(self, b: int) -> bool:
        if self.flags & _Flag.LINE_COMMENT:
            if b in (_RETURN, _NEWLINE, 0):
                self.flags &= ~_Flag.LINE_COMMENT
                self.i -= 1
            return True
        if self.flags & _Flag.BLOCK_COMMENT:
            if not b:
                raise self._error("Unexpected EOF in block comment")
            if b == ord("*") and self.i < self.end - 1 and self.data[self.i + 1] == ord("/"):
                self.flags &= ~_Flag.BLOCK_COMMENT
                self.i += 1
            return True
        if b != ord("/"):
            return False
        if not self.flags & (_Flag.SEEK_VALUE | _Flag.DONE) and (
            self.top is None or self.top.type is not JsonType.OBJECT
        ):
            raise self._error("Comment not allowed here")
        self.i += 1
        if self.i == self.end:
            raise self._error("EOF unexpected")
        b = self.data[self.i]
        if b == ord("/"):
            self.flags |= _Flag.LINE_COMMENT
            return True
        if b == ord("*"):
            self.flags |= _Flag.BLOCK_COMMENT
            return True
        raise self._error(f"Unexpected `{chr(b)}` in comment opening sequence")

    def _seek_value(self, b: int) -> bool:
        if self._whitespace(b):
            return True
        if b == ord("]"):
            if self.top is not None and self.top.type is JsonType.ARRAY:
                self.flags = (
                    self.flags & ~(_Flag.NEED_COMMA | _Flag.SEEK_VALUE)
                ) | _Flag.NEXT
                return False
            raise self._error("Unexpected ]")
        if self.flags & _Flag.NEED_COMMA:
            if b == ord(","):
                self.flags &= ~_Flag.NEED_COMMA
                return True
            raise self._error(f"Expected , before {chr(b)}")
        if self.flags & _Flag.NEED_COLON:
            if b == ord(":"):
                self.flags &= ~_Flag.NEED_COLON
                return True
            raise self._error(f"Expected : before {chr(b)}")

        self.flags &= ~_Flag.SEEK_VALUE
        if b == ord("{"):
            self._new_value(JsonType.OBJECT)
            return True
        if b == ord("["):
            self._new_value(JsonType.ARRAY)
            self.flags |= _Flag.SEEK_VALUE
            return True
        if b == _QUOTE:
            self._new_value(JsonType.STRING)
            self.flags |= _Flag.STRING
            self.string = bytearray()
            return True
        if b in _LITERALS:
            word, kind, payload = _LITERALS[b]
            self._expect_literal(word)
            self._new_value(kind, payload)
            self.flags |= _Flag.NEXT
            return False
        if b in _DIGITS or b == ord("-"):
            self._new_value(JsonType.INTEGER, 0)
            self.flags &= ~_NUMBER_FLAGS
            self.num_digits = 0
            self.num_fraction = 0
            self.num_e = 0
            self.num_int = 0
            self.num_dbl = 0.0
            if b != ord("-"):
                self.flags |= _Flag.REPROC
                return False
            self.flags |= _Flag.NUM_NEGATIVE
            return True
        raise self._error(f"Unexpected {chr(b)} when seeking value")

    def _expect_literal(self, word: bytes) -> None:
        if self.end - self.i < len(word) - 1:
            raise self._error("Unknown value")
        for expected in word[1:]:
            self.i += 1
            if self._byte(self.i) != expected:
                raise self._error("Unknown value")

    def _object_char(self, b: int) -> bool:
        if self._whitespace(b):
            return True
        if b == _QUOTE:
            if self.flags & _Flag.NEED_COMMA:
                raise self._error('Expected , before "')
            self.flags |= _Flag.STRING
            self.string = bytearray()
            return False
        if b == ord("}"):
            self.flags = (self.flags & ~_Flag.NEED_COMMA) | _Flag.NEXT
            return False
        if b == ord(",") and self.flags & _Flag.NEED_COMMA:
            self.flags &= ~_Flag.NEED_COMMA
            return False
        raise self._error(f"Unexpected `{chr(b)}` in object")

    def _number_char(self, b: int) -> bool:
        top = self.top
        assert top is not None
        if b in _DIGITS:
            digit = b - 0x30
            self.num_digits += 1
            if top.type is JsonType.INTEGER or self.flags & _Flag.NUM_E:
                if self.flags & _Flag.NUM_E:
                    self.flags |= _Flag.NUM_E_GOT_SIGN
                    self.num_e = self.num_e * 10 + digit
                    return True
                if self.flags & _Flag.NUM_ZERO:
                    raise self._error(f"Unexpected `0` before `{chr(b)}`")
                if self.num_digits == 1 and digit == 0:
                    self.flags |= _Flag.NUM_ZERO
                self.num_int = self.num_int * 10 + digit
                return True
            self.num_fraction = self.num_fraction * 10 + digit
            return True

        if b in (ord("+"), ord("-")):
            if self.flags & _Flag.NUM_E and not self.flags & _Flag.NUM_E_GOT_SIGN:
                self.flags |= _Flag.NUM_E_GOT_SIGN
                if b == ord("-"):
                    self.flags |= _Flag.NUM_E_NEGATIVE
                return True
        elif b == ord(".") and top.type is JsonType.INTEGER:
            if not self.num_digits:
                raise self._error("Expected digit before `.`")
            top.type = JsonType.DOUBLE
            self.num_dbl = _to_float(self.num_int)
            self.num_digits = 0
            return True

        if not self.flags & _Flag.NUM_E:
            if top.type is JsonType.DOUBLE:
                if not self.num_digits:
                    raise self._error("Expected digit after `.`")
                self.num_dbl += self.num_fraction / 10 ** self.num_digits
            if b in (ord("e"), ord("E")):
                self.flags |= _Flag.NUM_E
                if top.type is JsonType.INTEGER:
                    top.type = JsonType.DOUBLE
                    self.num_dbl = _to_float(self.num_int)
                self.num_digits = 0
                self.flags &= ~_Flag.NUM_ZERO
                return True
        else:
            if not self.num_digits:
                raise self._error("Expected digit after `e`")
            exponent = -self.num_e if self.flags & _Flag.NUM_E_NEGATIVE else self.num_e
            self.num_dbl *= _pow10(exponent)

        negative = bool(self.flags & _Flag.NUM_NEGATIVE)
        if top.type is JsonType.INTEGER:
            top.value = -self.num_int if negative else self.num_int
        else:
            top.value = -self.num_dbl if negative else self.num_dbl
        self.flags |= _Flag.NEXT | _Flag.REPROC
        return False


def parse(data: Union[str, bytes, bytearray], enable_comments: bool = False) -> JsonValue:
    """Parse a JSON document and return its root value.

    ``enable_comments`` allows ``//`` and ``/* */`` comments. Raises
    :class:`JsonParseError` on malformed input.
    """
    raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    if raw.startswith(_BOM):
        raw = raw[len(_BOM):]
    return _Parser(raw, enable_comments).run()
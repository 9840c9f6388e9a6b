"""Finite-state scanners for scalar JSON values.

Every scanner takes the input buffer and a start offset and returns
``(value, end)``, where ``end`` is the offset of the first byte not consumed.
Leading whitespace is skipped. Numbers and literals stop at a terminator
(``,``, ``}``, ``]`` or whitespace) without consuming it; strings stop after
their closing quote. With ``materialize=False`` the token is validated and
skipped, and the value returned is None.
"""

from enum import Enum, auto

from .errors import BadFormatError, OutOfBoundsError
from .sizes import INT64_MAX, INT64_MIN

WHITESPACE = frozenset(b" \t\n\r")
TERMINATORS = frozenset(b",}]") | WHITESPACE

QUOTE = ord('"')
BACKSLASH = ord("\\")
MINUS = ord("-")
PLUS = ord("+")
DOT = ord(".")
COMMA = ord(",")
COLON = ord(":")
BRACE_OPEN = ord("{")
BRACE_CLOSE = ord("}")
BRACKET_OPEN = ord("[")
BRACKET_CLOSE = ord("]")

_ZERO = ord("0")
_NINE = ord("9")
_LOWER_A = ord("a")
_LOWER_Z = ord("z")
_UPPER_A = ord("A")
_UPPER_Z = ord("Z")
_EXPONENT = frozenset(b"eE")

# Escape byte -> decoded byte; anything else decodes to itself
ESCAPES = {
    ord("n"): ord("\n"),
    ord("t"): ord("\t"),
    ord("r"): ord("\r"),
}


class ScanState(Enum):
    """States shared by the scalar scanners."""

    INIT = auto()
    BODY = auto()
    FRACTION = auto()
    EXPONENT = auto()
    IN_STRING = auto()
    ESCAPE = auto()
    END = auto()


def is_digit(byte: int) -> bool:
    return byte >= _ZERO and byte <= _NINE


def is_alpha(byte: int) -> bool:
    return (byte >= _LOWER_A and byte <= _LOWER_Z) or (byte >= _UPPER_A and byte <= _UPPER_Z)


def skip_whitespace(data: bytes, offset: int) -> int:
    """Return the offset of the first non-whitespace byte at or after offset."""
    length = len(data)
    while offset < length and data[offset] in WHITESPACE:
        offset += 1
    return offset


def check_bounds(data: bytes, offset: int) -> None:
    """Fail if no byte is available at offset."""
    if offset < 0 or offset >= len(data):
        raise OutOfBoundsError("Offset is past the end of input", offset)


def scan_int(data: bytes, offset: int, materialize: bool = True) -> tuple[int | None, int]:
    """Scan an integer: optional minus sign followed by digits."""
    check_bounds(data, offset)

    state = ScanState.INIT
    index = start = offset
    digits = 0
    length = len(data)

    while index < length and state != ScanState.END:
        byte = data[index]
        if state == ScanState.INIT:
            if byte in WHITESPACE:
                index += 1
                start = index
            elif byte == MINUS or is_digit(byte):
                digits += is_digit(byte)
                state = ScanState.BODY
                index += 1
            else:
                raise BadFormatError("Expected integer", index)
        elif state == ScanState.BODY:
            if is_digit(byte):
                digits += 1
                index += 1
            elif byte in TERMINATORS:
                state = ScanState.END
            else:
                raise BadFormatError(f"Unexpected character {chr(byte)!r} in integer", index)

    if state == ScanState.INIT:
        raise BadFormatError("Expected integer, found end of input", index)
    if digits == 0:
        raise BadFormatError("Integer has no digits", start)
    if not materialize:
        return None, index

    value = int(data[start:index])
    if value < INT64_MIN or value > INT64_MAX:
        raise BadFormatError("Integer out of 64-bit range", start)
    return value, index


def scan_float(data: bytes, offset: int, materialize: bool = True) -> tuple[float | None, int]:
    """Scan a decimal number with optional fraction and exponent."""
    check_bounds(data, offset)

    state = ScanState.INIT
    index = start = offset
    mantissa_digits = 0
    exponent_digits = 0
    length = len(data)

    while index < length and state != ScanState.END:
        byte = data[index]
        if state == ScanState.INIT:
            if byte in WHITESPACE:
                index += 1
                start = index
            elif byte == MINUS or is_digit(byte):
                mantissa_digits += is_digit(byte)
                state = ScanState.BODY
                index += 1
            elif byte == DOT:
                state = ScanState.FRACTION
                index += 1
            else:
                raise BadFormatError("Expected number", index)
        elif state in (ScanState.BODY, ScanState.FRACTION):
            if is_digit(byte):
                mantissa_digits += 1
                index += 1
            elif byte == DOT and state == ScanState.BODY:
                state = ScanState.FRACTION
                index += 1
            elif byte in _EXPONENT:
                state = ScanState.EXPONENT
                index += 1
            elif byte in TERMINATORS:
                state = ScanState.END
            else:
                raise BadFormatError(f"Unexpected character {chr(byte)!r} in number", index)
        elif state == ScanState.EXPONENT:
            if is_digit(byte):
                exponent_digits += 1
                index += 1
            elif (byte == MINUS or byte == PLUS) and data[index - 1] in _EXPONENT:
                index += 1
            elif byte in TERMINATORS:
                state = ScanState.END
            else:
                raise BadFormatError(f"Unexpected character {chr(byte)!r} in exponent", index)

    if state == ScanState.INIT:
        raise BadFormatError("Expected number, found end of input", index)
    if mantissa_digits == 0:
        raise BadFormatError("Number has no digits", start)
    if state == ScanState.EXPONENT and exponent_digits == 0:
        raise BadFormatError("Exponent has no digits", start)
    if not materialize:
        return None, index
    return float(data[start:index].decode("ascii")), index


def scan_string(data: bytes, offset: int, materialize: bool = True) -> tuple[str | None, int]:
    """Scan a double-quoted string, decoding ``\\n``, ``\\t`` and ``\\r``.

    Any other escaped byte decodes to itself. The result is UTF-8 decoded.
    """
    check_bounds(data, offset)

    state = ScanState.INIT
    index = start = offset
    buffer = bytearray()
    length = len(data)

    while index < length and state != ScanState.END:
        byte = data[index]
        index += 1
        if state == ScanState.INIT:
            if byte in WHITESPACE:
                start = index
            elif byte == QUOTE:
                state = ScanState.IN_STRING
            else:
                raise BadFormatError("Expected string", index - 1)
        elif state == ScanState.IN_STRING:
            if byte == BACKSLASH:
                state = ScanState.ESCAPE
            elif byte == QUOTE:
                state = ScanState.END
            elif materialize:
                buffer.append(byte)
        elif state == ScanState.ESCAPE:
            if materialize:
                buffer.append(ESCAPES.get(byte, byte))
            state = ScanState.IN_STRING

    if state == ScanState.INIT:
        raise BadFormatError("Expected string, found end of input", index)
    if state != ScanState.END:
        raise BadFormatError("Unterminated string", start)
    if not materialize:
        return None, index

    try:
        return buffer.decode("utf-8"), index
    except UnicodeDecodeError as e:
        raise BadFormatError(f"Invalid UTF-8 in string: {e.reason}", start) from e


def scan_bool(data: bytes, offset: int, materialize: bool = True) -> tuple[bool | None, int]:
    """Scan the literal ``true`` or ``false``."""
    check_bounds(data, offset)

    state = ScanState.INIT
    index = start = offset
    length = len(data)

    while index < length and state != ScanState.END:
        byte = data[index]
        if state == ScanState.INIT:
            if byte in WHITESPACE:
                index += 1
                start = index
            elif is_alpha(byte):
                state = ScanState.BODY
                index += 1
            else:
                raise BadFormatError("Expected boolean", index)
        elif state == ScanState.BODY:
            if is_alpha(byte):
                index += 1
            elif byte in TERMINATORS:
                state = ScanState.END
            else:
                raise BadFormatError(f"Unexpected character {chr(byte)!r} in boolean", index)

    if state == ScanState.INIT:
        raise BadFormatError("Expected boolean, found end of input", index)

    word = data[start:index]
    if word == b"true":
        value = True
    elif word == b"false":
        value = False
    else:
        raise BadFormatError(f"Invalid boolean literal {word.decode('ascii')!r}", start)
    return (value if materialize else None), index

"""Schema-driven JSON decoding.

A Parser walks the input once, guided by a TypeDescriptor, and builds the
described values directly; no generic JSON tree is created on the way.
Objects and arrays are explicit state machines that recurse through
``Parser.parse_value``, the single dispatch point. Values that have no
descriptor (unknown object properties, ``UNKNOWN`` descriptors) are run
through the same parsers with ``materialize=False``, which validates them and
discards the result.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from .accumulator import Accumulator
from .errors import (
    BadFormatError,
    BadSpecError,
    ErrorCode,
    NestingTooDeepError,
    NotSupportedError,
    OutOfBoundsError,
    ParseError,
    PropertyNotFoundError,
)
from .records import (
    allocate_record,
    field_value,
    needs_release,
    release_record,
    release_value,
)
from .scanners import (
    BRACE_CLOSE,
    BRACE_OPEN,
    BRACKET_CLOSE,
    BRACKET_OPEN,
    COLON,
    COMMA,
    DOT,
    MINUS,
    QUOTE,
    check_bounds,
    is_alpha,
    is_digit,
    scan_bool,
    scan_float,
    scan_int,
    scan_string,
    skip_whitespace,
)
from .types import UNKNOWN, Kind, ObjectDescriptor, TypeDescriptor

DEFAULT_MAX_DEPTH = 200


class ParseState(Enum):
    """States of the array and object parsers."""

    INIT = auto()
    VALUE = auto()
    NEXT = auto()
    OBJECT_NEXT = auto()
    PROP_NAME = auto()
    PROP_DELIM = auto()
    PROP_VALUE = auto()
    PROP_NEXT = auto()
    END = auto()


@dataclass(frozen=True)
class ParseOptions:
    """Decoding behavior.

    Attributes:
        strict: Fail with PropertyNotFound on object keys missing from the
            descriptor, instead of skipping their values.
        max_depth: Deepest array/object nesting accepted.
        complete: Require the whole input to be consumed; only whitespace
            may follow the value.
    """

    strict: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH
    complete: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.strict, bool):
            raise TypeError("strict must be a boolean")
        if not isinstance(self.complete, bool):
            raise TypeError("complete must be a boolean")
        if not isinstance(self.max_depth, int) or self.max_depth < 1:
            raise ValueError("max_depth must be a positive integer")


class Parser:
    """Decodes one input buffer. Not shared between parses."""

    def __init__(self, data: bytes, options: ParseOptions | None = None) -> None:
        self.data = data
        self.options = options or ParseOptions()
        self.depth = 0

    def parse(
        self, descriptor: TypeDescriptor, offset: int = 0, materialize: bool = True
    ) -> tuple[Any, int]:
        """Decode the value starting at offset.

        Returns:
            Tuple of (value, offset of the first unconsumed byte).
        """
        if offset < 0 or offset >= len(self.data):
            raise OutOfBoundsError("Offset is past the end of input", offset)

        try:
            value, end = self.parse_value(descriptor, offset, materialize)
        except RecursionError as e:
            # max_depth above what the interpreter recursion limit allows
            raise NestingTooDeepError("Nesting exceeds the interpreter stack", offset) from e

        if self.options.complete:
            trailing = skip_whitespace(self.data, end)
            if trailing < len(self.data):
                release_value(descriptor, value)
                raise BadFormatError("Extra data after value", trailing)
        return value, end

    def parse_value(
        self, descriptor: TypeDescriptor, offset: int, materialize: bool = True
    ) -> tuple[Any, int]:
        """Route a descriptor to its scanner or composite parser."""
        if not isinstance(descriptor, TypeDescriptor):
            raise NotSupportedError(f"Not a type descriptor: {descriptor!r}", offset)

        kind = descriptor.kind
        if kind == Kind.INT:
            return scan_int(self.data, offset, materialize)
        if kind == Kind.FLOAT:
            return scan_float(self.data, offset, materialize)
        if kind == Kind.STRING:
            return scan_string(self.data, offset, materialize)
        if kind == Kind.BOOL:
            return scan_bool(self.data, offset, materialize)
        if kind == Kind.ARRAY:
            if descriptor.element is None:
                raise BadSpecError("Array descriptor has no element descriptor", offset)
            return self.parse_array(descriptor.element, offset, materialize)
        if kind == Kind.OBJECT:
            if descriptor.record is None:
                raise BadSpecError("Object descriptor has no record descriptor", offset)
            return self.parse_object(descriptor.record, offset, materialize)
        if kind == Kind.UNKNOWN:
            return self.skip_value(offset)

        raise NotSupportedError(f"Unsupported descriptor kind {kind!r}", offset)

    def parse_array(
        self, element: TypeDescriptor, offset: int, materialize: bool = True
    ) -> tuple[Any, int]:
        """Parse ``[v, ...]``, decoding every element with one descriptor."""
        self._descend(offset)
        try:
            with Accumulator() as items:
                data = self.data
                release = _release_hook(element) if materialize else None
                state = ParseState.INIT
                index = offset
                count = 0

                while state != ParseState.END:
                    if state == ParseState.INIT:
                        index = self._open(index, BRACKET_OPEN, "'['")
                        state = ParseState.VALUE
                    elif state == ParseState.VALUE:
                        index = self._skip(index, offset, "array")
                        if count == 0 and data[index] == BRACKET_CLOSE:
                            index += 1
                            state = ParseState.END
                            continue
                        value, index = self.parse_value(element, index, materialize)
                        if materialize:
                            items.append(value, release)
                        count += 1
                        state = ParseState.NEXT
                    elif state == ParseState.NEXT:
                        index = self._skip(index, offset, "array")
                        byte = data[index]
                        if byte == COMMA:
                            state = ParseState.VALUE
                        elif byte == BRACKET_CLOSE:
                            state = ParseState.END
                        else:
                            raise BadFormatError("Expected ',' or ']'", index)
                        index += 1

                if not materialize:
                    return None, index
                return items.flatten(element), index
        finally:
            self.depth -= 1

    def parse_object(
        self, record: ObjectDescriptor | None, offset: int, materialize: bool = True
    ) -> tuple[Any, int]:
        """Parse ``{"key": v, ...}`` into a record allocated for it.

        Keys are resolved against ``record``; keys it does not declare are
        skipped (or rejected in strict mode). With ``record=None`` every key
        is skipped.
        """
        self._descend(offset)
        try:
            instance = allocate_record(record) if materialize and record is not None else None
            try:
                end = self._parse_members(record, instance, offset, materialize)
            except Exception:
                if instance is not None:
                    release_record(record, instance)
                raise
            return instance, end
        finally:
            self.depth -= 1

    def _parse_members(
        self, record: ObjectDescriptor | None, instance: Any, offset: int, materialize: bool
    ) -> int:
        data = self.data
        state = ParseState.INIT
        index = offset
        prop = None
        count = 0
        assigned: set[str] = set()

        while state != ParseState.END:
            if state == ParseState.INIT:
                index = self._open(index, BRACE_OPEN, "'{'")
                state = ParseState.OBJECT_NEXT
            elif state == ParseState.OBJECT_NEXT:
                index = self._skip(index, offset, "object")
                byte = data[index]
                if byte == BRACE_CLOSE and count == 0:
                    index += 1
                    state = ParseState.END
                elif byte == QUOTE:
                    state = ParseState.PROP_NAME
                else:
                    raise BadFormatError("Expected property name", index)
            elif state == ParseState.PROP_NAME:
                name, index = scan_string(data, index)
                prop = record.resolve(name) if record is not None else None
                if prop is None and record is not None and self.options.strict:
                    raise PropertyNotFoundError(f"Unknown property {name!r}", index)
                state = ParseState.PROP_DELIM
            elif state == ParseState.PROP_DELIM:
                index = self._skip(index, offset, "object")
                if data[index] != COLON:
                    raise BadFormatError("Expected ':'", index)
                index += 1
                state = ParseState.PROP_VALUE
            elif state == ParseState.PROP_VALUE:
                index = self._skip(index, offset, "object")
                if prop is None:
                    _, index = self.skip_value(index)
                else:
                    value, index = self.parse_value(prop.descriptor, index, materialize)
                    if instance is not None:
                        if prop.name in assigned and needs_release(prop.descriptor):
                            release_value(prop.descriptor, field_value(record, instance, prop))
                        assigned.add(prop.name)
                        prop.setter(instance, value)
                count += 1
                state = ParseState.PROP_NEXT
            elif state == ParseState.PROP_NEXT:
                index = self._skip(index, offset, "object")
                byte = data[index]
                if byte == COMMA:
                    state = ParseState.OBJECT_NEXT
                elif byte == BRACE_CLOSE:
                    state = ParseState.END
                else:
                    raise BadFormatError("Expected ',' or '}'", index)
                index += 1

        return index

    def skip_value(self, offset: int) -> tuple[None, int]:
        """Validate and discard a value of unknown shape."""
        check_bounds(self.data, offset)
        index = skip_whitespace(self.data, offset)
        if index >= len(self.data):
            raise BadFormatError("Expected value, found end of input", index)

        byte = self.data[index]
        if byte == BRACE_OPEN:
            return self.parse_object(None, index, materialize=False)
        if byte == BRACKET_OPEN:
            return self.parse_array(UNKNOWN, index, materialize=False)
        if byte == QUOTE:
            return scan_string(self.data, index, materialize=False)
        if byte == MINUS or byte == DOT or is_digit(byte):
            return scan_float(self.data, index, materialize=False)
        if is_alpha(byte):
            return scan_bool(self.data, index, materialize=False)
        raise BadFormatError(f"Unexpected character {chr(byte)!r}", index)

    def _descend(self, offset: int) -> None:
        if self.depth >= self.options.max_depth:
            raise NestingTooDeepError(f"Nesting exceeds {self.options.max_depth} levels", offset)
        self.depth += 1

    def _open(self, index: int, opener: int, what: str) -> int:
        """Consume whitespace and an opening bracket or brace."""
        check_bounds(self.data, index)
        index = skip_whitespace(self.data, index)
        if index >= len(self.data):
            raise BadFormatError(f"Expected {what}, found end of input", index)
        if self.data[index] != opener:
            raise BadFormatError(f"Expected {what}", index)
        return index + 1

    def _skip(self, index: int, start: int, what: str) -> int:
        """Consume whitespace inside a composite; running out of input is an error."""
        index = skip_whitespace(self.data, index)
        if index >= len(self.data):
            raise BadFormatError(f"Unterminated {what}", start)
        return index


def _release_hook(element: TypeDescriptor):
    if not needs_release(element):
        return None

    def release(value: Any) -> None:
        release_value(element, value)

    return release


def _as_bytes(data: bytes | bytearray | memoryview | str) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def decode(
    data: bytes | bytearray | memoryview | str,
    descriptor: TypeDescriptor,
    *,
    offset: int = 0,
    options: ParseOptions | None = None,
) -> tuple[Any, int]:
    """Decode the JSON value at offset into the structure a descriptor describes.

    Args:
        data: JSON text; ``str`` input is UTF-8 encoded first.
        descriptor: Shape of the value.
        offset: Byte offset to start at.
        options: Decoding behavior.

    Returns:
        Tuple of (value, offset of the first unconsumed byte). Bytes after the
        value are not inspected unless ``options.complete`` is set.

    Raises:
        ParseError: A subclass matching the first failure.
    """
    return Parser(_as_bytes(data), options).parse(descriptor, offset)


@dataclass
class Target:
    """Output cell written by :func:`parse` on success only."""

    value: Any = None
    offset: int = 0


def parse(
    data: bytes | bytearray | memoryview | str,
    target: Target | None,
    descriptor: TypeDescriptor,
    *,
    options: ParseOptions | None = None,
) -> ErrorCode:
    """Decode from offset 0 into ``target`` and report a status code.

    With ``target=None`` the input is validated against the descriptor and
    nothing is materialized. On failure the target is left untouched.
    """
    parser = Parser(_as_bytes(data), options)
    try:
        value, end = parser.parse(descriptor, 0, materialize=target is not None)
    except ParseError as e:
        return e.code

    if target is not None:
        target.value = value
        target.offset = end
    return ErrorCode.SUCCESS

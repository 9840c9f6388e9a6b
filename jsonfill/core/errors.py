"""Error codes and exceptions raised while decoding JSON into records."""

from enum import IntEnum
from typing import ClassVar

__all__ = [
    "ErrorCode",
    "ParseError",
    "NotSupportedError",
    "OutOfBoundsError",
    "BadFormatError",
    "BadSpecError",
    "PropertyNotFoundError",
    "NestingTooDeepError",
]


class ErrorCode(IntEnum):
    """Stable status codes returned by :func:`jsonfill.core.parser.parse`."""

    SUCCESS = 0
    NOT_SUPPORTED = 1
    OUT_OF_BOUNDS = 2
    BAD_FORMAT = 3
    BAD_SPEC = 4
    PROPERTY_NOT_FOUND = 5  # strict mode only
    TOO_DEEP = 6


class ParseError(RuntimeError):
    """Raised when decoding fails.

    Attributes:
        code: The status code matching this failure.
        offset: Byte offset at which the failure was detected, if known.
    """

    code: ClassVar[ErrorCode]

    def __init__(self, msg: str, offset: int | None = None) -> None:
        self.msg = msg
        self.offset = offset
        if offset is None:
            super().__init__(msg)
        else:
            super().__init__(f"{msg} (offset {offset})")


class NotSupportedError(ParseError):
    """Raised when a descriptor carries an unrecognized kind."""

    code = ErrorCode.NOT_SUPPORTED


class OutOfBoundsError(ParseError):
    """Raised when a value is requested at or past the end of input."""

    code = ErrorCode.OUT_OF_BOUNDS


class BadFormatError(ParseError):
    """Raised when the input does not match the expected grammar."""

    code = ErrorCode.BAD_FORMAT


class BadSpecError(ParseError):
    """Raised when a descriptor is malformed."""

    code = ErrorCode.BAD_SPEC


class PropertyNotFoundError(ParseError):
    """Raised in strict mode for an object key missing from the descriptor."""

    code = ErrorCode.PROPERTY_NOT_FOUND


class NestingTooDeepError(ParseError):
    """Raised when the input nests deeper than the configured limit."""

    code = ErrorCode.TOO_DEEP

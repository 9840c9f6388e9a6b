"""Descriptors built from annotated dataclasses."""

import dataclasses
import types
import typing
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from .arrays import FixedArray
from .errors import BadSpecError
from .types import (
    BOOL,
    FLOAT,
    INT,
    STRING,
    UNKNOWN,
    Allocator,
    Deallocator,
    PropertyDescriptor,
    TypeDescriptor,
    array_of,
    object_of,
)


@dataclass(frozen=True)
class FieldInfo:
    """Metadata for a record field."""

    descriptor: TypeDescriptor | None = None
    key: str | None = None  # JSON key, when it differs from the field name


# Sentinel for missing default
_MISSING: Any = dataclasses.MISSING

_ARRAY_ORIGINS = (list, tuple, Sequence, FixedArray)


def json_field(
    descriptor: TypeDescriptor | None = None,
    *,
    key: str | None = None,
    default: Any = _MISSING,
    default_factory: Any = _MISSING,
) -> Any:
    """Define a record field with decoding metadata.

    Args:
        descriptor: Descriptor for the field. Inferred from the annotation
            when omitted.
        key: JSON key matched against object properties. Defaults to the
            field name.
        default: Default value for the field.
        default_factory: Factory function for default value.

    Returns:
        A dataclass field with jsonfill metadata attached.
    """
    metadata = {"jsonfill": FieldInfo(descriptor, key)}

    if default is not _MISSING:
        return field(default=default, metadata=metadata)
    if default_factory is not _MISSING:
        return field(default_factory=default_factory, metadata=metadata)
    return field(metadata=metadata)


def describe(
    cls: type,
    *,
    allocator: Allocator | None = None,
    deallocator: Deallocator | None = None,
) -> TypeDescriptor:
    """Build an object descriptor from a dataclass.

    Each field becomes a property. A descriptor given with json_field() is
    used as is; otherwise one is derived from the annotation: ``int``,
    ``float``, ``str``, ``bool``, ``Any``, nested dataclasses, ``X | None``
    and ``list[X]``, ``tuple[X, ...]``, ``Sequence[X]`` or ``FixedArray[X]``.

    Example:
        @dataclass
        class Point:
            x: float = 0.0
            y: float = 0.0
            label: str = json_field(key="name", default="")

        POINT = describe(Point)
    """
    return _describe(cls, allocator, deallocator, ())


def _describe(
    cls: type,
    allocator: Allocator | None,
    deallocator: Deallocator | None,
    stack: tuple[type, ...],
) -> TypeDescriptor:
    if not isinstance(cls, type) or not dataclasses.is_dataclass(cls):
        raise BadSpecError(f"{cls!r} is not a dataclass")
    if cls in stack:
        raise BadSpecError(f"{cls.__name__} is recursive")
    stack = (*stack, cls)

    hints = typing.get_type_hints(cls)
    properties: list[PropertyDescriptor] = []

    for f in dataclasses.fields(cls):
        info = f.metadata.get("jsonfill", FieldInfo())
        descriptor = info.descriptor
        if descriptor is None:
            descriptor = _from_hint(hints.get(f.name, Any), stack, f"{cls.__name__}.{f.name}")
        properties.append(PropertyDescriptor(info.key or f.name, descriptor, f.name))

    return object_of(cls, properties, allocator=allocator, deallocator=deallocator)


def _from_hint(hint: Any, stack: tuple[type, ...], where: str) -> TypeDescriptor:
    if hint is Any or hint is object:
        return UNKNOWN
    if hint is bool:
        return BOOL
    if hint is int:
        return INT
    if hint is float:
        return FLOAT
    if hint is str:
        return STRING

    origin = typing.get_origin(hint)
    args = typing.get_args(hint)

    if origin is typing.Union or origin is types.UnionType:
        members = [a for a in args if a is not type(None)]
        if len(members) != 1:
            raise BadSpecError(f"Unsupported union {hint!r} for {where}")
        return _from_hint(members[0], stack, where)

    if origin in _ARRAY_ORIGINS:
        if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
            raise BadSpecError(f"Only tuple[X, ...] is supported for {where}")
        if not args:
            raise BadSpecError(f"Array annotation for {where} needs an element type")
        return array_of(_from_hint(args[0], stack, where))

    if isinstance(hint, type) and dataclasses.is_dataclass(hint):
        return _describe(hint, None, None, stack)

    raise BadSpecError(f"Unsupported annotation {hint!r} for {where}")

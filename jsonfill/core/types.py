"""Runtime type descriptors for jsonfill records.

These dataclasses describe the shape of the native values a JSON document is
decoded into. The decoder never inspects the target objects on its own: a
record field is only written because a descriptor says it exists.
"""

import dataclasses
import inspect
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from .errors import BadSpecError

__all__ = [
    "Kind",
    "TypeDescriptor",
    "PropertyDescriptor",
    "ObjectDescriptor",
    "INT",
    "FLOAT",
    "STRING",
    "BOOL",
    "UNKNOWN",
    "array_of",
    "object_of",
]

Setter = Callable[[Any, Any], None]
Allocator = Callable[[], Any]
Deallocator = Callable[[Any], None]


class Kind(IntEnum):
    """Closed set of descriptor kinds."""

    INT = 0
    FLOAT = 1
    STRING = 3
    BOOL = 4
    ARRAY = 5
    OBJECT = 6
    UNKNOWN = 7


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """Describes one value: a scalar, an array of ``element`` or a ``record``."""

    kind: Kind
    element: "TypeDescriptor | None" = None
    record: "ObjectDescriptor | None" = None

    def __repr__(self) -> str:
        if self.kind == Kind.ARRAY:
            return f"array_of({self.element!r})"
        if self.kind == Kind.OBJECT and self.record is not None:
            return f"object_of({self.record.record_type.__name__})"
        try:
            return Kind(self.kind).name
        except ValueError:
            return f"TypeDescriptor(kind={self.kind!r})"


@dataclass(frozen=True, slots=True)
class PropertyDescriptor:
    """Binds a JSON key to a record field.

    ``field`` defaults to ``name``. The setter is generated by the owning
    ObjectDescriptor, since how a field is written depends on the record type.
    """

    name: str
    descriptor: TypeDescriptor
    field: str | None = None
    setter: Setter | None = dataclasses.field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class ObjectDescriptor:
    """Describes a record type and the properties decoded into it.

    Attributes:
        record_type: Class of the records. Its declared fields are the record
            layout; ``dict`` subclasses accept any field.
        properties: Ordered property descriptors. ``(name, descriptor)`` and
            ``(name, descriptor, field)`` tuples are accepted and normalized.
        allocator: Creates an empty record. Defaults to a zero-initialized
            instance of ``record_type``.
        deallocator: Called with a record that is discarded because its parse
            (or the parse of an enclosing array) failed.
    """

    record_type: type
    properties: tuple[PropertyDescriptor, ...] = ()
    allocator: Allocator | None = None
    deallocator: Deallocator | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.record_type, type):
            raise BadSpecError(f"record_type must be a class, not {self.record_type!r}")

        declared = _declared_fields(self.record_type)
        bound: list[PropertyDescriptor] = []
        names: set[str] = set()

        for prop in self.properties:
            if isinstance(prop, tuple):
                prop = PropertyDescriptor(*prop)
            if not isinstance(prop, PropertyDescriptor):
                raise BadSpecError(f"Invalid property descriptor {prop!r}")
            if not isinstance(prop.descriptor, TypeDescriptor):
                raise BadSpecError(f"Property {prop.name!r} has no type descriptor")
            if prop.name in names:
                raise BadSpecError(f"Duplicate property {prop.name!r}")
            names.add(prop.name)

            field_name = prop.field or prop.name
            if declared is not None and field_name not in declared:
                raise BadSpecError(
                    f"{self.record_type.__name__} has no field {field_name!r}"
                )
            bound.append(
                dataclasses.replace(
                    prop, field=field_name, setter=_make_setter(self.record_type, field_name)
                )
            )

        object.__setattr__(self, "properties", tuple(bound))

    def resolve(self, name: str) -> PropertyDescriptor | None:
        """Find the property matching a JSON key exactly."""
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None


def _declared_fields(record_type: type) -> frozenset[str] | None:
    """Return the field names a record type declares, or None if open."""
    if issubclass(record_type, dict):
        return None
    if dataclasses.is_dataclass(record_type):
        return frozenset(f.name for f in dataclasses.fields(record_type))

    names: set[str] = set()
    for klass in reversed(record_type.__mro__):
        names.update(inspect.get_annotations(klass))
        slots = klass.__dict__.get("__slots__", ())
        names.update((slots,) if isinstance(slots, str) else slots)
    return frozenset(names)


def _make_setter(record_type: type, field_name: str) -> Setter:
    if issubclass(record_type, dict):

        def set_item(record: Any, value: Any) -> None:
            record[field_name] = value

        return set_item

    if dataclasses.is_dataclass(record_type) and record_type.__dataclass_params__.frozen:

        def set_frozen(record: Any, value: Any) -> None:
            object.__setattr__(record, field_name, value)

        return set_frozen

    def set_attr(record: Any, value: Any) -> None:
        setattr(record, field_name, value)

    return set_attr


INT = TypeDescriptor(Kind.INT)
FLOAT = TypeDescriptor(Kind.FLOAT)
STRING = TypeDescriptor(Kind.STRING)
BOOL = TypeDescriptor(Kind.BOOL)
UNKNOWN = TypeDescriptor(Kind.UNKNOWN)


def array_of(element: TypeDescriptor | None) -> TypeDescriptor:
    """Describe an array whose elements all share one descriptor."""
    return TypeDescriptor(Kind.ARRAY, element=element)


def object_of(
    record_type: type,
    properties: Iterable[PropertyDescriptor | tuple] = (),
    *,
    allocator: Allocator | None = None,
    deallocator: Deallocator | None = None,
) -> TypeDescriptor:
    """Describe a record decoded from a JSON object."""
    record = ObjectDescriptor(
        record_type,
        tuple(properties),
        allocator=allocator,
        deallocator=deallocator,
    )
    return TypeDescriptor(Kind.OBJECT, record=record)

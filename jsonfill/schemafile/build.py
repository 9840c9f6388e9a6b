"""Build runtime descriptors from a parsed schema, without generating code."""

from dataclasses import field, make_dataclass
from functools import partial
from typing import Any

from jsonfill.core.arrays import FixedArray
from jsonfill.core.records import zero_value
from jsonfill.core.types import (
    BOOL,
    FLOAT,
    INT,
    STRING,
    UNKNOWN,
    Kind,
    PropertyDescriptor,
    TypeDescriptor,
    array_of,
    object_of,
)

from .parser import dependency_order
from .types import Schema, SchemaType

SCALAR_DESCRIPTORS: dict[str, TypeDescriptor] = {
    "int": INT,
    "float": FLOAT,
    "string": STRING,
    "bool": BOOL,
    "any": UNKNOWN,
}

PYTHON_TYPES: dict[Kind, Any] = {
    Kind.INT: int,
    Kind.FLOAT: float,
    Kind.STRING: str,
    Kind.BOOL: bool,
    Kind.UNKNOWN: Any,
}


def python_type(descriptor: TypeDescriptor) -> Any:
    """Annotation used for a field holding values of this descriptor."""
    if descriptor.kind == Kind.ARRAY:
        return FixedArray
    if descriptor.kind == Kind.OBJECT and descriptor.record is not None:
        return descriptor.record.record_type | None
    return PYTHON_TYPES[descriptor.kind]


def _resolve(t: SchemaType, built: dict[str, TypeDescriptor]) -> TypeDescriptor:
    descriptor = SCALAR_DESCRIPTORS[t.name] if t.name in SCALAR_DESCRIPTORS else built[t.name]
    for _ in range(t.dims):
        descriptor = array_of(descriptor)
    return descriptor


def build_descriptors(schema: Schema) -> dict[str, TypeDescriptor]:
    """Create a dataclass and an object descriptor for every schema record.

    Records are built in dependency order so nested records resolve to
    descriptors that already exist.

    Returns:
        Descriptors keyed by record name, in schema order.
    """
    built: dict[str, TypeDescriptor] = {}

    for record in dependency_order(schema):
        fields: list[tuple[str, Any, Any]] = []
        properties: list[PropertyDescriptor] = []

        for member in record.members:
            descriptor = _resolve(member.type, built)
            fields.append(
                (
                    member.name,
                    python_type(descriptor),
                    field(default_factory=partial(zero_value, descriptor)),
                )
            )
            properties.append(PropertyDescriptor(member.json_key, descriptor, member.name))

        record_type = make_dataclass(record.name, fields)
        built[record.name] = object_of(record_type, properties)

    return {record.name: built[record.name] for record in schema.records}

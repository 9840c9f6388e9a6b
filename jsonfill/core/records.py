"""Allocation and release of decoded records."""

import dataclasses
from typing import Any

from .arrays import FixedArray
from .sizes import element_stride
from .types import Kind, ObjectDescriptor, PropertyDescriptor, TypeDescriptor


def zero_value(descriptor: TypeDescriptor) -> Any:
    """Value a field holds before anything is decoded into it."""
    kind = descriptor.kind
    if kind == Kind.INT:
        return 0
    if kind == Kind.FLOAT:
        return 0.0
    if kind == Kind.STRING:
        return ""
    if kind == Kind.BOOL:
        return False
    if kind == Kind.ARRAY:
        if descriptor.element is None:
            return FixedArray()
        return FixedArray(stride=element_stride(descriptor.element))
    return None


def zeroed_record(record: ObjectDescriptor) -> Any:
    """Create a record with every field set to its default or zero value.

    The record type's ``__init__`` is bypassed, so dataclasses with required
    fields can be used as targets.
    """
    record_type = record.record_type
    by_field = {prop.field: prop for prop in record.properties}

    if issubclass(record_type, dict):
        instance = record_type()
        for prop in record.properties:
            instance[prop.field] = zero_value(prop.descriptor)
        return instance

    instance = record_type.__new__(record_type)

    if dataclasses.is_dataclass(record_type):
        for f in dataclasses.fields(record_type):
            if f.default is not dataclasses.MISSING:
                value = f.default
            elif f.default_factory is not dataclasses.MISSING:
                value = f.default_factory()
            elif f.name in by_field:
                value = zero_value(by_field[f.name].descriptor)
            else:
                value = None
            object.__setattr__(instance, f.name, value)
        return instance

    for prop in record.properties:
        object.__setattr__(instance, prop.field, zero_value(prop.descriptor))
    return instance


def allocate_record(record: ObjectDescriptor) -> Any:
    """Create an empty record through the allocator hook or zeroed default."""
    if record.allocator is not None:
        return record.allocator()
    return zeroed_record(record)


def field_value(record: ObjectDescriptor, instance: Any, prop: PropertyDescriptor) -> Any:
    """Read back the value a property's setter wrote."""
    if issubclass(record.record_type, dict):
        return instance.get(prop.field)
    return getattr(instance, prop.field, None)


def release_record(record: ObjectDescriptor, instance: Any) -> None:
    """Release a discarded record.

    A record with a deallocator hands itself, and everything it holds, to the
    hook. Without one its fields are released in turn, so records nested
    inside it still reach their own deallocators.
    """
    if instance is None:
        return
    if record.deallocator is not None:
        record.deallocator(instance)
        return
    for prop in record.properties:
        if needs_release(prop.descriptor):
            release_value(prop.descriptor, field_value(record, instance, prop))


def needs_release(descriptor: TypeDescriptor | None) -> bool:
    """Check whether discarding a value of this descriptor runs any hook."""
    if descriptor is None:
        return False
    if descriptor.kind == Kind.OBJECT:
        record = descriptor.record
        if record is None:
            return False
        return record.deallocator is not None or any(
            needs_release(prop.descriptor) for prop in record.properties
        )
    if descriptor.kind == Kind.ARRAY:
        return needs_release(descriptor.element)
    return False


def release_value(descriptor: TypeDescriptor, value: Any) -> None:
    """Release a discarded value: records go to their deallocator, arrays recurse."""
    if value is None:
        return
    if descriptor.kind == Kind.OBJECT and descriptor.record is not None:
        release_record(descriptor.record, value)
    elif descriptor.kind == Kind.ARRAY and descriptor.element is not None:
        for item in value:
            release_value(descriptor.element, item)

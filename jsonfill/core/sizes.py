"""Size and layout calculation for descriptors and records."""

from dataclasses import dataclass

from .errors import BadSpecError, NotSupportedError
from .types import Kind, ObjectDescriptor, TypeDescriptor

# Bytes a scalar value occupies inside its owning record
PRIMITIVE_SIZES: dict[Kind, int] = {
    Kind.INT: 8,  # signed 64-bit
    Kind.FLOAT: 8,  # IEEE 754 double
    Kind.BOOL: 1,
    Kind.STRING: 8,  # reference to owned text
    Kind.UNKNOWN: 0,  # never stored
}

# Length plus reference to the element buffer
ARRAY_HEADER_SIZE = 16

# array.array type codes for elements stored in a contiguous buffer
TYPECODES: dict[Kind, str] = {
    Kind.INT: "q",
    Kind.FLOAT: "d",
    Kind.BOOL: "B",
}

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


@dataclass(frozen=True)
class FieldLayout:
    """Placement of one property inside its record."""

    name: str
    field: str
    kind: Kind
    offset: int
    size: int


@dataclass(frozen=True)
class RecordLayout:
    """Packed layout of a record."""

    name: str
    size: int
    fields: tuple[FieldLayout, ...]


class LayoutCalculator:
    """Calculate footprints and record layouts (with caching)."""

    def __init__(self) -> None:
        self._cache: dict[ObjectDescriptor, RecordLayout] = {}

    def footprint(self, descriptor: TypeDescriptor) -> int:
        """Bytes a value of this descriptor occupies inside a record."""
        if not isinstance(descriptor, TypeDescriptor):
            raise NotSupportedError(f"Not a type descriptor: {descriptor!r}")

        if descriptor.kind in PRIMITIVE_SIZES:
            return PRIMITIVE_SIZES[descriptor.kind]

        if descriptor.kind == Kind.ARRAY:
            return ARRAY_HEADER_SIZE

        if descriptor.kind == Kind.OBJECT:
            if descriptor.record is None:
                raise BadSpecError("Object descriptor has no record descriptor")
            return self.record_layout(descriptor.record).size

        raise NotSupportedError(f"Unsupported descriptor kind {descriptor.kind!r}")

    def record_layout(self, record: ObjectDescriptor) -> RecordLayout:
        """Lay properties out sequentially, in declaration order.

        Zero-size fields take no bytes, so a trailing one sits at the record size.
        """
        if record in self._cache:
            return self._cache[record]

        offset = 0
        fields: list[FieldLayout] = []
        for prop in record.properties:
            size = self.footprint(prop.descriptor)
            fields.append(
                FieldLayout(prop.name, prop.field or prop.name, prop.descriptor.kind, offset, size)
            )
            offset += size

        layout = RecordLayout(record.record_type.__name__, offset, tuple(fields))
        self._cache[record] = layout
        return layout


def footprint(descriptor: TypeDescriptor) -> int:
    """Calculate the footprint of a descriptor in bytes."""
    return LayoutCalculator().footprint(descriptor)


def element_stride(descriptor: TypeDescriptor) -> int:
    """Stride of one array element; every element of an array shares it."""
    return footprint(descriptor)


def record_layout(record: ObjectDescriptor) -> RecordLayout:
    """Calculate the packed layout of a record."""
    return LayoutCalculator().record_layout(record)

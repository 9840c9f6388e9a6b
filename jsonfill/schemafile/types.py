"""Type definitions for parsed schema files."""

from dataclasses import dataclass

from dataclasses_json import DataClassJsonMixin


@dataclass
class SchemaType(DataClassJsonMixin):
    """A built-in or record type, with one array level per ``[]`` suffix."""

    name: str
    dims: int = 0

    def __str__(self) -> str:
        return self.name + "[]" * self.dims


@dataclass
class SchemaAnnotation(DataClassJsonMixin):
    """Represents an annotation on a record member, e.g. ``@key("id")``."""

    name: str
    value: str


@dataclass
class SchemaMember(DataClassJsonMixin):
    """Represents a member of a record.

    ``key`` is the JSON property name when it differs from the member name.
    """

    name: str
    type: SchemaType
    key: str | None
    annotations: list[SchemaAnnotation]

    @property
    def json_key(self) -> str:
        return self.key or self.name


@dataclass
class SchemaRecord(DataClassJsonMixin):
    """Represents a record definition."""

    name: str
    members: list[SchemaMember]


@dataclass
class Schema(DataClassJsonMixin):
    """Represents a complete schema file."""

    records: list[SchemaRecord]

    def record(self, name: str) -> SchemaRecord | None:
        for record in self.records:
            if record.name == name:
                return record
        return None


BUILTIN_TYPES = frozenset(
    [
        "int",
        "float",
        "string",
        "bool",
        "any",
    ]
)

ANNOTATIONS = frozenset(["key"])

# Globals of generated modules; a record or member with one of these names
# would shadow it inside the class bodies.
RESERVED_NAMES = frozenset(
    [
        "Any",
        "DESCRIPTORS",
        "FixedArray",
        "bool",
        "dataclass",
        "describe",
        "field",
        "float",
        "int",
        "json_field",
        "str",
    ]
)


def is_builtin(t: SchemaType) -> bool:
    """Check if a type is a built-in type."""
    return t.name in BUILTIN_TYPES

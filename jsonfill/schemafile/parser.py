"""Schema definition parser using Lark."""

import keyword
import os
from dataclasses import dataclass
from typing import Any, TypeVar

from lark import Lark, Token
from lark.visitors import Transformer

from jsonfill.core.scanners import scan_string

from .types import (
    ANNOTATIONS,
    BUILTIN_TYPES,
    RESERVED_NAMES,
    Schema,
    SchemaAnnotation,
    SchemaMember,
    SchemaRecord,
    SchemaType,
    is_builtin,
)

_g_parser: Lark | None = None


class ValidationError(RuntimeError):
    """Raised when schema validation fails."""


@dataclass
class _Name:
    value: str


TFilter = TypeVar("TFilter", bound=object)


def _filter(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


def _find_one(args: list[Any], class_type: type[object]) -> Any:
    filtered = _filter(args, class_type)
    if len(filtered) == 0:
        return None
    if len(filtered) > 1:
        raise RuntimeError(f"Found more than one {class_type}")

    if hasattr(filtered[0], "value"):
        return filtered[0].value
    return filtered[0]


class TreeTransformer(Transformer):
    """Transform parse tree into schema types."""

    def start(self, args: list[Any]) -> Schema:
        return Schema(records=_filter(args, SchemaRecord))

    def record(self, args: list[Any]) -> SchemaRecord:
        return SchemaRecord(name=args[0].value, members=_filter(args, SchemaMember))

    def member(self, args: list[Any]) -> SchemaMember:
        annotations = _filter(args, SchemaAnnotation)
        keys = [a.value for a in annotations if a.name == "key"]
        return SchemaMember(
            name=_find_one(args, _Name),
            type=_find_one(args, SchemaType),
            key=keys[-1] if keys else None,
            annotations=annotations,
        )

    def annotation(self, args: list[Any]) -> SchemaAnnotation:
        # ESCAPED_STRING follows JSON string syntax, so decode it as JSON
        value, _ = scan_string(str(args[1]).encode("utf-8"), 0)
        return SchemaAnnotation(name=args[0].value, value=value)

    def type(self, args: list[Any]) -> SchemaType:
        dims = sum(1 for arg in args if isinstance(arg, Token) and arg.type == "ARRAY")
        return SchemaType(name=args[0].value, dims=dims)

    def NAME(self, token: Token) -> _Name:  # noqa: N802
        return _Name(value=str(token))


def dependency_order(schema: Schema) -> list[SchemaRecord]:
    """Order records so every record comes after the records it uses.

    Raises:
        ValidationError: If a record refers to itself, directly or not.
    """
    ordered: list[SchemaRecord] = []
    done: set[str] = set()
    visiting: list[str] = []

    def visit(record: SchemaRecord) -> None:
        if record.name in done:
            return
        if record.name in visiting:
            cycle = " -> ".join([*visiting[visiting.index(record.name) :], record.name])
            raise ValidationError(f"Recursive record definition: {cycle}")
        visiting.append(record.name)
        for member in record.members:
            dependency = schema.record(member.type.name)
            if dependency is not None:
                visit(dependency)
        visiting.pop()
        done.add(record.name)
        ordered.append(record)

    for record in schema.records:
        visit(record)
    return ordered


def validate(schema: Schema) -> None:
    """Validate a parsed schema."""
    record_names: set[str] = set()

    for record in schema.records:
        if record.name in BUILTIN_TYPES:
            raise ValidationError(f"Record name {record.name} is a built-in type")
        if record.name in RESERVED_NAMES:
            raise ValidationError(f"Record name {record.name} is reserved in generated code")
        if record.name in record_names:
            raise ValidationError(f"Record {record.name} declared more than once")
        record_names.add(record.name)

    for record in schema.records:
        member_names: set[str] = set()
        keys: set[str] = set()
        for member in record.members:
            if keyword.iskeyword(member.name):
                raise ValidationError(
                    f"{record.name}.{member.name} is a Python keyword, "
                    'rename it and map the JSON name with @key("...")'
                )
            if member.name in RESERVED_NAMES or member.name in record_names:
                raise ValidationError(
                    f"{record.name}.{member.name} shadows a name used in generated code, "
                    'rename it and map the JSON name with @key("...")'
                )
            if member.name in member_names:
                raise ValidationError(f"{record.name}.{member.name} declared more than once")
            member_names.add(member.name)

            if member.json_key in keys:
                raise ValidationError(f"{record.name} maps key {member.json_key!r} twice")
            keys.add(member.json_key)

            for annotation in member.annotations:
                if annotation.name not in ANNOTATIONS:
                    raise ValidationError(
                        f"Unknown annotation @{annotation.name} on {record.name}.{member.name}"
                    )

            if not is_builtin(member.type) and member.type.name not in record_names:
                raise ValidationError(
                    f"{record.name}.{member.name} has unknown type {member.type.name}"
                )

    dependency_order(schema)


def parse(text: str) -> Schema:
    """Parse a schema definition file."""
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/schema.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_parser = Lark(grammar, parser="lalr")

    tree = _g_parser.parse(text)
    schema = TreeTransformer().transform(tree)

    validate(schema)

    return schema

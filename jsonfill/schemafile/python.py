"""Python code generator for jsonfill schemas."""

import json

from jinja2 import Environment, PackageLoader

from .parser import dependency_order
from .types import Schema, SchemaMember, SchemaType

env = Environment(
    loader=PackageLoader("jsonfill.schemafile", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("python.py.j2")

# Map schema types to Python type annotations
PRIMITIVE_TYPE_MAP = {
    "int": "int",
    "float": "float",
    "string": "str",
    "bool": "bool",
    "any": "Any",
}

# Literal defaults for scalar fields
PRIMITIVE_DEFAULTS = {
    "int": "0",
    "float": "0.0",
    "string": '""',
    "bool": "False",
    "any": "None",
}


def _annotation(t: SchemaType) -> str:
    """Map a schema type to a Python type annotation."""
    type_name = PRIMITIVE_TYPE_MAP.get(t.name, t.name)
    if t.dims == 0:
        if t.name in PRIMITIVE_TYPE_MAP:
            return type_name
        return f"{type_name} | None"

    for _ in range(t.dims):
        type_name = f"FixedArray[{type_name}]"
    return type_name


def _field_default(member: SchemaMember) -> str:
    """Generate the default value expression for a record field."""
    t = member.type
    if t.dims > 0:
        default = "default_factory=FixedArray"
    else:
        default = f"default={PRIMITIVE_DEFAULTS.get(t.name, 'None')}"

    if member.key is not None:
        return f"json_field(key={_py_str(member.key)}, {default})"
    if t.dims > 0:
        return f"field({default})"
    return default.removeprefix("default=")


def _py_str(value: str) -> str:
    """Render a string as a double-quoted Python literal."""
    return json.dumps(value, ensure_ascii=False)


def _uses_any(schema: Schema) -> bool:
    return any(m.type.name == "any" for r in schema.records for m in r.members)


def render(schema: Schema, source: str | None = None) -> str:
    """Render a schema to Python source declaring dataclasses and their descriptors."""
    return template.render(
        schema=schema,
        records=dependency_order(schema),
        source=source,
        uses_any=_uses_any(schema),
        annotation=_annotation,
        field_default=_field_default,
        py_str=_py_str,
        BLANK_LINE="",
    )

"""Command-line interface for decoding JSON against schema files."""

from __future__ import annotations

import json
import sys
from typing import TYPE_CHECKING, BinaryIO

import click
from lark.exceptions import UnexpectedInput
from rich.console import Console
from rich.pretty import Pretty
from rich.table import Table

from jsonfill.core import ParseError, ParseOptions, array_of, decode, parse, record_layout
from jsonfill.core.errors import ErrorCode
from jsonfill.schemafile import ValidationError, build_descriptors, python
from jsonfill.schemafile import parse as parse_schema

if TYPE_CHECKING:
    from jsonfill.core.sizes import RecordLayout
    from jsonfill.core.types import TypeDescriptor
    from jsonfill.schemafile.types import Schema


def _load_schema(schema_file: str) -> Schema:
    with open(schema_file, encoding="utf-8") as f:
        text = f.read()

    try:
        return parse_schema(text)
    except (UnexpectedInput, ValidationError) as e:
        raise click.ClickException(f"{schema_file}: {e}") from e


def _select(schema_file: str, record: str | None, array: bool) -> TypeDescriptor:
    """Pick the descriptor to decode with, exiting on a bad choice."""
    descriptors = build_descriptors(_load_schema(schema_file))

    if record is None:
        if len(descriptors) != 1:
            names = ", ".join(descriptors) or "none"
            raise click.UsageError(f"--record is required, schema declares: {names}")
        record = next(iter(descriptors))

    if record not in descriptors:
        raise click.UsageError(f"Unknown record {record}")

    descriptor = descriptors[record]
    return array_of(descriptor) if array else descriptor


def _options(strict: bool, complete: bool, max_depth: int) -> ParseOptions:
    return ParseOptions(strict=strict, complete=complete, max_depth=max_depth)


def _decode_options(f):
    """Options shared by the commands that read JSON input."""
    f = click.option(
        "--max-depth",
        type=click.IntRange(min=1),
        default=200,
        show_default=True,
        help="Deepest nesting",
    )(f)
    f = click.option(
        "--complete", is_flag=True, help="Reject data after the value (whitespace excepted)"
    )(f)
    f = click.option("--strict", is_flag=True, help="Reject properties the record lacks")(f)
    f = click.option("--array", is_flag=True, help="Input is an array of records")(f)
    f = click.option(
        "--input", "-i", "input_file", type=click.File("rb"), default="-", help="JSON input"
    )(f)
    f = click.option("--record", "-r", "record", default=None, help="Record to decode into")(f)
    f = click.option("--schema", "-s", "schema_file", required=True, help="Schema file")(f)
    return f


@click.group()
def cli() -> None:
    """jsonfill schema tools."""


@cli.command("parse")
@_decode_options
def parse_cmd(
    schema_file: str,
    record: str | None,
    input_file: BinaryIO,
    array: bool,
    strict: bool,
    complete: bool,
    max_depth: int,
) -> None:
    """Decode JSON input into records and print them."""
    descriptor = _select(schema_file, record, array)
    data = input_file.read()

    try:
        value, end = decode(data, descriptor, options=_options(strict, complete, max_depth))
    except ParseError as e:
        err = Console(stderr=True)
        err.print(f"[bold red]{e.code.name}[/bold red] {e.msg}", highlight=False)
        if e.offset is not None:
            err.print(f"  at offset {e.offset}", style="dim")
        sys.exit(int(e.code))

    console = Console()
    console.print(Pretty(value))
    if end < len(data) and data[end:].strip():
        console.print(f"[dim]Stopped at offset {end} of {len(data)}[/dim]")


@cli.command()
@_decode_options
def check(
    schema_file: str,
    record: str | None,
    input_file: BinaryIO,
    array: bool,
    strict: bool,
    complete: bool,
    max_depth: int,
) -> None:
    """Validate JSON input against a record without building it.

    The exit status is the numeric error code, 0 on success.
    """
    descriptor = _select(schema_file, record, array)
    code = parse(input_file.read(), None, descriptor, options=_options(strict, complete, max_depth))

    console = Console(stderr=code != ErrorCode.SUCCESS)
    if code == ErrorCode.SUCCESS:
        console.print("[green]OK[/green]")
    else:
        console.print(f"[bold red]{code.name}[/bold red]")
    sys.exit(int(code))


@cli.command()
@click.option("--schema", "-s", "schema_file", required=True, help="Schema file")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(schema_file: str, output_json: bool) -> None:
    """Display record layouts and footprints."""
    schema = _load_schema(schema_file)
    descriptors = build_descriptors(schema)
    layouts = [record_layout(d.record) for d in descriptors.values() if d.record is not None]

    if output_json:
        _output_json(schema, layouts)
    else:
        _output_plain(layouts)


def _output_json(schema: Schema, layouts: list[RecordLayout]) -> None:
    """Output schema and layout info as JSON."""
    data: dict = {"schema": schema.to_dict(), "layouts": {}}

    for layout in layouts:
        data["layouts"][layout.name] = {
            "size": layout.size,
            "fields": [
                {
                    "name": f.name,
                    "field": f.field,
                    "kind": f.kind.name,
                    "offset": f.offset,
                    "size": f.size,
                }
                for f in layout.fields
            ],
        }

    print(json.dumps(data, indent=2))


def _output_plain(layouts: list[RecordLayout]) -> None:
    """Output record layouts using rich text formatting."""
    console = Console()

    for layout in layouts:
        console.print(f"[bold cyan]{layout.name}[/bold cyan] [yellow]{layout.size} bytes[/yellow]")

        table = Table(show_header=True, box=None, padding=(0, 2, 0, 2))
        table.add_column("Key", style="white")
        table.add_column("Field", style="dim")
        table.add_column("Kind", style="green")
        table.add_column("Offset", style="yellow", justify="right")
        table.add_column("Size", style="yellow", justify="right")

        for f in layout.fields:
            table.add_row(f.name, f.field, f.kind.name, str(f.offset), str(f.size))

        console.print(table)
        console.print()


@cli.command()
@click.option("--schema", "-s", "schema_file", required=True, help="Schema file")
@click.option("--output", "-o", "output_file", required=True, help="Output file")
def gen(schema_file: str, output_file: str) -> None:
    """Generate Python dataclasses and descriptors from a schema file."""
    schema = _load_schema(schema_file)
    generated_file = python.render(schema, source=schema_file)

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(generated_file)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()

"""Tests for descriptor construction and dataclass binding."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from pytest import raises

from jsonfill import (
    BOOL,
    FLOAT,
    INT,
    STRING,
    UNKNOWN,
    BadSpecError,
    FixedArray,
    Kind,
    PropertyDescriptor,
    array_of,
    decode,
    describe,
    json_field,
    object_of,
)
from jsonfill.core.records import zeroed_record


@dataclass
class Sample:
    count: int = 0
    label: str = ""


@dataclass
class Node:
    next: "Node | None" = None


def describe_object_of():
    def test_normalizes_tuples(expect):
        descriptor = object_of(Sample, [("count", INT), ("name", STRING, "label")])
        props = descriptor.record.properties
        expect(all(isinstance(p, PropertyDescriptor) for p in props)) == True
        expect([p.field for p in props]) == ["count", "label"]

    def test_resolves_names(expect):
        record = object_of(Sample, [("count", INT), ("name", STRING, "label")]).record
        expect(record.resolve("name").field) == "label"
        expect(record.resolve("label")) == None
        expect(record.resolve("Count")) == None

    def test_binds_setters(expect):
        record = object_of(Sample, [("count", INT)]).record
        sample = Sample()
        record.properties[0].setter(sample, 9)
        expect(sample.count) == 9

    def test_rejects_undeclared_fields(expect):
        with raises(BadSpecError):
            object_of(Sample, [("missing", INT)])

    def test_rejects_duplicate_names(expect):
        with raises(BadSpecError):
            object_of(Sample, [("count", INT), ("count", INT, "label")])

    def test_requires_type_descriptors(expect):
        with raises(BadSpecError):
            object_of(Sample, [("count", None)])
        with raises(BadSpecError):
            object_of(Sample, ["count"])

    def test_requires_a_class(expect):
        with raises(BadSpecError):
            object_of("Sample", [])

    def test_accepts_slotted_classes(expect):
        class Slotted:
            __slots__ = ("x",)

        value, _ = decode(b'{"x": 4}', object_of(Slotted, [("x", INT)]))
        expect(value.x) == 4

    def test_accepts_annotated_classes(expect):
        class Annotated:
            x: float
            y: float

        descriptor = object_of(Annotated, [("x", FLOAT), ("y", FLOAT)])
        value, _ = decode(b'{"y": 2, "x": 1.5}', descriptor)
        expect((value.x, value.y)) == (1.5, 2.0)

    def test_compares_by_structure(expect):
        expect(array_of(INT)) == array_of(INT)
        expect(array_of(INT) == array_of(FLOAT)) == False

    def test_has_readable_repr(expect):
        expect(repr(array_of(array_of(INT)))) == "array_of(array_of(INT))"
        expect(repr(object_of(Sample, []))) == "object_of(Sample)"
        expect(repr(UNKNOWN)) == "UNKNOWN"


def describe_zeroed_records():
    def test_bypasses_init(expect):
        @dataclass
        class Required:
            a: int
            b: list = field(default_factory=list)

        record = object_of(Required, [("a", INT)]).record
        instance = zeroed_record(record)
        expect(instance.a) == 0
        expect(instance.b) == []

    def test_zeroes_plain_classes(expect):
        class Plain:
            n: int
            s: str
            items: Any

        record = object_of(Plain, [("n", INT), ("s", STRING), ("items", array_of(INT))]).record
        instance = zeroed_record(record)
        expect((instance.n, instance.s)) == (0, "")
        expect(instance.items) == FixedArray()
        expect(instance.items.stride) == 8


def describe_describe():
    def test_maps_annotations(expect):
        @dataclass
        class Point:
            x: float = 0.0
            y: float = 0.0
            visible: bool = True
            name: str = ""
            weight: int = 0
            extra: Any = None

        props = describe(Point).record.properties
        expect([p.descriptor for p in props]) == [FLOAT, FLOAT, BOOL, STRING, INT, UNKNOWN]

    def test_maps_arrays(expect):
        @dataclass
        class Grid:
            rows: list[list[float]] = field(default_factory=list)
            names: tuple[str, ...] = ()
            ids: Sequence[int] = ()
            flags: FixedArray[bool] = field(default_factory=FixedArray)

        props = describe(Grid).record.properties
        expect([p.descriptor for p in props]) == [
            array_of(array_of(FLOAT)),
            array_of(STRING),
            array_of(INT),
            array_of(BOOL),
        ]

    def test_maps_nested_dataclasses(expect):
        @dataclass
        class Child:
            value: int = 0

        @dataclass
        class Parent:
            child: Child | None = None
            children: list[Child] = field(default_factory=list)

        descriptor = describe(Parent)
        child, children = descriptor.record.properties
        expect(child.descriptor.kind) == Kind.OBJECT
        expect(child.descriptor.record.record_type) == Child
        expect(children.descriptor.element.record.record_type) == Child

        value, _ = decode(b'{"child": {"value": 1}, "children": [{"value": 2}]}', descriptor)
        expect(value) == Parent(Child(1), [Child(2)])

    def test_renames_keys(expect):
        @dataclass
        class Renamed:
            kind: str = json_field(key="type", default="")

        value, _ = decode(b'{"type": "x", "kind": "y"}', describe(Renamed))
        expect(value.kind) == "x"

    def test_accepts_explicit_descriptors(expect):
        @dataclass
        class Loose:
            payload: Any = json_field(array_of(INT), default=None)

        expect(describe(Loose).record.properties[0].descriptor) == array_of(INT)

    def test_passes_hooks(expect):
        released = []
        descriptor = describe(Sample, deallocator=released.append)
        expect(descriptor.record.deallocator) == released.append

    def test_rejects_recursion(expect):
        with raises(BadSpecError):
            describe(Node)

    def test_rejects_unsupported_annotations(expect):
        @dataclass
        class Mapping:
            values: dict[str, int] = field(default_factory=dict)

        with raises(BadSpecError):
            describe(Mapping)

    def test_rejects_ambiguous_unions(expect):
        @dataclass
        class Either:
            value: int | str = 0

        with raises(BadSpecError):
            describe(Either)

    def test_rejects_fixed_tuples(expect):
        @dataclass
        class Pair:
            value: tuple[int, int] = (0, 0)

        with raises(BadSpecError):
            describe(Pair)

    def test_rejects_non_dataclasses(expect):
        with raises(BadSpecError):
            describe(int)

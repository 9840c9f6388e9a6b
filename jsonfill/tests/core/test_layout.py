"""Tests for footprint and layout calculation."""

from dataclasses import dataclass

from pytest import raises

from jsonfill import BOOL, FLOAT, INT, STRING, UNKNOWN, Kind, TypeDescriptor, array_of, object_of
from jsonfill.core.errors import BadSpecError, NotSupportedError
from jsonfill.core.sizes import LayoutCalculator, element_stride, footprint, record_layout


@dataclass
class Reading:
    id: int = 0
    value: float = 0.0
    ok: bool = False
    label: str = ""


@dataclass
class Batch:
    first: Reading | None = None
    readings: object = None


READING = object_of(Reading, [("id", INT), ("value", FLOAT), ("ok", BOOL), ("label", STRING)])
BATCH = object_of(Batch, [("first", READING), ("readings", array_of(READING))])


def describe_footprint():
    def test_sizes_scalars(expect):
        expect(footprint(INT)) == 8
        expect(footprint(FLOAT)) == 8
        expect(footprint(BOOL)) == 1
        expect(footprint(STRING)) == 8
        expect(footprint(UNKNOWN)) == 0

    def test_sizes_arrays_as_headers(expect):
        expect(footprint(array_of(INT))) == 16
        expect(footprint(array_of(array_of(READING)))) == 16

    def test_sizes_records_by_content(expect):
        expect(footprint(READING)) == 25
        expect(footprint(BATCH)) == 41

    def test_strides_by_element(expect):
        expect(element_stride(READING)) == 25
        expect(element_stride(BOOL)) == 1

    def test_rejects_unknown_kinds(expect):
        with raises(NotSupportedError):
            footprint(TypeDescriptor(2))

    def test_rejects_object_without_record(expect):
        with raises(BadSpecError):
            footprint(TypeDescriptor(Kind.OBJECT))


def describe_record_layout():
    def test_places_fields_sequentially(expect):
        layout = record_layout(READING.record)
        expect(layout.name) == "Reading"
        expect(layout.size) == 25
        expect([(f.name, f.offset, f.size) for f in layout.fields]) == [
            ("id", 0, 8),
            ("value", 8, 8),
            ("ok", 16, 1),
            ("label", 17, 8),
        ]

    def test_keeps_fields_within_record(expect):
        layout = record_layout(BATCH.record)
        for f in layout.fields:
            expect(f.offset >= 0) == True
            expect(f.offset + f.size <= layout.size) == True

    def test_places_zero_size_fields_without_storage(expect):
        @dataclass
        class Tagged:
            a: int = 0
            m: object = None

        layout = record_layout(object_of(Tagged, [("a", INT), ("m", UNKNOWN)]).record)
        expect(layout.size) == 8
        expect([(f.name, f.offset, f.size) for f in layout.fields]) == [("a", 0, 8), ("m", 8, 0)]
        for f in layout.fields:
            if f.size:
                expect(0 <= f.offset < layout.size) == True
            expect(f.offset + f.size <= layout.size) == True

    def test_reports_keys_and_fields(expect):
        descriptor = object_of(Reading, [("reading-id", INT, "id")])
        (f,) = record_layout(descriptor.record).fields
        expect((f.name, f.field, f.kind)) == ("reading-id", "id", Kind.INT)

    def test_caches_layouts(expect):
        calculator = LayoutCalculator()
        first = calculator.record_layout(READING.record)
        expect(calculator.record_layout(READING.record) is first) == True

"""Tests for CLI interface."""

import json
import os
import tempfile

from click.testing import CliRunner

from jsonfill.schemafile.cli import cli

STATION = b'{"station-id": 3, "name": "Delta", "tags": ["x"], "extra": 1}'


def describe_parse_command():
    def test_prints_decoded_record(expect, schema_path):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["parse", "-s", schema_path, "-r", "Station"], input=STATION
        )
        expect(result.exit_code) == 0
        expect("Station(" in result.output) == True
        expect("'Delta'" in result.output) == True

    def test_decodes_arrays_of_records(expect, schema_path):
        runner = CliRunner()
        result = runner.invoke(
            cli,
            ["parse", "-s", schema_path, "-r", "Point", "--array"],
            input=b'[{"lat": 1, "lon": 2}]',
        )
        expect(result.exit_code) == 0
        expect("Point(lat=1.0, lon=2.0)" in result.output) == True

    def test_reads_input_file(expect, schema_path):
        runner = CliRunner()
        with tempfile.NamedTemporaryFile(suffix=".json", delete=False) as f:
            f.write(b'{"value": 1.5, "valid": true}')
            input_file = f.name

        try:
            result = runner.invoke(
                cli, ["parse", "-s", schema_path, "-r", "Reading", "-i", input_file]
            )
            expect(result.exit_code) == 0
            expect("valid=True" in result.output) == True
        finally:
            os.unlink(input_file)

    def test_exits_with_error_code(expect, schema_path):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["parse", "-s", schema_path, "-r", "Reading"], input=b'{"value": tru}'
        )
        expect(result.exit_code) == 3
        expect("BAD_FORMAT" in result.output) == True

    def test_honors_strict_mode(expect, schema_path):
        runner = CliRunner()
        args = ["parse", "-s", schema_path, "-r", "Station"]
        expect(runner.invoke(cli, args, input=STATION).exit_code) == 0
        expect(runner.invoke(cli, [*args, "--strict"], input=STATION).exit_code) == 5

    def test_honors_complete_mode(expect, schema_path):
        runner = CliRunner()
        args = ["parse", "-s", schema_path, "-r", "Point"]
        data = b'{"lat": 1, "lon": 2} {}'
        expect(runner.invoke(cli, args, input=data).exit_code) == 0
        expect(runner.invoke(cli, [*args, "--complete"], input=data).exit_code) == 3

    def test_requires_record_for_multi_record_schema(expect, schema_path):
        runner = CliRunner()
        result = runner.invoke(cli, ["parse", "-s", schema_path], input=STATION)
        expect(result.exit_code) == 2
        expect("--record is required" in result.output) == True

    def test_rejects_unknown_record(expect, schema_path):
        runner = CliRunner()
        result = runner.invoke(cli, ["parse", "-s", schema_path, "-r", "Nope"], input=b"{}")
        expect(result.exit_code) == 2
        expect("Unknown record Nope" in result.output) == True

    def test_reports_invalid_schema(expect):
        runner = CliRunner()
        with runner.isolated_filesystem():
            with open("bad.jfs", "w", encoding="utf-8") as f:
                f.write("record Bad { x: nothing }")
            result = runner.invoke(cli, ["parse", "-s", "bad.jfs"], input=b"{}")
        expect(result.exit_code) == 1
        expect("unknown type nothing" in result.output) == True


def describe_check_command():
    def test_reports_success(expect, schema_path):
        runner = CliRunner()
        result = runner.invoke(cli, ["check", "-s", schema_path, "-r", "Station"], input=STATION)
        expect(result.exit_code) == 0
        expect("OK" in result.output) == True

    def test_reports_failure_code(expect, schema_path):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["check", "-s", schema_path, "-r", "Station"], input=b'{"tags": [1,'
        )
        expect(result.exit_code) == 3
        expect("BAD_FORMAT" in result.output) == True

    def test_reports_empty_input(expect, schema_path):
        runner = CliRunner()
        result = runner.invoke(cli, ["check", "-s", schema_path, "-r", "Point"], input=b"")
        expect(result.exit_code) == 2
        expect("OUT_OF_BOUNDS" in result.output) == True

    def test_limits_nesting(expect, schema_path):
        runner = CliRunner()
        args = ["check", "-s", schema_path, "-r", "Station", "--max-depth", "2"]
        result = runner.invoke(cli, args, input=b'{"meta": [[1]]}')
        expect(result.exit_code) == 6

    def test_reports_input_deeper_than_the_stack(expect, schema_path):
        runner = CliRunner()
        args = ["check", "-s", schema_path, "-r", "Station", "--max-depth", "10000"]
        data = b'{"meta": ' + b"[" * 3000 + b"]" * 3000 + b"}"
        result = runner.invoke(cli, args, input=data)
        expect(result.exit_code) == 6
        expect("TOO_DEEP" in result.output) == True


def describe_info_command():
    def test_shows_layouts(expect, schema_path):
        runner = CliRunner()
        result = runner.invoke(cli, ["info", "-s", schema_path])
        expect(result.exit_code) == 0
        expect("Station" in result.output) == True
        expect("80 bytes" in result.output) == True
        expect("station-id" in result.output) == True

    def test_outputs_json(expect, schema_path):
        runner = CliRunner()
        result = runner.invoke(cli, ["info", "-s", schema_path, "--json"])
        expect(result.exit_code) == 0

        data = json.loads(result.output)
        expect(data["layouts"]["Point"]["size"]) == 16
        expect(data["layouts"]["Reading"]["size"]) == 9
        expect(data["layouts"]["Station"]["size"]) == 80
        expect(data["layouts"]["Station"]["fields"][2]) == {
            "name": "location",
            "field": "location",
            "kind": "OBJECT",
            "offset": 16,
            "size": 16,
        }
        expect(data["schema"]["records"][0]["members"][0]["key"]) == "station-id"


def describe_gen_command():
    def test_generates_python_code(expect, schema_path):
        runner = CliRunner()
        with tempfile.NamedTemporaryFile(suffix=".py", delete=False) as f:
            output_file = f.name

        try:
            result = runner.invoke(cli, ["gen", "-s", schema_path, "-o", output_file])
            expect(result.exit_code) == 0
            with open(output_file, encoding="utf-8") as f:
                content = f.read()
            expect("class Station:" in content) == True
            expect("DESCRIPTORS = {" in content) == True
        finally:
            os.unlink(output_file)

    def test_requires_output(expect, schema_path):
        runner = CliRunner()
        result = runner.invoke(cli, ["gen", "-s", schema_path])
        expect(result.exit_code) == 2

"""
Integration tests: end-to-end reads of small synthetic point files.

Covers the reference scenarios (comma-separated xyz, missing field,
wrapped payload behind a byte offset, bad tokens) and the general
properties of header-only and full reads.
"""

from __future__ import annotations

import numpy as np
import pytest

from ascii_points.converter import parse_token
from ascii_points.exceptions import FieldCountMismatchError, TokenOverflowError, TokenParseError
from ascii_points.reader import ASCIIReader, ReadState
from ascii_points.schema import FieldDescriptor, Schema
from ascii_points.tokenizer import tokenize
from tests.conftest import XYZ_CSV


@pytest.fixture()
def comma_reader(xyz_schema) -> ASCIIReader:
    reader = ASCIIReader()
    reader.set_input_fields(xyz_schema)
    reader.set_separators(",")
    return reader


@pytest.mark.integration
class TestScenarioA:
    """Three comma-separated xyz records."""

    def test_header_scan(self, comma_reader, write_points):
        cloud = comma_reader.read_header(write_points(XYZ_CSV))
        assert cloud.width == 3
        assert cloud.row_stride == 12

    def test_full_read(self, comma_reader, write_points):
        cloud = comma_reader.read(write_points(XYZ_CSV))
        assert cloud.width == 3
        assert len(cloud.data) == 36
        rows = [cloud.data[i * 12:(i + 1) * 12] for i in range(3)]
        decoded = [tuple(np.frombuffer(row, dtype="<f4").tolist()) for row in rows]
        assert decoded == [(1, 2, 3), (4, 5, 6), (7, 8, 9)]


@pytest.mark.integration
class TestScenarioB:
    """Missing third field."""

    def test_full_read_fails_without_rows(self, comma_reader, write_points):
        status, cloud = comma_reader.read_status(write_points("1,2\n"))
        assert status < 0
        assert cloud is None
        assert comma_reader.state is ReadState.FAILED
        assert isinstance(comma_reader.last_error, FieldCountMismatchError)


@pytest.mark.integration
class TestScenarioC:
    """Payload behind a 513-byte wrapper."""

    def test_both_reads_match_scenario_a(self, comma_reader, write_points):
        wrapper = bytes(range(256)) + bytes(range(256)) + b"\n"
        assert len(wrapper) == 513
        wrapped = write_points(wrapper + XYZ_CSV.encode("utf-8"), name="wrapped.txt")
        plain = write_points(XYZ_CSV, name="plain.txt")

        header = comma_reader.read_header(wrapped, offset=513)
        assert (header.width, header.row_stride) == (3, 12)

        cloud = comma_reader.read(wrapped, offset=513)
        assert cloud.data == comma_reader.read(plain).data


@pytest.mark.integration
class TestScenarioD:
    """Bad tokens."""

    def test_abc_against_int32(self):
        with pytest.raises(TokenParseError):
            parse_token("abc", "int32")

    def test_large_literal_against_int16(self):
        with pytest.raises(TokenOverflowError):
            parse_token("99999999999", "int16")

    def test_in_a_file(self, write_points):
        reader = ASCIIReader()
        reader.set_input_fields([("id", "int32"), ("level", "int16")])
        status, cloud = reader.read_status(write_points("1 2\nabc 3\n"))
        assert status == TokenParseError.status
        status, cloud = reader.read_status(write_points("1 99999999999\n", name="big.txt"))
        assert status == TokenOverflowError.status
        assert cloud is None


@pytest.mark.integration
class TestGeneralProperties:
    """Properties that hold for any schema and well-formed file."""

    SCHEMAS = [
        Schema([("x", "float32"), ("y", "float32"), ("z", "float32")]),
        Schema([("a", "int8"), ("b", "uint16"), ("c", "float64", 2)]),
        Schema([FieldDescriptor("label", "uint32")]),
    ]

    @pytest.mark.parametrize("schema", SCHEMAS, ids=["xyz", "mixed", "single"])
    def test_well_formed_file(self, schema, write_points):
        n_tokens = schema.expected_token_count
        lines = [" ".join(str(i % 100) for _ in range(n_tokens)) for i in range(7)]
        content = "\n\n".join(lines) + "\n"
        reader = ASCIIReader()
        reader.set_input_fields(schema)
        cloud = reader.read(write_points(content))
        assert cloud.width == 7
        assert len(cloud.data) == 7 * schema.row_stride

    def test_interleaved_blank_lines(self, write_points, xyz_schema):
        reader = ASCIIReader()
        reader.set_input_fields(xyz_schema)
        path = write_points("\n1 2 3\n \n\t\n4 5 6\n\n\n7 8 9\n\n")
        assert reader.read_header(path).width == 3
        assert reader.read(path).width == 3

    def test_only_separators_yields_no_tokens(self):
        assert list(tokenize(",, ,", ",")) == []

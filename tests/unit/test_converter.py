"""
Unit tests for token conversion and row packing (ascii_points.converter).
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from ascii_points.converter import pack_field, pack_row, parse_token
from ascii_points.exceptions import (
    FieldCountMismatchError,
    TokenOverflowError,
    TokenParseError,
    UnknownDatatypeError,
)
from ascii_points.schema import FieldDescriptor, Schema


class TestParseTokenIntegers:
    """Integer datatypes."""

    @pytest.mark.parametrize(
        "token, datatype, expected",
        [
            ("0", "int8", 0),
            ("-128", "int8", -128),
            ("+127", "int8", 127),
            ("255", "uint8", 255),
            ("-32768", "int16", -32768),
            ("65535", "uint16", 65535),
            ("2147483647", "int32", 2147483647),
            ("4294967295", "uint32", 4294967295),
            (" 42 ", "int32", 42),
        ],
    )
    def test_valid(self, token, datatype, expected):
        assert parse_token(token, datatype) == expected

    @pytest.mark.parametrize("token", ["abc", "1.5", "1e3", "", "0x10", "1_000", "--1", "٣"])
    def test_not_a_literal(self, token):
        with pytest.raises(TokenParseError):
            parse_token(token, "int32")

    def test_abc_against_int32(self):
        with pytest.raises(TokenParseError, match="int32"):
            parse_token("abc", "int32")

    def test_overflow_int16(self):
        with pytest.raises(TokenOverflowError, match="int16"):
            parse_token("99999999999", "int16")

    @pytest.mark.parametrize(
        "token, datatype",
        [("128", "int8"), ("-129", "int8"), ("256", "uint8"), ("-1", "uint32"), ("4294967296", "uint32")],
    )
    def test_out_of_range(self, token, datatype):
        with pytest.raises(TokenOverflowError):
            parse_token(token, datatype)

    def test_overflow_is_overflow_error(self):
        with pytest.raises(OverflowError):
            parse_token("300", "uint8")

    @pytest.mark.parametrize("token", ["9" * 5000, "-" + "9" * 5000, "1" + "0" * 25])
    def test_very_long_literal(self, token):
        with pytest.raises(TokenOverflowError, match="int32"):
            parse_token(token, "int32")

    def test_leading_zeros_are_not_length(self):
        assert parse_token("0" * 5000 + "42", "int32") == 42


class TestParseTokenFloats:
    """Float datatypes."""

    @pytest.mark.parametrize(
        "token, expected",
        [("1", 1.0), ("-2.5", -2.5), (".5", 0.5), ("3.", 3.0), ("1e-3", 1e-3), ("+4E+2", 400.0)],
    )
    def test_decimal_and_exponent(self, token, expected):
        assert parse_token(token, "float64") == pytest.approx(expected)

    def test_special_values(self):
        assert math.isnan(parse_token("nan", "float32"))
        assert parse_token("-inf", "float32") == float("-inf")
        assert parse_token("Infinity", "float64") == float("inf")

    @pytest.mark.parametrize("token", ["abc", "1.2.3", "1e", "e5", "1_000.0", "", "0x1p3", "nan1"])
    def test_not_a_literal(self, token):
        with pytest.raises(TokenParseError):
            parse_token(token, "float32")

    def test_float32_overflow(self):
        with pytest.raises(TokenOverflowError, match="float32"):
            parse_token("1e39", "float32")

    def test_float64_accepts_what_float32_cannot(self):
        assert parse_token("1e39", "float64") == pytest.approx(1e39)

    def test_float64_overflow(self):
        with pytest.raises(TokenOverflowError):
            parse_token("1e400", "float64")

    def test_unknown_datatype(self):
        with pytest.raises(UnknownDatatypeError):
            parse_token("1", "float16")


class TestPackField:
    """Tests for pack_field()."""

    def test_writes_only_own_bytes(self):
        field = FieldDescriptor("y", "int16", offset=2)
        row = bytearray(b"\xaa" * 6)
        written = pack_field(["-2"], field, row)
        assert written == 2
        assert row[:2] == b"\xaa\xaa"
        assert row[2:4] == np.array([-2], dtype="<i2").tobytes()
        assert row[4:] == b"\xaa\xaa"

    def test_multi_component_advances_cursor(self):
        field = FieldDescriptor("rgb", "uint8", count=3, offset=1)
        row = bytearray(4)
        assert pack_field(["10", "20", "30"], field, row) == 3
        assert bytes(row) == b"\x00\x0a\x14\x1e"

    def test_failure_leaves_row_untouched(self):
        field = FieldDescriptor("v", "float32", count=2, offset=0)
        row = bytearray(b"\x01" * 8)
        with pytest.raises(TokenParseError):
            pack_field(["1.0", "oops"], field, row)
        assert bytes(row) == b"\x01" * 8

    def test_wrong_component_count(self):
        field = FieldDescriptor("v", "float32", count=2, offset=0)
        with pytest.raises(FieldCountMismatchError):
            pack_field(["1.0"], field, bytearray(8))


class TestPackRow:
    """Tests for pack_row()."""

    def test_xyz_row(self, xyz_schema):
        row = pack_row(["1", "2", "3"], xyz_schema)
        assert len(row) == 12
        assert np.frombuffer(row, dtype="<f4").tolist() == [1.0, 2.0, 3.0]

    def test_mixed_schema(self):
        schema = Schema([("x", "float64"), ("rgb", "uint8", 3), ("label", "int32")])
        row = pack_row(["0.25", "1", "2", "3", "-7"], schema)
        decoded = np.frombuffer(row, dtype=schema.to_numpy_dtype())[0]
        assert decoded["x"] == 0.25
        assert decoded["rgb"].tolist() == [1, 2, 3]
        assert decoded["label"] == -7

    @pytest.mark.parametrize("tokens", [["1", "2"], ["1", "2", "3", "4"], ["1", "2", "3", "4", "5", "6"]])
    def test_token_count_mismatch(self, xyz_schema, tokens):
        """Too few, too many, and an exact multiple of the record are all rejected."""
        with pytest.raises(FieldCountMismatchError, match="Expected 3 tokens"):
            pack_row(tokens, xyz_schema)

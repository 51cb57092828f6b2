"""
Typed token conversion and row packing.

Turns the text tokens of one line into the bytes of one packed row:

1. ``parse_token()`` parses a single token as a literal of the field's
   datatype, checking the representable range.
2. ``pack_field()`` parses all components of one field and writes them,
   little-endian, at the field's byte offset in a row buffer.
3. ``pack_row()`` checks the token count and packs every field of a
   schema into a fresh row.

Malformed input is never coerced: there is no default value for a token
that does not parse, and a field's bytes are written only after all of
its components have parsed.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

import numpy as np

from ascii_points.datatypes import Datatype, numpy_dtype, to_datatype, value_range
from ascii_points.exceptions import FieldCountMismatchError, TokenOverflowError, TokenParseError
from ascii_points.schema import FieldDescriptor, Schema

_INT_PATTERN = re.compile(r"[+-]?\d+", re.ASCII)
_FLOAT_PATTERN = re.compile(
    r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|nan|inf|infinity)",
    re.IGNORECASE | re.ASCII,
)

# Longer than any supported integer type; int() is never called on such text.
_MAX_INT_DIGITS = 20


def parse_token(token: str, datatype: Datatype | int | str) -> int | float:
    """Parse one token as a literal of *datatype*.

    Integer types accept optionally-signed decimal digits. Float types
    accept decimal and exponent notation plus ``nan`` and ``inf``.

    Raises:
        TokenParseError: If the text is not a literal of the datatype.
        TokenOverflowError: If the literal is outside the datatype's range.
        UnknownDatatypeError: If *datatype* is not a known datatype.
    """
    dt = to_datatype(datatype)
    text = token.strip()
    type_name = dt.name.lower()

    if dt.is_float:
        if not _FLOAT_PATTERN.fullmatch(text):
            raise TokenParseError(f"'{token}' is not a valid {type_name} literal")
        value = float(text)
        if text.lstrip("+-").isalpha():
            return value
        with np.errstate(over="ignore"):
            narrowed = numpy_dtype(dt).type(value)
        if np.isinf(narrowed):
            raise TokenOverflowError(f"'{token}' is out of range for {type_name}")
        return value

    if not _INT_PATTERN.fullmatch(text):
        raise TokenParseError(f"'{token}' is not a valid {type_name} literal")
    low, high = value_range(dt)
    digits = text.lstrip("+-").lstrip("0") or "0"
    if len(digits) > _MAX_INT_DIGITS:
        raise TokenOverflowError(
            f"'{token[:32]}...' is out of range for {type_name} [{low}, {high}]"
        )
    value = -int(digits) if text.startswith("-") else int(digits)
    if not low <= value <= high:
        raise TokenOverflowError(
            f"'{token}' is out of range for {type_name} [{low}, {high}]"
        )
    return value


def pack_field(tokens: Sequence[str], descriptor: FieldDescriptor, row: bytearray) -> int:
    """Parse *descriptor.count* tokens and write them into *row*.

    Each component is written ``size_of(datatype)`` bytes after the
    previous one, starting at ``descriptor.offset``. Bytes outside the
    field are left untouched.

    Returns:
        The number of bytes written.

    Raises:
        FieldCountMismatchError: If ``len(tokens) != descriptor.count``.
        TokenParseError, TokenOverflowError: If a component does not parse.
    """
    if len(tokens) != descriptor.count:
        raise FieldCountMismatchError(
            f"Field '{descriptor.name}' expects {descriptor.count} token(s), "
            f"got {len(tokens)}"
        )
    values = [parse_token(token, descriptor.datatype) for token in tokens]
    data = np.array(values, dtype=numpy_dtype(descriptor.datatype)).tobytes()
    start = descriptor.offset or 0
    row[start:start + len(data)] = data
    return len(data)


def pack_row(tokens: Sequence[str], schema: Schema) -> bytes:
    """Pack the tokens of one line into a row of ``schema.row_stride`` bytes.

    Tokens are consumed in schema order; a multi-component field takes
    one token per component.

    Raises:
        FieldCountMismatchError: If the number of tokens differs from
            ``schema.expected_token_count``.
        TokenParseError, TokenOverflowError: If any token does not parse.
    """
    if len(tokens) != schema.expected_token_count:
        raise FieldCountMismatchError(
            f"Expected {schema.expected_token_count} tokens, got {len(tokens)}"
        )
    row = bytearray(schema.row_stride)
    cursor = 0
    for descriptor in schema:
        pack_field(tokens[cursor:cursor + descriptor.count], descriptor, row)
        cursor += descriptor.count
    return bytes(row)

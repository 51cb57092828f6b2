"""
Field schema model for ascii-points.

A ``Schema`` is the ordered list of ``FieldDescriptor`` entries that
describes one packed binary row. The order of descriptors is also the
order in which tokens appear on each text line.

Layout rules (checked when a ``Schema`` is built):
- Field names are non-empty and unique.
- The first field starts at byte 0 and every following field starts
  exactly where the previous one ends (no padding, no overlap).
- ``row_stride`` is the sum of ``size_of(datatype) * count`` over fields.

Descriptors may omit ``offset``; the schema then assigns contiguous
offsets in declaration order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, replace
from typing import Any

import numpy as np

from ascii_points.datatypes import Datatype, from_numpy_dtype, numpy_dtype, size_of, to_datatype
from ascii_points.exceptions import SchemaError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldDescriptor:
    """One field of a packed row.

    Attributes:
        name: Field name (e.g. ``"x"``, ``"intensity"``, ``"normal"``).
        datatype: Scalar datatype; names and integer tags are coerced.
        count: Number of scalars of *datatype* (``3`` for a 3-vector).
        offset: Byte offset of the field inside a row, or ``None`` to let
            the owning ``Schema`` place it.
    """

    name: str
    datatype: Datatype
    count: int = 1
    offset: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise SchemaError(f"Field name must be a non-empty string, got {self.name!r}")
        object.__setattr__(self, "datatype", to_datatype(self.datatype))
        if isinstance(self.count, bool) or not isinstance(self.count, int) or self.count < 1:
            raise SchemaError(
                f"Field '{self.name}' count must be a positive integer, got {self.count!r}"
            )
        if self.offset is not None and (
            isinstance(self.offset, bool) or not isinstance(self.offset, int) or self.offset < 0
        ):
            raise SchemaError(
                f"Field '{self.name}' offset must be a non-negative integer, got {self.offset!r}"
            )

    @property
    def scalar_size(self) -> int:
        """Byte width of one component."""
        return size_of(self.datatype)

    @property
    def size(self) -> int:
        """Byte width of the whole field (all components)."""
        return self.scalar_size * self.count

    @classmethod
    def coerce(cls, value: FieldDescriptor | Mapping[str, Any] | tuple) -> FieldDescriptor:
        """Build a descriptor from a descriptor, a mapping or a tuple.

        Tuples are ``(name, datatype)``, ``(name, datatype, count)`` or
        ``(name, datatype, count, offset)``.
        """
        if isinstance(value, FieldDescriptor):
            return value
        if isinstance(value, Mapping):
            try:
                return cls(**value)
            except TypeError as exc:
                raise SchemaError(f"Invalid field mapping {dict(value)!r}: {exc}") from exc
        if isinstance(value, tuple) and 2 <= len(value) <= 4:
            return cls(*value)
        raise SchemaError(f"Cannot build a field descriptor from {value!r}")


class Schema:
    """Ordered, validated sequence of ``FieldDescriptor``.

    Immutable: the descriptors are held in a tuple and every descriptor
    is frozen, so a schema can be shared by reference for the duration
    of a read.
    """

    def __init__(self, fields: Iterable[FieldDescriptor | Mapping[str, Any] | tuple] = ()) -> None:
        self._fields = _layout(FieldDescriptor.coerce(f) for f in fields)
        self._row_stride = sum(f.size for f in self._fields)
        self._expected_tokens = sum(f.count for f in self._fields)

    # -- Properties ---------------------------------------------------------

    @property
    def fields(self) -> tuple[FieldDescriptor, ...]:
        return self._fields

    @property
    def names(self) -> list[str]:
        return [f.name for f in self._fields]

    @property
    def row_stride(self) -> int:
        """Total byte width of one packed row."""
        return self._row_stride

    @property
    def expected_token_count(self) -> int:
        """Number of tokens one line must contain (multi-component fields
        consume one token per component)."""
        return self._expected_tokens

    def field(self, name: str) -> FieldDescriptor:
        for f in self._fields:
            if f.name == name:
                return f
        raise KeyError(f"No field named '{name}'. Available fields: {self.names}")

    # -- Container protocol -------------------------------------------------

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self._fields)

    def __getitem__(self, index: int) -> FieldDescriptor:
        return self._fields[index]

    def __bool__(self) -> bool:
        return bool(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return self._fields == other._fields

    def __hash__(self) -> int:
        return hash(self._fields)

    def __repr__(self) -> str:
        parts = ", ".join(
            f"{f.name}:{f.datatype.name.lower()}" + (f"[{f.count}]" if f.count > 1 else "")
            for f in self._fields
        )
        return f"Schema([{parts}], row_stride={self._row_stride})"

    # -- numpy interop ------------------------------------------------------

    def to_numpy_dtype(self) -> np.dtype:
        """Return the structured numpy dtype with the same byte layout."""
        formats: list[Any] = []
        for f in self._fields:
            base = numpy_dtype(f.datatype)
            formats.append(base if f.count == 1 else (base, (f.count,)))
        return np.dtype({
            "names": self.names,
            "formats": formats,
            "offsets": [f.offset for f in self._fields],
            "itemsize": self._row_stride,
        })

    @classmethod
    def from_dtype(cls, dtype: np.dtype | list | str) -> Schema:
        return schema_from_dtype(dtype)


def _layout(fields: Iterable[FieldDescriptor]) -> tuple[FieldDescriptor, ...]:
    """Assign missing offsets and check the contiguous-layout rules."""
    result: list[FieldDescriptor] = []
    seen: set[str] = set()
    cursor = 0
    for f in fields:
        if f.name in seen:
            raise SchemaError(f"Duplicate field name '{f.name}'")
        seen.add(f.name)
        if f.offset is None:
            f = replace(f, offset=cursor)
        elif f.offset != cursor:
            raise SchemaError(
                f"Field '{f.name}' offset {f.offset} does not follow the previous "
                f"field (expected offset {cursor})"
            )
        result.append(f)
        cursor += f.size
    return tuple(result)


def schema_from_dtype(dtype: np.dtype | list | str) -> Schema:
    """Derive a ``Schema`` from a numpy structured dtype.

    Declared field order and scalar types are preserved. Sub-array fields
    (``("normal", "<f4", (3,))``) become one descriptor with ``count``
    equal to the number of elements. Padding between fields in an aligned
    dtype is dropped: the resulting schema is always packed.

    Raises:
        SchemaError: If *dtype* is not structured or has nested records.
        UnknownDatatypeError: If a field's scalar type has no point-field tag.
    """
    dt = np.dtype(dtype)
    if dt.names is None:
        raise SchemaError(f"Expected a structured dtype, got '{dt}'")

    descriptors: list[FieldDescriptor] = []
    for name in dt.names:
        field_dt = dt.fields[name][0]
        count = 1
        if field_dt.subdtype is not None:
            field_dt, shape = field_dt.subdtype
            count = int(np.prod(shape))
        if field_dt.names is not None:
            raise SchemaError(f"Nested structured field '{name}' is not supported")
        descriptors.append(FieldDescriptor(name, from_numpy_dtype(field_dt), count))

    schema = Schema(descriptors)
    if schema.row_stride != dt.itemsize:
        logger.debug(
            "Dropped %d padding bytes when packing dtype %s",
            dt.itemsize - schema.row_stride, dt,
        )
    return schema

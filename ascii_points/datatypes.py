"""
Point-field datatypes and their byte widths.

The enumeration mirrors the numeric point-field tags used by PCD files
(``INT8 = 1`` ... ``FLOAT64 = 8``) so schemas exported from other tools
can be passed through by tag as well as by name.

All multi-byte values are stored little-endian; ``numpy_dtype()`` returns
the explicit little-endian numpy dtype for each tag.
"""

from __future__ import annotations

from enum import IntEnum

import numpy as np

from ascii_points.exceptions import UnknownDatatypeError


class Datatype(IntEnum):
    """Scalar datatype of a point field."""

    INT8 = 1
    UINT8 = 2
    INT16 = 3
    UINT16 = 4
    INT32 = 5
    UINT32 = 6
    FLOAT32 = 7
    FLOAT64 = 8

    @property
    def is_float(self) -> bool:
        return self in (Datatype.FLOAT32, Datatype.FLOAT64)

    @property
    def is_signed(self) -> bool:
        return self not in (Datatype.UINT8, Datatype.UINT16, Datatype.UINT32)


_NUMPY_DTYPES: dict[Datatype, np.dtype] = {
    Datatype.INT8: np.dtype("i1"),
    Datatype.UINT8: np.dtype("u1"),
    Datatype.INT16: np.dtype("<i2"),
    Datatype.UINT16: np.dtype("<u2"),
    Datatype.INT32: np.dtype("<i4"),
    Datatype.UINT32: np.dtype("<u4"),
    Datatype.FLOAT32: np.dtype("<f4"),
    Datatype.FLOAT64: np.dtype("<f8"),
}

_SIZES: dict[Datatype, int] = {dt: np_dt.itemsize for dt, np_dt in _NUMPY_DTYPES.items()}


def to_datatype(value: Datatype | int | str) -> Datatype:
    """Coerce a tag, an integer code or a name (``"float32"``) to ``Datatype``.

    Raises:
        UnknownDatatypeError: If *value* does not name a known datatype.
    """
    if isinstance(value, Datatype):
        return value
    if isinstance(value, bool):
        raise UnknownDatatypeError(f"Unknown datatype: {value!r}")
    if isinstance(value, (int, np.integer)):
        try:
            return Datatype(int(value))
        except ValueError:
            raise UnknownDatatypeError(f"Unknown datatype code: {value}") from None
    if isinstance(value, str):
        try:
            return Datatype[value.strip().upper()]
        except KeyError:
            raise UnknownDatatypeError(
                f"Unknown datatype name: '{value}'. "
                f"Supported: {[d.name.lower() for d in Datatype]}"
            ) from None
    raise UnknownDatatypeError(f"Unknown datatype: {value!r}")


def size_of(datatype: Datatype | int | str) -> int:
    """Return the byte width of one scalar of *datatype*."""
    return _SIZES[to_datatype(datatype)]


def numpy_dtype(datatype: Datatype | int | str) -> np.dtype:
    """Return the little-endian numpy dtype for *datatype*."""
    return _NUMPY_DTYPES[to_datatype(datatype)]


def from_numpy_dtype(dtype: np.dtype | type | str) -> Datatype:
    """Map a numpy scalar dtype back to its ``Datatype`` tag.

    Byte order is ignored; only kind and width matter.

    Raises:
        UnknownDatatypeError: For dtypes with no point-field counterpart
            (e.g. ``int64``, ``bool``, strings).
    """
    dt = np.dtype(dtype)
    for tag, np_dt in _NUMPY_DTYPES.items():
        if dt.kind == np_dt.kind and dt.itemsize == np_dt.itemsize:
            return tag
    raise UnknownDatatypeError(f"No point-field datatype for numpy dtype '{dt}'")


def value_range(datatype: Datatype | int | str) -> tuple[int, int] | tuple[float, float]:
    """Return the inclusive ``(min, max)`` of finite values for *datatype*."""
    dt = numpy_dtype(datatype)
    if dt.kind == "f":
        finfo = np.finfo(dt)
        return float(finfo.min), float(finfo.max)
    iinfo = np.iinfo(dt)
    return int(iinfo.min), int(iinfo.max)

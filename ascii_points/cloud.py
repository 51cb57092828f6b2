"""
Point cloud container returned by the ASCII reader.

A ``PointCloud`` holds the packed binary rows produced by a full read, or
only the layout metadata when it comes from a header-only read. Rows are
unorganized: ``height`` is always 1 and ``width`` is the point count.

The byte layout of ``data`` is described by ``fields`` (a ``Schema``);
``to_numpy()`` exposes it as a structured array without copying and
``to_dataframe()`` flattens it into one column per scalar component.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np
import pandas as pd

from ascii_points.schema import Schema

ZERO_ORIGIN: tuple[float, float, float] = (0.0, 0.0, 0.0)
IDENTITY_ORIENTATION: tuple[float, float, float, float] = (1.0, 0.0, 0.0, 0.0)


class FormatVersion(IntEnum):
    """Point file format version.

    ``PCD_V6`` files carry no acquisition origin/orientation; ``PCD_V7``
    files do. Plain ASCII point files always report ``PCD_V6``.
    """

    PCD_V6 = 6
    PCD_V7 = 7


@dataclass
class PointCloud:
    """Output of ``ASCIIReader.read()`` / ``ASCIIReader.read_header()``.

    Attributes:
        fields: Schema describing one packed row.
        width: Number of points.
        height: Always 1 (unorganized cloud).
        data: Packed rows, ``width * row_stride`` bytes; empty when the
            cloud came from a header-only read.
        is_dense: False if any float value is NaN or infinite.
        origin: Sensor acquisition origin ``(x, y, z)``.
        orientation: Sensor acquisition orientation as a quaternion
            ``(w, x, y, z)``.
        version: Format version tag of the source file.
        header_only: Set by ``read_header()``; the cloud describes rows it
            does not hold.
    """

    fields: Schema
    width: int = 0
    height: int = 1
    data: bytes = b""
    is_dense: bool = True
    origin: tuple[float, float, float] = ZERO_ORIGIN
    orientation: tuple[float, float, float, float] = IDENTITY_ORIENTATION
    version: FormatVersion = FormatVersion.PCD_V6
    header_only: bool = False
    source: str | None = field(default=None, compare=False)

    # -- Layout -------------------------------------------------------------

    @property
    def row_stride(self) -> int:
        return self.fields.row_stride

    @property
    def point_step(self) -> int:
        """Alias of ``row_stride`` (bytes per point)."""
        return self.fields.row_stride

    @property
    def total_bytes(self) -> int:
        return self.width * self.height * self.fields.row_stride

    @property
    def is_header_only(self) -> bool:
        """True for header-only results and for clouds whose data is short."""
        return self.header_only or len(self.data) != self.total_bytes

    def __len__(self) -> int:
        return self.width * self.height

    def __repr__(self) -> str:
        kind = "header-only" if self.is_header_only else f"{len(self.data)} bytes"
        return (
            f"PointCloud(width={self.width}, row_stride={self.row_stride}, "
            f"fields={self.fields.names}, {kind})"
        )

    # -- Views --------------------------------------------------------------

    def _require_data(self) -> None:
        if self.is_header_only:
            raise ValueError(
                "PointCloud holds no row data (header-only read); "
                "use ASCIIReader.read() to load the points."
            )

    def to_numpy(self) -> np.ndarray:
        """Return the rows as a read-only structured array (no copy)."""
        self._require_data()
        return np.frombuffer(self.data, dtype=self.fields.to_numpy_dtype(), count=self.width)

    def to_dataframe(self) -> pd.DataFrame:
        """Return the rows as a DataFrame, one column per scalar component.

        Multi-component fields are split into ``name_0``, ``name_1``, ...
        """
        array = self.to_numpy()
        columns: dict[str, np.ndarray] = {}
        for f in self.fields:
            values = array[f.name]
            if f.count == 1:
                columns[f.name] = values
            else:
                for i in range(f.count):
                    columns[f"{f.name}_{i}"] = values[:, i]
        return pd.DataFrame(columns)


def compute_is_dense(data: bytes | bytearray, schema: Schema, width: int) -> bool:
    """Return True if every float value in the packed rows is finite."""
    float_fields = [f.name for f in schema if f.datatype.is_float]
    if not float_fields or width == 0:
        return True
    array = np.frombuffer(data, dtype=schema.to_numpy_dtype(), count=width)
    return all(bool(np.isfinite(array[name]).all()) for name in float_fields)

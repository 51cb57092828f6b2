"""
ascii-points: configurable ASCII-to-binary point record reader.

Public API surface:

- ``open(path, ...)`` -- **recommended entry point**. Polymorphic: accepts
  either an ASCII point file (together with its fields) or a reader config
  YAML path, and returns a fully-read ``PointCloud``.

- ``read(path, fields=..., ...)`` -- Full read of one point file into
  packed binary rows.

- ``read_header(path, fields=..., ...)`` -- Header-only probe: point count
  and row geometry without packing rows.

- ``ASCIIReader`` -- the configurable reader behind the functions above.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import numpy as np

from ascii_points.cloud import FormatVersion, PointCloud
from ascii_points.config import ReaderConfig, load_config, save_config
from ascii_points.datatypes import Datatype, size_of
from ascii_points.exceptions import (
    AsciiPointsError,
    ConfigValidationError,
    EmptySchemaError,
    ExtensionMismatchError,
    FieldCountMismatchError,
    FileUnreadableError,
    PointFileNotFoundError,
    RowCountMismatchError,
    TokenOverflowError,
    TokenParseError,
    UnknownDatatypeError,
)
from ascii_points.export import export_cloud
from ascii_points.reader import ASCIIReader, ReadState
from ascii_points.record_registry import available_record_types, get_record_type, register_record_type
from ascii_points.schema import FieldDescriptor, Schema, schema_from_dtype
from ascii_points.tokenizer import DEFAULT_SEPARATORS, tokenize

__all__ = [
    "open",
    "read",
    "read_header",
    "ASCIIReader",
    "ReadState",
    "PointCloud",
    "FormatVersion",
    "Schema",
    "FieldDescriptor",
    "Datatype",
    "size_of",
    "schema_from_dtype",
    "tokenize",
    "get_record_type",
    "register_record_type",
    "available_record_types",
    "ReaderConfig",
    "load_config",
    "save_config",
    "export_cloud",
    "AsciiPointsError",
    "ConfigValidationError",
    "EmptySchemaError",
    "ExtensionMismatchError",
    "FieldCountMismatchError",
    "FileUnreadableError",
    "PointFileNotFoundError",
    "RowCountMismatchError",
    "TokenOverflowError",
    "TokenParseError",
    "UnknownDatatypeError",
]

logger = logging.getLogger(__name__)

FieldsArg = Schema | str | np.dtype | Iterable[FieldDescriptor | dict | tuple]


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

def _make_reader(
    fields: FieldsArg | None,
    record_type: str | None,
    separators: str,
    extension: str | None,
) -> ASCIIReader:
    """Build a configured reader from keyword arguments."""
    if fields is not None and record_type is not None:
        raise ValueError("Pass either 'fields' or 'record_type', not both.")
    reader = ASCIIReader()
    if record_type is not None:
        reader.set_input_fields(get_record_type(record_type))
    elif fields is not None:
        reader.set_input_fields(fields)
    reader.set_separators(separators)
    reader.set_extension(extension)
    return reader


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def read(
    path: str | Path,
    fields: FieldsArg | None = None,
    *,
    record_type: str | None = None,
    separators: str = DEFAULT_SEPARATORS,
    offset: int = 0,
    extension: str | None = None,
) -> PointCloud:
    """Read an ASCII point file into packed binary rows.

    Args:
        path: Path to the ASCII point file.
        fields: Input fields in file column order: a ``Schema``, a record
            type name, a numpy structured dtype, or a list of
            ``FieldDescriptor`` / dicts / tuples.
        record_type: Name of a registered record type; alternative to
            *fields*.
        separators: Separator characters (default space, tab, newline,
            comma).
        offset: Byte offset where the text payload starts.
        extension: Required file extension, or ``None`` for no check.

    Returns:
        A ``PointCloud`` holding ``width * row_stride`` bytes of rows.

    Raises:
        AsciiPointsError: Any read failure; no partial rows are returned.

    Examples::

        cloud = ascii_points.read("scan.xyz", record_type="xyz")
        cloud = ascii_points.read(
            "scan.csv",
            fields=[("x", "float32"), ("y", "float32"), ("z", "float32")],
            separators=",",
        )
        points = cloud.to_numpy()
    """
    reader = _make_reader(fields, record_type, separators, extension)
    return reader.read(path, offset)


def read_header(
    path: str | Path,
    fields: FieldsArg | None = None,
    *,
    record_type: str | None = None,
    separators: str = DEFAULT_SEPARATORS,
    offset: int = 0,
    extension: str | None = None,
) -> PointCloud:
    """Probe an ASCII point file without packing its rows.

    Takes the same arguments as ``read()``. The returned cloud has
    ``width`` and ``row_stride`` set but empty ``data``.
    """
    reader = _make_reader(fields, record_type, separators, extension)
    return reader.read_header(path, offset)


def open(
    path: str | Path,
    fields: FieldsArg | None = None,
    *,
    record_type: str | None = None,
    separators: str = DEFAULT_SEPARATORS,
    offset: int = 0,
    extension: str | None = None,
) -> PointCloud:
    """Single entry point: read a point file or a reader config.

    Polymorphic behaviour based on the file extension of *path*:

    - **YAML file** (``.yaml`` / ``.yml``): Loads the reader config and
      reads its ``input_path`` (resolved relative to the config file when
      not absolute). The keyword arguments are ignored.

    - **Any other file**: Read as an ASCII point file with the given
      fields, exactly like ``read()``.

    Examples::

        cloud = ascii_points.open("configs/room.yaml")
        cloud = ascii_points.open("room.xyz", record_type="xyzi")
    """
    p = Path(path)

    if p.suffix.lower() in (".yaml", ".yml"):
        logger.info("open() -- loading config from %s", path)
        config = load_config(p)
        if config.input_path is None:
            raise ConfigValidationError(f"Config {path} has no 'input_path' to read.")
        input_path = Path(config.input_path)
        if not input_path.is_absolute():
            input_path = p.parent / input_path
        return config.build_reader().read(input_path, config.offset)

    return read(
        path,
        fields,
        record_type=record_type,
        separators=separators,
        offset=offset,
        extension=extension,
    )

"""
ASCII point reader for ascii-points.

``ASCIIReader`` reads any delimited text file of point records once it is
told the input fields (``set_input_fields``) and, optionally, the
separator characters and a required file extension.

Two entry points:
- ``read_header()`` -- header-only probe: counts records and reports the
  row geometry without packing any rows.
- ``read()`` -- full read: header scan, then a second pass over the same
  byte range that packs every record into one pre-sized buffer.

State machine (``ReadState``)::

    IDLE -> HEADER_SCANNED -> ROWS_PENDING -> COMPLETE
                     \\              \\
                      +--------------+--> FAILED

A failed read never returns rows: the buffer is local to the call and is
only attached to a ``PointCloud`` once every line has parsed. ``COMPLETE``
and ``FAILED`` are terminal; the next call starts again from ``IDLE``.

Status-code convention: ``read_status()`` / ``read_header_status()`` wrap
the raising methods and return ``(status, cloud)`` with ``status == 0``
on success and the error's negative ``status`` on failure, for callers
that plug the reader into a status-code based file-reader framework.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum
from pathlib import Path

import numpy as np

from ascii_points.cloud import PointCloud, compute_is_dense
from ascii_points.config import ReaderConfig, fields_to_specs
from ascii_points.converter import pack_field
from ascii_points.exceptions import (
    AsciiPointsError,
    EmptySchemaError,
    FieldCountMismatchError,
    ReaderBusyError,
    RowCountMismatchError,
)
from ascii_points.header import HeaderInfo, iter_payload_lines, open_payload, scan_header
from ascii_points.schema import FieldDescriptor, Schema, schema_from_dtype
from ascii_points.tokenizer import DEFAULT_SEPARATORS, tokenize

logger = logging.getLogger(__name__)


class ReadState(Enum):
    """Progress of the current (or last) read."""

    IDLE = "idle"
    HEADER_SCANNED = "header_scanned"
    ROWS_PENDING = "rows_pending"
    COMPLETE = "complete"
    FAILED = "failed"


class ASCIIReader:
    """Reader for delimited ASCII point files.

    Attributes:
        state: ``ReadState`` of the current or most recent read.
        last_error: The exception that ended the most recent read, or
            ``None`` if it succeeded.

    Example::

        reader = ASCIIReader()
        reader.set_input_fields("xyzi")
        reader.set_separators(" ,")
        cloud = reader.read("scan.txt")
        points = cloud.to_numpy()
    """

    def __init__(self) -> None:
        self._schema = Schema()
        self._separators = DEFAULT_SEPARATORS
        self._extension: str | None = None
        self.state = ReadState.IDLE
        self.last_error: Exception | None = None
        self._busy = False

    def __repr__(self) -> str:
        return (
            f"ASCIIReader(fields={self._schema.names}, separators={self._separators!r}, "
            f"extension={self._extension!r}, state={self.state.value})"
        )

    # -- Configuration ------------------------------------------------------

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def separators(self) -> str:
        return self._separators

    @property
    def extension(self) -> str | None:
        return self._extension

    def set_input_fields(
        self,
        fields: Schema | str | np.dtype | Iterable[FieldDescriptor | dict | tuple],
    ) -> Schema:
        """Set the input fields, in file column order.

        Args:
            fields: One of
                - a ``Schema``;
                - the name of a registered record type (``"xyz"``);
                - a numpy structured dtype;
                - an iterable of ``FieldDescriptor`` / dicts / tuples.

        Returns:
            The resolved ``Schema``.
        """
        self._check_not_busy()
        if isinstance(fields, Schema):
            schema = fields
        elif isinstance(fields, str):
            from ascii_points.record_registry import get_record_type

            schema = get_record_type(fields)
        elif isinstance(fields, np.dtype):
            schema = schema_from_dtype(fields)
        else:
            schema = Schema(fields)
        self._schema = schema
        logger.debug("Input fields set: %r", schema)
        return schema

    def set_separators(self, chars: str) -> None:
        """Set the separator characters (default ``" \\t\\n,"``)."""
        self._check_not_busy()
        if not chars:
            raise ValueError("Separator set must contain at least one character")
        self._separators = chars

    def set_extension(self, extension: str | None) -> None:
        """Require input paths to carry *extension* (``None`` disables)."""
        self._check_not_busy()
        self._extension = extension or None

    def to_config(self, input_path: str | Path | None = None, offset: int = 0) -> ReaderConfig:
        """Describe this reader as a ``ReaderConfig`` (explicit field list).

        The inverse of ``ReaderConfig.build_reader()``; pass the result to
        ``save_config()`` to store the reader setup as YAML.
        """
        if not self._schema:
            raise EmptySchemaError("No input fields set; nothing to describe.")
        return ReaderConfig(
            input_path=None if input_path is None else str(input_path),
            fields=fields_to_specs(self._schema),
            separators=self._separators,
            extension=self._extension,
            offset=offset,
        )

    def _check_not_busy(self) -> None:
        if self._busy:
            raise ReaderBusyError("Reader configuration cannot change while a read is running")

    # -- Reading ------------------------------------------------------------

    def read_header(self, path: str | Path, offset: int = 0) -> PointCloud:
        """Probe *path*: count records and report layout, without row data.

        Returns:
            A header-only ``PointCloud`` (``data`` is empty).

        Raises:
            AsciiPointsError: Any scan failure (see ``scan_header``).
        """
        schema, separators, extension = self._begin()
        try:
            header = scan_header(path, schema, separators, offset, extension)
            self.state = ReadState.HEADER_SCANNED
        except Exception as exc:
            self._fail(exc)
            raise
        finally:
            self._busy = False

        logger.info("Header-only read of %s: %d points", path, header.point_count)
        return self._make_cloud(schema, header, b"", is_dense=True, path=path, header_only=True)

    def read(self, path: str | Path, offset: int = 0) -> PointCloud:
        """Read every record of *path* into a packed ``PointCloud``.

        Raises:
            ExtensionMismatchError, EmptySchemaError, PointFileNotFoundError,
            FileUnreadableError: From the header scan.
            FieldCountMismatchError: A line has the wrong number of tokens.
            TokenParseError, TokenOverflowError: A token does not convert.
            RowCountMismatchError: The two passes disagree on the row count.
        """
        schema, separators, extension = self._begin()
        try:
            header = scan_header(path, schema, separators, offset, extension)
            self.state = ReadState.HEADER_SCANNED
            buffer = bytearray(header.total_bytes)
            rows = self._fill(path, offset, schema, separators, header, buffer)
            if rows != header.point_count:
                raise RowCountMismatchError(
                    f"Header scan counted {header.point_count} rows but the fill pass "
                    f"parsed {rows}; was {path} modified during the read?"
                )
        except Exception as exc:
            self._fail(exc)
            raise
        finally:
            self._busy = False

        self.state = ReadState.COMPLETE
        data = bytes(buffer)
        is_dense = compute_is_dense(data, schema, header.point_count)
        logger.info(
            "Read %d points (%d bytes) from %s", header.point_count, len(data), path,
        )
        return self._make_cloud(schema, header, data, is_dense=is_dense, path=path)

    def read_status(self, path: str | Path, offset: int = 0) -> tuple[int, PointCloud | None]:
        """Status-code form of ``read()``: ``(0, cloud)`` or ``(status < 0, None)``."""
        try:
            return 0, self.read(path, offset)
        except AsciiPointsError as exc:
            logger.error("Failed to read %s: %s", path, exc)
            return exc.status, None

    def read_header_status(
        self, path: str | Path, offset: int = 0,
    ) -> tuple[int, PointCloud | None]:
        """Status-code form of ``read_header()``."""
        try:
            return 0, self.read_header(path, offset)
        except AsciiPointsError as exc:
            logger.error("Failed to read header of %s: %s", path, exc)
            return exc.status, None

    # -- Private helpers ----------------------------------------------------

    def _begin(self) -> tuple[Schema, str, str | None]:
        """Start a traversal from IDLE and snapshot the configuration."""
        self.state = ReadState.IDLE
        self.last_error = None
        self._busy = True
        return self._schema, self._separators, self._extension

    def _fail(self, exc: Exception) -> None:
        self.state = ReadState.FAILED
        self.last_error = exc

    def _fill(
        self,
        path: str | Path,
        offset: int,
        schema: Schema,
        separators: str,
        header: HeaderInfo,
        buffer: bytearray,
    ) -> int:
        """Second pass: pack every non-blank line into *buffer*.

        Returns:
            The number of rows parsed.
        """
        self.state = ReadState.ROWS_PENDING
        stride = schema.row_stride
        expected = schema.expected_token_count
        rows = 0
        row = bytearray(stride)

        with open_payload(path, offset) as f:
            for line_number, line in iter_payload_lines(f):
                tokens = list(tokenize(line, separators))
                if not tokens:
                    continue
                if rows >= header.point_count:
                    # More records than the scan counted; keep counting so
                    # the mismatch reports the real total.
                    rows += 1
                    continue
                if len(tokens) != expected:
                    raise FieldCountMismatchError(
                        f"Expected {expected} tokens, got {len(tokens)}",
                        line_number=line_number,
                    )
                cursor = 0
                try:
                    for descriptor in schema:
                        pack_field(tokens[cursor:cursor + descriptor.count], descriptor, row)
                        cursor += descriptor.count
                except AsciiPointsError as exc:
                    exc.line_number = line_number
                    raise
                start = rows * stride
                buffer[start:start + stride] = row
                rows += 1

        logger.debug("Fill pass of %s: %d rows packed", path, rows)
        return rows

    def _make_cloud(
        self,
        schema: Schema,
        header: HeaderInfo,
        data: bytes,
        *,
        is_dense: bool,
        path: str | Path,
        header_only: bool = False,
    ) -> PointCloud:
        return PointCloud(
            fields=schema,
            width=header.point_count,
            height=1,
            data=data,
            is_dense=is_dense,
            origin=header.origin,
            orientation=header.orientation,
            version=header.version,
            header_only=header_only,
            source=str(path),
        )

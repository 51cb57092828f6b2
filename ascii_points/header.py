"""
Header scan for ASCII point files.

ASCII point files have no header block: the "header" of such a file is
derived by counting its records. ``scan_header()`` seeks to the payload
offset, walks the file line by line and counts every line that has at
least one token. Blank lines are skipped. Token counts are *not* checked
against the schema here; that validation belongs to the full read.

The payload offset lets callers skip a fixed-size wrapper in front of the
text, e.g. the 512-byte header a TAR archive puts before each member.

This module also provides the file-access helpers shared with the full
reader (``open_payload()`` and ``iter_payload_lines()``), so both passes
open, seek and decode the file the same way.
"""

from __future__ import annotations

import logging
import numbers
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from ascii_points.cloud import IDENTITY_ORIENTATION, ZERO_ORIGIN, FormatVersion
from ascii_points.exceptions import (
    ConfigValidationError,
    EmptySchemaError,
    ExtensionMismatchError,
    FileUnreadableError,
    PointFileNotFoundError,
)
from ascii_points.schema import Schema
from ascii_points.tokenizer import DEFAULT_SEPARATORS, is_blank

logger = logging.getLogger(__name__)

_ENCODING = "utf-8"


@dataclass(frozen=True)
class HeaderInfo:
    """Result of a header scan.

    Attributes:
        point_count: Number of non-blank lines after the offset.
        row_stride: Bytes per packed row for the active schema.
        origin: Acquisition origin; always zero for ASCII files.
        orientation: Acquisition orientation ``(w, x, y, z)``; always
            identity for ASCII files.
        version: Format version tag.
        data_offset: Byte offset where the text payload starts.
    """

    point_count: int
    row_stride: int
    origin: tuple[float, float, float] = ZERO_ORIGIN
    orientation: tuple[float, float, float, float] = IDENTITY_ORIENTATION
    version: FormatVersion = FormatVersion.PCD_V6
    data_offset: int = 0

    @property
    def total_bytes(self) -> int:
        return self.point_count * self.row_stride


def check_extension(path: str | Path, extension: str | None) -> None:
    """Raise ``ExtensionMismatchError`` if *path* lacks the required extension.

    The comparison is case-insensitive and tolerates a missing leading dot
    in *extension*. ``None`` or ``""`` disables the check.
    """
    if not extension:
        return
    suffix = extension if extension.startswith(".") else f".{extension}"
    name = Path(path).name
    if not name.lower().endswith(suffix.lower()):
        raise ExtensionMismatchError(
            f"File '{name}' does not have the required extension '{suffix}'"
        )


@contextmanager
def open_payload(path: str | Path, offset: int = 0) -> Iterator[BinaryIO]:
    """Open *path* in binary mode positioned at *offset*.

    The file is closed when the ``with`` block exits, whatever the reason.

    Raises:
        ConfigValidationError: If *offset* is not a non-negative integer.
        PointFileNotFoundError: If *path* does not exist.
        FileUnreadableError: If *path* cannot be opened or seeked.
    """
    if isinstance(offset, bool) or not isinstance(offset, numbers.Integral):
        raise ConfigValidationError(f"Offset must be an integer, got {offset!r}")
    if offset < 0:
        raise ConfigValidationError(f"Offset must be non-negative, got {offset}")
    path = Path(path)
    if not path.exists():
        raise PointFileNotFoundError(f"Point file not found: {path}")
    try:
        f = open(path, "rb")
    except OSError as exc:
        raise FileUnreadableError(f"Cannot open point file {path}: {exc}") from exc
    with f:
        try:
            f.seek(offset)
        except OSError as exc:
            raise FileUnreadableError(f"Cannot seek to offset {offset} in {path}: {exc}") from exc
        yield f


def iter_payload_lines(f: BinaryIO) -> Iterator[tuple[int, str]]:
    """Yield ``(line_number, text)`` for every line of an open payload.

    Line numbers are 1-based and counted from the payload offset.

    Raises:
        FileUnreadableError: If a line is not valid text or a read fails.
    """
    line_number = 0
    try:
        for raw in f:
            line_number += 1
            yield line_number, raw.decode(_ENCODING)
    except UnicodeDecodeError as exc:
        raise FileUnreadableError(
            f"Line {line_number} is not valid {_ENCODING} text: {exc}",
            line_number=line_number,
        ) from exc
    except OSError as exc:
        raise FileUnreadableError(f"Read failed after line {line_number}: {exc}") from exc


def scan_header(
    path: str | Path,
    schema: Schema,
    separators: str = DEFAULT_SEPARATORS,
    offset: int = 0,
    extension: str | None = None,
) -> HeaderInfo:
    """Count the records of an ASCII point file without packing them.

    Args:
        path: Path to the ASCII point file.
        schema: Active field schema (only its ``row_stride`` is used).
        separators: Separator characters used to recognise blank lines.
        offset: Byte offset where the text payload starts.
        extension: Required file extension, or ``None`` for no check.

    Returns:
        ``HeaderInfo`` with the point count and row geometry.

    Raises:
        ExtensionMismatchError: If *extension* is set and *path* lacks it.
        EmptySchemaError: If *schema* has no fields.
        PointFileNotFoundError: If *path* does not exist.
        FileUnreadableError: If *path* cannot be opened or decoded.
    """
    check_extension(path, extension)
    if not schema:
        raise EmptySchemaError("No input fields set; call set_input_fields() before reading.")

    point_count = 0
    with open_payload(path, offset) as f:
        for _, line in iter_payload_lines(f):
            if not is_blank(line, separators):
                point_count += 1

    logger.debug(
        "Header scan of %s (offset=%d): %d points, row_stride=%d",
        path, offset, point_count, schema.row_stride,
    )
    return HeaderInfo(
        point_count=point_count,
        row_stride=schema.row_stride,
        data_offset=offset,
    )

"""
Exporter for ascii-points.

Writes a fully-read ``PointCloud`` to disk as a table, one column per
scalar component (see ``PointCloud.to_dataframe()``), in CSV or Parquet.

Why Parquet is the default:
- Preserves the packed column dtypes (``float32``, ``uint8``, ...).
- Columnar compression keeps large clouds small on disk.

CSV is supported for interoperability with spreadsheet tools.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

import pandas as pd

from ascii_points.cloud import PointCloud
from ascii_points.exceptions import ExportError

logger = logging.getLogger(__name__)

_SUPPORTED_FORMATS = {"csv", "parquet"}


def _write_dataframe(
    df: pd.DataFrame,
    path: Path,
    output_format: str,
) -> None:
    """Write a single DataFrame to disk in the specified format.

    NaN components of non-dense clouds are written to CSV as ``nan`` so
    they read back as NaN rather than as empty cells.

    Raises:
        ExportError: If writing fails for any reason.
    """
    try:
        if output_format == "csv":
            df.to_csv(path, index=False, encoding="utf-8", na_rep="nan")
        else:  # parquet
            df.to_parquet(path, index=False, engine="pyarrow")
    except Exception as exc:
        raise ExportError(
            f"Failed to write {path.name} as {output_format}: {exc}"
        ) from exc


def export_cloud(
    cloud: PointCloud,
    path: str | Path,
    output_format: Literal["csv", "parquet"] = "parquet",
) -> str:
    """Write the rows of *cloud* to *path*.

    The parent directory is created if it does not exist.

    Args:
        cloud: A cloud returned by ``ASCIIReader.read()``.
        path: Output file path.
        output_format: "csv" or "parquet".

    Returns:
        The path written, as a string.

    Raises:
        ExportError: If *output_format* is unsupported, the cloud holds no
            rows (header-only read), or the write fails.
    """
    if output_format not in _SUPPORTED_FORMATS:
        raise ExportError(
            f"Unsupported output format: '{output_format}'. "
            f"Supported formats: {sorted(_SUPPORTED_FORMATS)}"
        )
    if cloud.is_header_only:
        raise ExportError("Cannot export a header-only PointCloud; read the full file first.")

    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)

    df = cloud.to_dataframe()
    _write_dataframe(df, out, output_format)
    logger.info(
        "Exported %d points -> %s (%d cols)",
        len(df),
        out.name,
        len(df.columns),
    )
    return str(out)

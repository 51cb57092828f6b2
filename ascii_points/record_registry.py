"""
Record-type registry for ascii-points.

A record type is a named, statically-known point layout (``xyz``,
``xyzi``, ``point_normal``, ...) that maps to a fixed ``Schema``. The
built-in types live as YAML files in ``ascii_points/record_types/``;
each file defines:
- name: unique identifier used by ``get_record_type()``
- description: free text
- fields: ordered list of ``{name, datatype, count}``

The registry is built once, on first lookup. Additional types can be
registered at runtime with ``register_record_type()`` or loaded from
another directory with ``load_all_record_types()``.

Why YAML instead of hardcoded:
- New record types can be added by dropping a YAML file, no code changes.
- Field order is visible in one place and matches the file column order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import numpy as np
import yaml
from pydantic import BaseModel, Field, ValidationError

from ascii_points.config import FieldSpec
from ascii_points.exceptions import ConfigValidationError
from ascii_points.schema import FieldDescriptor, Schema, schema_from_dtype

logger = logging.getLogger(__name__)

# Directory containing record-type YAML files (sibling package)
_RECORD_TYPES_DIR = Path(__file__).parent / "record_types"

_REGISTRY: dict[str, Schema] = {}


class RecordTypeSpec(BaseModel):
    """A record-type definition loaded from YAML."""

    name: str = Field(..., min_length=1)
    description: str = ""
    fields: list[FieldSpec] = Field(..., min_length=1)

    def to_schema(self) -> Schema:
        return Schema(spec.to_descriptor() for spec in self.fields)


def load_record_type(path: Path) -> tuple[str, Schema]:
    """Load a single record-type YAML file.

    Raises:
        ConfigValidationError: If the file is empty or fails validation.
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise ConfigValidationError(f"Record type file is empty: {path}")
    try:
        spec = RecordTypeSpec.model_validate(raw)
    except ValidationError as exc:
        raise ConfigValidationError(f"Invalid record type file {path}:\n{exc}") from exc
    return spec.name, spec.to_schema()


def load_all_record_types(record_types_dir: Path | None = None) -> dict[str, Schema]:
    """Load all record-type YAML files in a directory.

    Files that fail to load are skipped with a warning.

    Args:
        record_types_dir: Directory to scan for .yaml files. Defaults to
            the built-in record_types/ directory.

    Returns:
        Dict mapping record type name -> Schema.
    """
    record_types_dir = record_types_dir or _RECORD_TYPES_DIR
    loaded: dict[str, Schema] = {}
    for yaml_path in sorted(record_types_dir.glob("*.yaml")):
        try:
            name, schema = load_record_type(yaml_path)
        except Exception as e:
            logger.warning("Failed to load record type from %s: %s", yaml_path, e)
            continue
        loaded[name] = schema
        logger.debug("Loaded record type: %s from %s", name, yaml_path)
    logger.info("Loaded %d record types from %s", len(loaded), record_types_dir)
    return loaded


def _get_registry() -> dict[str, Schema]:
    """Lazily populate the registry with the built-in record types."""
    if not _REGISTRY:
        _REGISTRY.update(load_all_record_types())
    return _REGISTRY


def register_record_type(
    name: str,
    fields: Schema | np.dtype | Iterable[FieldDescriptor | dict | tuple],
    *,
    replace: bool = False,
) -> Schema:
    """Register a record type under *name*.

    *fields* may be a ``Schema``, a numpy structured dtype, or anything
    ``Schema()`` accepts.

    Raises:
        ValueError: If *name* is already registered and *replace* is False.
    """
    registry = _get_registry()
    if name in registry and not replace:
        raise ValueError(f"Record type '{name}' is already registered")
    if isinstance(fields, Schema):
        schema = fields
    elif isinstance(fields, np.dtype):
        schema = schema_from_dtype(fields)
    else:
        schema = Schema(fields)
    registry[name] = schema
    logger.info("Registered record type '%s' (row_stride=%d)", name, schema.row_stride)
    return schema


def get_record_type(name: str) -> Schema:
    """Return the ``Schema`` registered under *name*.

    Raises:
        KeyError: If no record type with that name exists.
    """
    registry = _get_registry()
    try:
        return registry[name]
    except KeyError:
        raise KeyError(
            f"Unknown record type '{name}'. Available: {sorted(registry)}"
        ) from None


def available_record_types() -> list[str]:
    """Return the sorted names of all registered record types."""
    return sorted(_get_registry())

"""
Configuration models and YAML I/O for ascii-points.

This module defines the Pydantic models that map 1:1 to a reader config
YAML file, plus helper functions for loading and saving it.

Key models:
- FieldSpec: One input field as written in YAML (name, datatype, count).
- ReaderConfig: Input path, schema source (explicit fields or a named
  record type), separator characters, required extension and byte offset.

Key functions:
- load_config(path) -> ReaderConfig: Load and validate from YAML.
- save_config(config, path): Serialize to YAML.

Example config::

    input_path: scans/room.xyz
    record_type: xyzi
    separators: " ,"
    extension: .xyz
    offset: 0
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ascii_points.datatypes import Datatype
from ascii_points.exceptions import ConfigValidationError
from ascii_points.schema import FieldDescriptor, Schema
from ascii_points.tokenizer import DEFAULT_SEPARATORS

if TYPE_CHECKING:
    from ascii_points.reader import ASCIIReader

logger = logging.getLogger(__name__)


class FieldSpec(BaseModel):
    """A field declaration as written in YAML."""

    name: str = Field(..., min_length=1)
    datatype: str = Field(..., description="int8 | uint8 | int16 | uint16 | int32 | uint32 | float32 | float64")
    count: int = Field(1, ge=1, description="Number of scalar components")

    @field_validator("datatype")
    @classmethod
    def _check_datatype(cls, value: str) -> str:
        name = value.strip().lower()
        if name.upper() not in Datatype.__members__:
            raise ValueError(
                f"unknown datatype '{value}'; "
                f"expected one of {[d.name.lower() for d in Datatype]}"
            )
        return name

    def to_descriptor(self) -> FieldDescriptor:
        return FieldDescriptor(self.name, self.datatype, self.count)


class ReaderConfig(BaseModel):
    """Top-level reader configuration.

    Exactly one of ``fields`` and ``record_type`` must be given.
    """

    input_path: str | None = Field(None, description="Path to the ASCII point file")
    fields: list[FieldSpec] | None = Field(
        None, description="Explicit field list, in file column order"
    )
    record_type: str | None = Field(
        None, description="Name of a registered record type (e.g. 'xyz')"
    )
    separators: str = Field(DEFAULT_SEPARATORS, min_length=1)
    extension: str | None = Field(
        None, description="Required file extension (e.g. '.xyz'); None disables the check"
    )
    offset: int = Field(0, ge=0, description="Byte offset where the text payload starts")

    @model_validator(mode="after")
    def _check_schema_source(self) -> ReaderConfig:
        if (self.fields is None) == (self.record_type is None):
            raise ValueError("Exactly one of 'fields' or 'record_type' must be set.")
        if self.fields is not None and not self.fields:
            raise ValueError("'fields' must contain at least one field.")
        return self

    def build_schema(self) -> Schema:
        """Resolve the configured fields or record type into a ``Schema``."""
        if self.fields is not None:
            return Schema(spec.to_descriptor() for spec in self.fields)
        from ascii_points.record_registry import get_record_type

        return get_record_type(self.record_type)

    def build_reader(self) -> ASCIIReader:
        """Create an ``ASCIIReader`` configured from this model."""
        from ascii_points.reader import ASCIIReader

        reader = ASCIIReader()
        reader.set_input_fields(self.build_schema())
        reader.set_separators(self.separators)
        reader.set_extension(self.extension)
        return reader


def load_config(path: str | Path) -> ReaderConfig:
    """Load and validate a reader config YAML file.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ConfigValidationError: If the file is empty or fails validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise ConfigValidationError(f"Config file is empty: {path}")
    try:
        config = ReaderConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigValidationError(f"Invalid reader config {path}:\n{exc}") from exc
    logger.info("Loaded config from %s", path)
    return config


def save_config(config: ReaderConfig, path: str | Path) -> None:
    """Serialize a ReaderConfig to YAML.

    Unset optional keys are omitted so the file stays short.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json", exclude_none=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write("# ascii-points reader configuration\n\n")
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
    logger.info("Saved config to %s", path)


def fields_to_specs(schema: Schema) -> list[FieldSpec]:
    """Convert a schema back to YAML-friendly field specs."""
    return [
        FieldSpec(name=f.name, datatype=f.datatype.name.lower(), count=f.count)
        for f in schema
    ]

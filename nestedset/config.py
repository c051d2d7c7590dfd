"""Immutable configuration for one nested-set table (and optionally one tree in it)."""

import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class TreeConfig(BaseModel):
    """Table layout, root naming and forest partition settings.

    When ``group_column`` and ``group_value`` are both set, every query is
    restricted to rows whose group column equals ``group_value``, so a single
    table can hold many independent trees. Setting only one of the two is an
    error.
    """

    model_config = ConfigDict(frozen=True)

    table_name: str = "nodes"
    id_column: str = "id"
    name_column: str = "name"
    left_column: str = "lft"
    right_column: str = "rgt"
    group_column: str | None = None
    group_value: str | None = None
    root_name: str = "root"
    auto_create_root: bool = True

    @field_validator("table_name", "id_column", "name_column", "left_column", "right_column", "group_column")
    @classmethod
    def _check_identifier(cls, value: str | None) -> str | None:
        if value is not None and not _IDENTIFIER.match(value):
            raise ValueError(f"not a valid SQL identifier: {value!r}")
        return value

    @field_validator("group_value", mode="before")
    @classmethod
    def _group_value_as_text(cls, value: Any) -> Any:
        # the group column is TEXT, so ints come back from reads as strings
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("root_name")
    @classmethod
    def _check_root_name(cls, value: str) -> str:
        if not value:
            raise ValueError("root_name must not be empty")
        return value

    @model_validator(mode="after")
    def _check_partition(self) -> "TreeConfig":
        if (self.group_column is None) != (self.group_value is None):
            raise ValueError("group_column and group_value must be set together")
        return self

    @property
    def partitioned(self) -> bool:
        return self.group_column is not None

    def for_group(self, value: str | int) -> "TreeConfig":
        """Return a copy bound to another tree of the same forest."""
        if self.group_column is None:
            raise ValueError("config has no group_column; cannot select a tree")
        return self.model_validate({**self.model_dump(), "group_value": value})

    @classmethod
    def from_yaml(cls, path: str | Path) -> "TreeConfig":
        """Load settings from a YAML mapping. Missing keys keep their defaults."""
        with open(path, encoding="utf-8") as f:
            raw: Any = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"{path}: expected a mapping at top level")
        return cls.model_validate(raw)

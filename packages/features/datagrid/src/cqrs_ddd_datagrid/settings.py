"""Datagrid configuration."""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from .sorting import SortOrder

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class DatagridSettings(BaseModel):
    """
    Immutable settings shared by proxies and filters.

    Attributes:
        root_alias: Alias of the root entity in fresh queries.
        join_alias_prefix: Prefix of aliases synthesized for joins.
        default_sort_order: Sort order a proxy starts with.
        case_sensitive_function: Name looked up in the case comparator
            resolver when a filter is explicitly case-sensitive.
    """

    model_config = ConfigDict(frozen=True)

    root_alias: str = "o"
    join_alias_prefix: str = "s"
    default_sort_order: SortOrder = SortOrder.ASC
    case_sensitive_function: str = "binary"

    @field_validator("root_alias", "join_alias_prefix")
    @classmethod
    def _check_identifier(cls, value: str) -> str:
        if not _IDENTIFIER.match(value):
            raise ValueError(f"{value!r} is not a valid SQL alias")
        return value

    @field_validator("default_sort_order", mode="before")
    @classmethod
    def _normalize_sort_order(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("case_sensitive_function")
    @classmethod
    def _check_function_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("case_sensitive_function must not be empty")
        return value.strip()

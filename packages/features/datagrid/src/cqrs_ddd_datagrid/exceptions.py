"""
Datagrid exception hierarchy.

All exceptions inherit from ``DatagridError`` and provide ``to_dict()``
for API-friendly error responses.  Construction errors abort building the
current query; empty filter values and a missing case comparator are
never errors.
"""

from __future__ import annotations

from collections.abc import Sequence
from difflib import get_close_matches
from typing import Any


class DatagridError(Exception):
    """Base exception for all datagrid query-construction errors."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class InvalidArgumentError(DatagridError, ValueError):
    """An argument passed to the proxy, builder or a filter is malformed."""

    def __init__(self, message: str, argument: str | None = None) -> None:
        self.message = message
        self.argument = argument
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "INVALID_ARGUMENT",
            "message": self.message,
            "argument": self.argument,
        }


class InvalidOrderError(DatagridError, ValueError):
    """Sort order is not one of ``ASC`` / ``DESC``."""

    def __init__(self, sort_order: object, valid_orders: Sequence[str]) -> None:
        self.sort_order = sort_order
        self.valid_orders = list(valid_orders)
        super().__init__(
            f'"{sort_order}" is not a valid sort order, '
            f'valid values are "{", ".join(self.valid_orders)}"'
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "INVALID_ORDER",
            "sort_order": str(self.sort_order),
            "valid_orders": self.valid_orders,
        }


class UnresolvedAssociationError(InvalidArgumentError):
    """
    A join-chain step names a field that is not an association.

    Provides fuzzy-matched suggestions among the entity's associations.
    """

    def __init__(
        self,
        field: str,
        entity_name: str,
        available_associations: Sequence[str],
        chain: Sequence[str] | None = None,
    ) -> None:
        self.field = field
        self.entity_name = entity_name
        self.available_associations = sorted(available_associations)
        self.chain = list(chain) if chain is not None else [field]
        self.suggestions = get_close_matches(
            field, self.available_associations, n=3, cutoff=0.6
        )

        message = (
            f"Cannot join '{field}' on '{entity_name}': it is not an association. "
            f"Chain: '{'.'.join(self.chain)}'"
        )
        if self.suggestions:
            message += f"\nDid you mean: {', '.join(self.suggestions)}?"
        super().__init__(message, argument=field)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "UNRESOLVED_ASSOCIATION",
            "field": self.field,
            "entity": self.entity_name,
            "chain": self.chain,
            "suggestions": self.suggestions,
            "available_associations": self.available_associations,
        }


__all__: list[str] = [
    "DatagridError",
    "InvalidArgumentError",
    "InvalidOrderError",
    "UnresolvedAssociationError",
]

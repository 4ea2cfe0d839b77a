"""
Sort normalization for deterministic pagination.

Relational engines do not guarantee a stable row order unless the ORDER BY
ends in a unique key.  :func:`normalize_order_by` puts the requested sort
column first, keeps whatever ORDER BY parts the base query or the filters
added after it, and appends the root entity's identifier fields that are
not sorted on yet.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING

from .exceptions import InvalidOrderError

if TYPE_CHECKING:
    from .ports.query_builder import IQueryBuilder

logger = logging.getLogger(__name__)


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def parse(cls, value: object) -> SortOrder:
        """
        Accept ``SortOrder`` members or strings in any case.

        Raises:
            InvalidOrderError: If ``value`` is not ASC/DESC-equivalent.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise InvalidOrderError(value, [member.value for member in cls])


def normalize_order_by(
    builder: IQueryBuilder,
    sort_by: str | None,
    sort_order: SortOrder,
    identifier_fields: Sequence[str],
    root_alias: str | None = None,
) -> IQueryBuilder:
    """
    Return a clone of ``builder`` with a pagination-safe ORDER BY.

    Args:
        builder: The builder to normalize; it is never mutated.
        sort_by: Requested sort expression.  Qualified with ``root_alias``
            when it contains no ``.``.
        sort_order: Direction for ``sort_by`` and the appended identifiers.
        identifier_fields: Identifier field names of the root entity.
        root_alias: Alias qualifying ``sort_by`` and the identifiers;
            defaults to the builder's root alias.
    """
    builder = builder.clone()
    root_alias = root_alias or builder.root_alias

    if sort_by:
        existing = builder.reset_order_by()
        if "." not in sort_by:
            sort_by = f"{root_alias}.{sort_by}"
        builder.add_order_by(sort_by, sort_order.value)
        for part in existing:
            builder.add_order_by(part.sort, part.order)

    sorted_on = {part.sort.strip() for part in builder.order_by_parts}
    for identifier in identifier_fields:
        field = f"{root_alias}.{identifier}"
        if field not in sorted_on:
            builder.add_order_by(field, sort_order.value)
            sorted_on.add(field)

    logger.debug(
        "Normalized ORDER BY: %s",
        ", ".join(str(part) for part in builder.order_by_parts),
    )
    return builder

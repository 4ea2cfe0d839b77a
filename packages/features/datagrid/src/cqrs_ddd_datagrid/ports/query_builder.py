"""IQueryBuilder — the explicit builder surface wrapped by the query proxy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal, Protocol, runtime_checkable

from ..exceptions import InvalidArgumentError

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Select
    from typing_extensions import Self

JoinKind = Literal["left", "inner"]

_DIRECTIONS = ("ASC", "DESC")


@dataclass(frozen=True)
class JoinClause:
    """
    A join registered on a builder.

    Attributes:
        join: Join expression ``<parent_alias>.<association>``.
        alias: Alias given to the joined entity.
        kind: ``"left"`` or ``"inner"``.
    """

    join: str
    alias: str
    kind: JoinKind = "left"

    @property
    def parent_alias(self) -> str:
        return self.join.split(".", 1)[0]

    @property
    def association(self) -> str:
        return self.join.split(".", 1)[1]

    def __str__(self) -> str:
        prefix = "LEFT JOIN" if self.kind == "left" else "INNER JOIN"
        return f"{prefix} {self.join} AS {self.alias}"


@dataclass(frozen=True)
class OrderByPart:
    """One ORDER BY term: a dotted ``alias.field`` expression and a direction."""

    sort: str
    order: str | None = None

    @classmethod
    def parse(cls, sort: str, order: str | None = None) -> OrderByPart:
        """
        Build a part from ``sort`` and an optional direction.

        When ``order`` is omitted a trailing ``ASC`` / ``DESC`` keyword in
        ``sort`` is split off, so ``"o.title DESC"`` and
        ``("o.title", "desc")`` produce the same part.

        Raises:
            InvalidArgumentError: If the expression is empty or the
                direction is not ASC/DESC.
        """
        expression = sort.strip()
        if order is None:
            head, _, tail = expression.rpartition(" ")
            if head and tail.upper() in _DIRECTIONS:
                expression, order = head.strip(), tail.upper()
        elif order.upper() in _DIRECTIONS:
            order = order.upper()
        else:
            raise InvalidArgumentError(
                f"Invalid ORDER BY direction {order!r} for {sort!r}", argument="order"
            )
        if not expression:
            raise InvalidArgumentError("Empty ORDER BY expression", argument="sort")
        return cls(sort=expression, order=order)

    def __str__(self) -> str:
        return f"{self.sort} {self.order}" if self.order else self.sort


@runtime_checkable
class IQueryBuilder(Protocol):
    """
    Mutable query builder wrapped by :class:`~cqrs_ddd_datagrid.proxy.QueryProxy`.

    Only the operations the proxy, the join manager, the sort normalizer and
    the filters need are part of the contract.  Joins and ORDER BY parts are
    introspectable so joins can be reused and identifier sorts deduplicated.
    """

    @property
    def root_alias(self) -> str: ...

    @property
    def root_entity(self) -> type[Any]: ...

    def entity_for(self, alias: str) -> type[Any]: ...

    def column(self, alias: str, field: str) -> Any: ...

    @property
    def joins(self) -> tuple[JoinClause, ...]: ...

    def left_join(self, join: str, alias: str) -> Self: ...

    def inner_join(self, join: str, alias: str) -> Self: ...

    @property
    def where_clauses(self) -> tuple[ColumnElement[bool], ...]: ...

    def and_where(self, predicate: ColumnElement[bool]) -> Self: ...

    @property
    def parameters(self) -> dict[str, Any]: ...

    def set_parameter(self, name: str, value: Any) -> Self: ...

    @property
    def order_by_parts(self) -> tuple[OrderByPart, ...]: ...

    def add_order_by(self, sort: str, order: str | None = None) -> Self: ...

    def reset_order_by(self) -> list[OrderByPart]: ...

    @property
    def first_result(self) -> int | None: ...

    def set_first_result(self, first_result: int | None) -> Self: ...

    @property
    def max_results(self) -> int | None: ...

    def set_max_results(self, max_results: int | None) -> Self: ...

    def clone(self) -> Self: ...

    def build(self) -> Select[Any]: ...

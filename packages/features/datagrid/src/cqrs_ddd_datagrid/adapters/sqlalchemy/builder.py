"""
SQLAlchemy implementation of :class:`IQueryBuilder`.

The builder keeps joins, WHERE predicates, bound parameters, ORDER BY parts
and pagination bounds as introspectable state and compiles them into an ORM
``Select`` on :meth:`SQLAlchemyQueryBuilder.build`.  Every entity in the
query is an ``aliased()`` class named after its alias, so compiled SQL reads
``FROM books AS o LEFT OUTER JOIN authors AS s_author ...``.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

from sqlalchemy import inspect, select
from sqlalchemy.orm import aliased

from ...exceptions import InvalidArgumentError, UnresolvedAssociationError
from ...ports.query_builder import JoinClause, JoinKind, OrderByPart

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Select
    from typing_extensions import Self


class SQLAlchemyQueryBuilder:
    """Mutable SELECT builder over a root ORM entity."""

    def __init__(self, entity: type[Any], alias: str = "o") -> None:
        self._root_entity = entity
        self._root_alias = alias
        self._entities: dict[str, type[Any]] = {alias: entity}
        self._aliased: dict[str, Any] = {alias: aliased(entity, name=alias)}
        self._joins: list[JoinClause] = []
        self._where: list[ColumnElement[bool]] = []
        self._parameters: dict[str, Any] = {}
        self._order_by: list[OrderByPart] = []
        self._first_result: int | None = None
        self._max_results: int | None = None

    # -- Entities ------------------------------------------------------------

    @property
    def root_alias(self) -> str:
        return self._root_alias

    @property
    def root_entity(self) -> type[Any]:
        return self._root_entity

    @property
    def aliases(self) -> tuple[str, ...]:
        return tuple(self._aliased)

    def entity_for(self, alias: str) -> type[Any]:
        try:
            return self._entities[alias]
        except KeyError:
            raise InvalidArgumentError(
                f"Unknown alias '{alias}'. Known aliases: {', '.join(self._aliased)}",
                argument="alias",
            ) from None

    def column(self, alias: str, field: str) -> Any:
        """Return the mapped attribute ``field`` of the entity behind ``alias``."""
        entity = self.entity_for(alias)
        attribute = getattr(self._aliased[alias], field, None)
        if attribute is None:
            raise InvalidArgumentError(
                f"'{entity.__name__}' (alias '{alias}') has no attribute '{field}'",
                argument="field",
            )
        return attribute

    # -- Joins ---------------------------------------------------------------

    @property
    def joins(self) -> tuple[JoinClause, ...]:
        return tuple(self._joins)

    def left_join(self, join: str, alias: str) -> Self:
        return self._add_join(join, alias, "left")

    def inner_join(self, join: str, alias: str) -> Self:
        return self._add_join(join, alias, "inner")

    def _add_join(self, join: str, alias: str, kind: JoinKind) -> Self:
        parent_alias, sep, association = join.partition(".")
        if not sep or not association:
            raise InvalidArgumentError(
                f"Join expression must look like '<alias>.<association>', got {join!r}",
                argument="join",
            )
        if alias in self._aliased:
            raise InvalidArgumentError(
                f"Alias '{alias}' is already defined", argument="alias"
            )

        parent = self.entity_for(parent_alias)
        relationships = inspect(parent).relationships
        if association not in relationships:
            raise UnresolvedAssociationError(
                association,
                parent.__name__,
                [rel.key for rel in relationships],
            )

        target = relationships[association].mapper.class_
        self._entities[alias] = target
        self._aliased[alias] = aliased(target, name=alias)
        self._joins.append(JoinClause(join=join, alias=alias, kind=kind))
        return self

    # -- WHERE / parameters --------------------------------------------------

    @property
    def where_clauses(self) -> tuple[ColumnElement[bool], ...]:
        return tuple(self._where)

    def and_where(self, predicate: ColumnElement[bool]) -> Self:
        self._where.append(predicate)
        return self

    @property
    def parameters(self) -> dict[str, Any]:
        return dict(self._parameters)

    def set_parameter(self, name: str, value: Any) -> Self:
        self._parameters[name] = value
        return self

    # -- ORDER BY ------------------------------------------------------------

    @property
    def order_by_parts(self) -> tuple[OrderByPart, ...]:
        return tuple(self._order_by)

    def add_order_by(self, sort: str, order: str | None = None) -> Self:
        self._order_by.append(OrderByPart.parse(sort, order))
        return self

    def reset_order_by(self) -> list[OrderByPart]:
        """Detach and return the current ORDER BY parts."""
        detached, self._order_by = self._order_by, []
        return detached

    # -- Pagination ----------------------------------------------------------

    @property
    def first_result(self) -> int | None:
        return self._first_result

    def set_first_result(self, first_result: int | None) -> Self:
        self._first_result = first_result
        return self

    @property
    def max_results(self) -> int | None:
        return self._max_results

    def set_max_results(self, max_results: int | None) -> Self:
        self._max_results = max_results
        return self

    # -- Compilation ---------------------------------------------------------

    def clone(self) -> Self:
        """Copy the builder; the clone shares no mutable state with ``self``."""
        clone = copy.copy(self)
        clone._entities = dict(self._entities)
        clone._aliased = dict(self._aliased)
        clone._joins = list(self._joins)
        clone._where = list(self._where)
        clone._parameters = dict(self._parameters)
        clone._order_by = list(self._order_by)
        return clone

    def build(self) -> Select[Any]:
        """Compile the accumulated state into a ``Select`` with bound parameters."""
        stmt = select(self._aliased[self._root_alias])

        for clause in self._joins:
            target = self._aliased[clause.alias]
            onclause = getattr(self._aliased[clause.parent_alias], clause.association)
            if clause.kind == "left":
                stmt = stmt.outerjoin(target, onclause)
            else:
                stmt = stmt.join(target, onclause)

        if self._where:
            stmt = stmt.where(*self._where)
        if self._order_by:
            stmt = stmt.order_by(*(self._order_clause(part) for part in self._order_by))
        if self._first_result is not None:
            stmt = stmt.offset(self._first_result)
        if self._max_results is not None:
            stmt = stmt.limit(self._max_results)
        if self._parameters:
            stmt = stmt.params(self._parameters)
        return stmt

    def _order_clause(self, part: OrderByPart) -> Any:
        alias, sep, field = part.sort.partition(".")
        if not sep:
            alias, field = self._root_alias, part.sort
        column = self.column(alias, field)
        if part.order == "DESC":
            return column.desc()
        if part.order == "ASC":
            return column.asc()
        return column

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} {self._root_entity.__name__} "
            f"AS {self._root_alias} "
            f"joins={len(self._joins)} where={len(self._where)} "
            f"order_by={[str(part) for part in self._order_by]}>"
        )

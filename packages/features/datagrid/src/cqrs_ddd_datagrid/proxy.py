"""
QueryProxy — the query façade handed to datagrid filters and sorters.

The proxy owns one mutable :class:`IQueryBuilder` and the state shared by
every filter applied to it:

- the sort field and order, applied only when the query is finalized;
- a monotonic counter naming bound parameters, so two filters never bind
  the same name;
- the join alias cache, so two filters traversing the same association
  share one join.

Usage::

    proxy = QueryProxy.from_entity(Book)
    proxy.apply_filter(FilterSpec("title"), "python")
    proxy.set_sort(["author"], "name", "desc")
    proxy.set_page_window(offset=20, limit=10)
    books = proxy.execute(session)

Cloning copies the builder but keeps the counter and alias cache values,
so a clone finalized next to its original never reuses a parameter name
or an alias.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, NamedTuple

from .adapters.sqlalchemy import SQLAlchemyMetadataProvider, SQLAlchemyQueryBuilder
from .exceptions import InvalidArgumentError
from .filters.string import StringFilter
from .joins import JoinAliasManager
from .settings import DatagridSettings
from .sorting import SortOrder, normalize_order_by

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Select
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import Session
    from typing_extensions import Self

    from .filters.base import PredicateResult
    from .filters.spec import FilterSpec, StringOperatorType
    from .ports.comparators import ICaseComparatorResolver
    from .ports.metadata import IMetadataProvider
    from .ports.query_builder import IQueryBuilder

logger = logging.getLogger(__name__)


class PageWindow(NamedTuple):
    offset: int | None
    limit: int | None


class QueryProxy:
    """Filtered, sorted, paginated query under construction."""

    def __init__(
        self,
        query_builder: IQueryBuilder,
        metadata: IMetadataProvider | None = None,
        *,
        comparators: ICaseComparatorResolver | None = None,
        settings: DatagridSettings | None = None,
    ) -> None:
        self._settings = settings or DatagridSettings()
        self._query_builder = query_builder
        self._metadata = metadata or SQLAlchemyMetadataProvider()
        self._comparators = comparators
        self._sort_by: str | None = None
        self._sort_order = self._settings.default_sort_order
        self._unique_parameter_id = 0
        self._join_manager = JoinAliasManager(
            self._metadata, prefix=self._settings.join_alias_prefix
        )
        self._hints: dict[str, Any] = {}

    @classmethod
    def from_entity(
        cls,
        entity: type[Any],
        *,
        metadata: IMetadataProvider | None = None,
        comparators: ICaseComparatorResolver | None = None,
        settings: DatagridSettings | None = None,
    ) -> QueryProxy:
        """Create a proxy over a fresh builder selecting ``entity``."""
        settings = settings or DatagridSettings()
        builder = SQLAlchemyQueryBuilder(entity, alias=settings.root_alias)
        return cls(builder, metadata, comparators=comparators, settings=settings)

    # -- Collaborators -------------------------------------------------------

    @property
    def query_builder(self) -> IQueryBuilder:
        return self._query_builder

    @property
    def metadata(self) -> IMetadataProvider:
        return self._metadata

    @property
    def settings(self) -> DatagridSettings:
        return self._settings

    # -- Sorting -------------------------------------------------------------

    @property
    def sort_by(self) -> str | None:
        return self._sort_by

    @property
    def sort_order(self) -> SortOrder:
        return self._sort_order

    def get_sort(self) -> tuple[str | None, SortOrder]:
        return self._sort_by, self._sort_order

    def set_sort_by(self, association_chain: Sequence[str], field_name: str) -> Self:
        alias = self.entity_join(association_chain)
        self._sort_by = f"{alias}.{field_name}"
        return self

    def set_sort_order(self, sort_order: str | SortOrder) -> Self:
        self._sort_order = SortOrder.parse(sort_order)
        return self

    def set_sort(
        self,
        association_chain: Sequence[str],
        field_name: str,
        sort_order: str | SortOrder,
    ) -> Self:
        """
        Sort on ``field_name`` of the entity reached through ``association_chain``.

        Raises:
            InvalidOrderError: If ``sort_order`` is not ASC/DESC; nothing is
                joined or changed in that case.
        """
        order = SortOrder.parse(sort_order)
        self.set_sort_by(association_chain, field_name)
        self._sort_order = order
        return self

    # -- Filter surface ------------------------------------------------------

    @property
    def join_aliases(self) -> tuple[str, ...]:
        return self._join_manager.aliases

    @property
    def parameter_counter(self) -> int:
        return self._unique_parameter_id

    def next_parameter_name(self) -> str:
        """Return the current counter value as a name suffix, then advance it."""
        parameter_id = self._unique_parameter_id
        self._unique_parameter_id += 1
        return str(parameter_id)

    def entity_join(self, association_chain: Sequence[str]) -> str:
        """Return the alias for ``association_chain``, joining what is missing."""
        return self._join_manager.resolve(self._query_builder, association_chain)

    def target_entity(self, association_chain: Sequence[str]) -> type[Any]:
        """Return the entity ``association_chain`` leads to, without joining."""
        return self._join_manager.target_entity(
            self._query_builder.root_entity, association_chain
        )

    def entity_for(self, alias: str) -> type[Any]:
        return self._query_builder.entity_for(alias)

    def column(self, alias: str, field: str) -> Any:
        return self._query_builder.column(alias, field)

    def and_where(self, predicate: ColumnElement[bool]) -> Self:
        self._query_builder.and_where(predicate)
        return self

    def set_parameter(self, name: str, value: Any) -> Self:
        self._query_builder.set_parameter(name, value)
        return self

    @property
    def parameters(self) -> dict[str, Any]:
        return self._query_builder.parameters

    def apply_filter(
        self,
        spec: FilterSpec,
        value: Any,
        operator_type: StringOperatorType | int | None = None,
    ) -> PredicateResult:
        """
        Apply a string filter configured by ``spec`` with ``value``.

        ``operator_type`` overrides ``spec.operator_type`` for this call.
        """
        string_filter = StringFilter(
            spec, comparators=self._comparators, settings=self._settings
        )
        return string_filter.apply(self, {"value": value, "type": operator_type})

    # -- Pagination ----------------------------------------------------------

    @property
    def first_result(self) -> int | None:
        return self._query_builder.first_result

    def set_first_result(self, first_result: int | None) -> Self:
        _check_bound("first_result", first_result)
        self._query_builder.set_first_result(first_result)
        return self

    @property
    def max_results(self) -> int | None:
        return self._query_builder.max_results

    def set_max_results(self, max_results: int | None) -> Self:
        _check_bound("max_results", max_results)
        self._query_builder.set_max_results(max_results)
        return self

    def set_page_window(self, offset: int | None, limit: int | None) -> Self:
        _check_bound("offset", offset)
        _check_bound("limit", limit)
        self._query_builder.set_first_result(offset)
        self._query_builder.set_max_results(limit)
        return self

    def get_page_window(self) -> PageWindow:
        return PageWindow(
            offset=self._query_builder.first_result,
            limit=self._query_builder.max_results,
        )

    # -- Hints ---------------------------------------------------------------

    @property
    def hints(self) -> dict[str, Any]:
        return dict(self._hints)

    def set_hint(self, name: str, value: Any) -> Self:
        """Set an execution option passed along with the finalized statement."""
        self._hints[name] = value
        return self

    # -- Finalization --------------------------------------------------------

    def finalize(self) -> Select[Any]:
        """
        Build the executable statement.

        The sort field goes first in ORDER BY, existing ORDER BY parts follow
        and the root identifiers close it.  The stored builder is left as is,
        so the proxy can be finalized again.
        """
        builder = normalize_order_by(
            self._query_builder,
            self._sort_by,
            self._sort_order,
            self._metadata.identifier_fields(self._query_builder.root_entity),
        )
        stmt = builder.build()
        if self._hints:
            stmt = stmt.execution_options(**self._hints)
        logger.debug(
            "Finalized %s query: %d join(s), %d predicate(s), %d parameter(s)",
            self._query_builder.root_entity.__name__,
            len(builder.joins),
            len(builder.where_clauses),
            len(builder.parameters),
        )
        return stmt

    def execute(self, session: Session) -> list[Any]:
        """Run the finalized statement and return the root entities."""
        return list(session.scalars(self.finalize()).all())

    async def execute_async(self, session: AsyncSession) -> list[Any]:
        result = await session.scalars(self.finalize())
        return list(result.all())

    # -- Copying -------------------------------------------------------------

    def clone(self) -> QueryProxy:
        """
        Copy the proxy with its own builder.

        Sort state, hints, the parameter counter and the join alias cache
        carry their current values over; none of them is reset.
        """
        clone = QueryProxy(
            self._query_builder.clone(),
            self._metadata,
            comparators=self._comparators,
            settings=self._settings,
        )
        clone._sort_by = self._sort_by
        clone._sort_order = self._sort_order
        clone._unique_parameter_id = self._unique_parameter_id
        clone._join_manager = self._join_manager.copy()
        clone._hints = dict(self._hints)
        return clone

    def __copy__(self) -> QueryProxy:
        return self.clone()


def _check_bound(name: str, value: int | None) -> None:
    if value is not None and value < 0:
        raise InvalidArgumentError(
            f"{name} must not be negative, got {value}", argument=name
        )

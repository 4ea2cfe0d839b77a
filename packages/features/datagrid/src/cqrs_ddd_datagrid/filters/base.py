"""Filter base class and the result of applying a filter."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from ..exceptions import InvalidArgumentError

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement

    from ..proxy import QueryProxy
    from .spec import FilterSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PredicateResult:
    """
    What one filter application contributed to a proxy.

    Attributes:
        active: Whether the filter added a predicate.
        joins: Join aliases the application created or first reused.
        predicate: The WHERE predicate appended, if any.
        parameter: ``(name, value)`` of the bound parameter, if any.
    """

    active: bool = False
    joins: tuple[str, ...] = ()
    predicate: ColumnElement[bool] | None = None
    parameter: tuple[str, Any] | None = None


class Filter(ABC):
    """
    A datagrid filter bound to one :class:`FilterSpec`.

    :meth:`apply` validates the data and the target field, resolves the
    spec's association chain and delegates to :meth:`filter`.  A filter that
    does not accept its data, or fails validation, leaves the proxy
    untouched, joins included.
    """

    def __init__(self, spec: FilterSpec) -> None:
        self._spec = spec
        self._active = False

    @property
    def spec(self) -> FilterSpec:
        return self._spec

    @property
    def name(self) -> str:
        return self._spec.name

    def is_active(self) -> bool:
        return self._active

    def apply(self, query: QueryProxy, data: Any) -> PredicateResult:
        if not self.accepts(data):
            logger.debug("Filter %r skipped: no value to filter on", self.name)
            return PredicateResult()

        entity = query.target_entity(self._spec.parent_association_chain)
        self.validate(query, entity, self._spec.field_name, data)

        known_aliases = set(query.join_aliases)
        alias = query.entity_join(self._spec.parent_association_chain)
        result = self.filter(query, alias, self._spec.field_name, data)
        created = tuple(a for a in query.join_aliases if a not in known_aliases)
        return replace(result, joins=created)

    @abstractmethod
    def accepts(self, data: Any) -> bool:
        """Whether ``data`` activates the filter."""
        ...

    def validate(
        self, query: QueryProxy, entity: type[Any], field: str, data: Any
    ) -> None:
        """
        Reject ``data`` or the target field before anything is joined.

        Raises:
            InvalidArgumentError: If ``entity`` has no attribute ``field``.
        """
        if not query.metadata.has_field(entity, field):
            raise InvalidArgumentError(
                f"'{entity.__name__}' has no attribute '{field}'", argument="field"
            )

    @abstractmethod
    def filter(
        self, query: QueryProxy, alias: str, field: str, data: Any
    ) -> PredicateResult:
        """Append this filter's predicate on ``alias.field`` to ``query``."""
        ...

    def _new_parameter_name(self, query: QueryProxy) -> str:
        return f"{self._spec.parameter_prefix}_{query.next_parameter_name()}"

    def _apply_where(self, query: QueryProxy, predicate: ColumnElement[bool]) -> None:
        query.and_where(predicate)
        self._active = True

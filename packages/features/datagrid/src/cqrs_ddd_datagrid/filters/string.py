"""
String filter: contains / not contains / starts with / ends with / equal /
not equal on a string field, with optional case folding.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from sqlalchemy import bindparam, func

from ..exceptions import InvalidArgumentError
from ..settings import DatagridSettings
from .base import Filter, PredicateResult
from .operators import DEFAULT_STRING_REGISTRY, StringOperatorRegistry
from .spec import StringOperatorType

if TYPE_CHECKING:
    from ..ports.comparators import ICaseComparatorResolver
    from ..proxy import QueryProxy
    from .spec import FilterSpec

logger = logging.getLogger(__name__)

_STRING_TYPES = frozenset(
    {
        "string",
        "text",
        "unicode",
        "unicode_text",
        "varchar",
        "nvarchar",
        "char",
        "nchar",
        "clob",
        "enum",
    }
)
_MULTI_VALUE_TYPES = (list, tuple, set, frozenset)


class StringFilter(Filter):
    """
    Filter a string field with one of the :class:`StringOperatorType` operators.

    ``data`` is a mapping with a ``value`` and an optional ``type``; a missing
    ``type`` falls back to the spec's operator type.  ``None``, ``""`` and
    empty sequences deactivate the filter unless the spec allows empty
    values, in which case they filter on ``""``.  ``0`` and ``"0"`` are
    regular values.

    Case handling follows ``spec.case_sensitive``:

    - ``False``: ``lower(field)`` is compared with the lower-cased value.
    - ``True``: the placeholder is wrapped with the comparator named by
      ``settings.case_sensitive_function`` when ``comparators`` resolves
      it, and left bare otherwise.
    - ``None``: the placeholder is left bare; no comparator is looked up.
    """

    def __init__(
        self,
        spec: FilterSpec,
        *,
        comparators: ICaseComparatorResolver | None = None,
        registry: StringOperatorRegistry | None = None,
        settings: DatagridSettings | None = None,
    ) -> None:
        super().__init__(spec)
        self._comparators = comparators
        self._registry = registry or DEFAULT_STRING_REGISTRY
        self._settings = settings or DatagridSettings()

    def accepts(self, data: Any) -> bool:
        return self._normalize_value(data) is not None

    def validate(
        self, query: QueryProxy, entity: type[Any], field: str, data: Any
    ) -> None:
        super().validate(query, entity, field, data)
        self._registry.require(self._operator_type(data))

    def filter(
        self, query: QueryProxy, alias: str, field: str, data: Any
    ) -> PredicateResult:
        value = self._normalize_value(data)
        if value is None:
            return PredicateResult()

        operator = self._registry.require(self._operator_type(data))
        column = query.column(alias, field)
        self._check_field_type(query, alias, field)

        lhs: Any = column
        parameter_name = self._new_parameter_name(query)
        rhs: Any = bindparam(parameter_name)

        if self.spec.case_sensitive is False:
            lhs = func.lower(column)
            value = value.lower()
        elif self.spec.case_sensitive:
            rhs = self._case_sensitive_parameter(rhs)

        predicate = operator.apply(column, lhs, rhs)
        parameter_value = operator.format_value(value)

        self._apply_where(query, predicate)
        query.set_parameter(parameter_name, parameter_value)
        return PredicateResult(
            active=True,
            predicate=predicate,
            parameter=(parameter_name, parameter_value),
        )

    def _normalize_value(self, data: Any) -> str | None:
        if not isinstance(data, Mapping) or "value" not in data:
            return None

        value = data["value"]
        if isinstance(value, _MULTI_VALUE_TYPES):
            if value:
                raise InvalidArgumentError(
                    f"Filter {self.name!r} expects a single value, got {value!r}",
                    argument="value",
                )
            value = None

        text = "" if value is None else str(value)
        if text == "" and not self.spec.allow_empty:
            return None
        return text

    def _operator_type(self, data: Mapping[str, Any]) -> StringOperatorType:
        operator_type = data.get("type")
        if operator_type is None:
            return self.spec.operator_type
        return StringOperatorType.coerce(operator_type)

    def _case_sensitive_parameter(self, parameter: Any) -> Any:
        function_name = self._settings.case_sensitive_function
        comparator = (
            self._comparators.lookup(function_name)
            if self._comparators is not None
            else None
        )
        if comparator is None:
            logger.debug(
                "No %r comparator available for filter %r; comparing without it",
                function_name,
                self.name,
            )
            return parameter
        return comparator.wrap(parameter)

    def _check_field_type(self, query: QueryProxy, alias: str, field: str) -> None:
        type_tag = query.metadata.field_type(query.entity_for(alias), field)
        if type_tag is not None and type_tag not in _STRING_TYPES:
            logger.warning(
                "String filter %r applied to %s.%s of type %r",
                self.name,
                alias,
                field,
                type_tag,
            )

"""
String operator strategies.

Each operator knows how to decorate the bound value (``%value%`` for
CONTAINS, ``value%`` for STARTS_WITH, ...) and how to compare the column
side with the parameter side.  Negative operators also match NULL columns,
since ``NULL NOT LIKE '%x%'`` is not true in SQL.

Usage::

    operator = DEFAULT_STRING_REGISTRY.get(StringOperatorType.CONTAINS)
    operator.format_value("asd")                           # "%asd%"
    operator.apply(column, column, bindparam("title_0"))   # title LIKE :title_0
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, cast

from sqlalchemy import or_

from ..exceptions import InvalidArgumentError
from .spec import StringOperatorType

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement


class StringOperator(ABC):
    """Strategy for one :class:`StringOperatorType`."""

    matches_null: ClassVar[bool] = False

    @property
    @abstractmethod
    def name(self) -> StringOperatorType:
        """The operator type this strategy handles."""
        ...

    @abstractmethod
    def format_value(self, value: str) -> str:
        """Decorate the bound value, e.g. with LIKE wildcards."""
        ...

    @abstractmethod
    def compare(self, lhs: Any, rhs: Any) -> ColumnElement[bool]: ...

    def apply(self, column: Any, lhs: Any, rhs: Any) -> ColumnElement[bool]:
        """
        Build the predicate.

        Args:
            column: The raw mapped column, used for the ``IS NULL`` branch.
            lhs: Column side, possibly folded with ``lower()``.
            rhs: Parameter side, possibly wrapped by a case comparator.
        """
        predicate = self.compare(lhs, rhs)
        if self.matches_null:
            return or_(predicate, column.is_(None))
        return predicate


class ContainsOperator(StringOperator):
    @property
    def name(self) -> StringOperatorType:
        return StringOperatorType.CONTAINS

    def format_value(self, value: str) -> str:
        return f"%{value}%"

    def compare(self, lhs: Any, rhs: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", lhs.like(rhs))


class NotContainsOperator(StringOperator):
    matches_null = True

    @property
    def name(self) -> StringOperatorType:
        return StringOperatorType.NOT_CONTAINS

    def format_value(self, value: str) -> str:
        return f"%{value}%"

    def compare(self, lhs: Any, rhs: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", lhs.not_like(rhs))


class StartsWithOperator(StringOperator):
    @property
    def name(self) -> StringOperatorType:
        return StringOperatorType.STARTS_WITH

    def format_value(self, value: str) -> str:
        return f"{value}%"

    def compare(self, lhs: Any, rhs: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", lhs.like(rhs))


class EndsWithOperator(StringOperator):
    @property
    def name(self) -> StringOperatorType:
        return StringOperatorType.ENDS_WITH

    def format_value(self, value: str) -> str:
        return f"%{value}"

    def compare(self, lhs: Any, rhs: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", lhs.like(rhs))


class EqualOperator(StringOperator):
    @property
    def name(self) -> StringOperatorType:
        return StringOperatorType.EQUAL

    def format_value(self, value: str) -> str:
        return value

    def compare(self, lhs: Any, rhs: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", lhs == rhs)


class NotEqualOperator(StringOperator):
    matches_null = True

    @property
    def name(self) -> StringOperatorType:
        return StringOperatorType.NOT_EQUAL

    def format_value(self, value: str) -> str:
        return value

    def compare(self, lhs: Any, rhs: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", lhs != rhs)


class StringOperatorRegistry:
    """Registry of :class:`StringOperator` instances keyed by operator type."""

    def __init__(self) -> None:
        self._operators: dict[StringOperatorType, StringOperator] = {}

    def register(self, operator: StringOperator) -> None:
        self._operators[operator.name] = operator

    def register_all(self, *operators: StringOperator) -> None:
        for op in operators:
            self.register(op)

    def unregister(self, name: StringOperatorType) -> None:
        self._operators.pop(name, None)

    def get(self, name: StringOperatorType) -> StringOperator | None:
        return self._operators.get(name)

    @property
    def supported_operators(self) -> set[StringOperatorType]:
        return set(self._operators.keys())

    def require(self, name: StringOperatorType) -> StringOperator:
        """
        Look up an operator that must exist.

        Raises:
            InvalidArgumentError: If the operator is not registered.
        """
        op = self.get(name)
        if op is None:
            supported = ", ".join(t.name for t in sorted(self.supported_operators))
            raise InvalidArgumentError(
                f"Unsupported string operator: {name!r}. Supported: {supported}",
                argument="operator_type",
            )
        return op


def build_default_string_registry() -> StringOperatorRegistry:
    """Create a registry with the six built-in string operators."""
    registry = StringOperatorRegistry()
    registry.register_all(
        ContainsOperator(),
        NotContainsOperator(),
        EqualOperator(),
        StartsWithOperator(),
        EndsWithOperator(),
        NotEqualOperator(),
    )
    return registry


DEFAULT_STRING_REGISTRY: StringOperatorRegistry = build_default_string_registry()

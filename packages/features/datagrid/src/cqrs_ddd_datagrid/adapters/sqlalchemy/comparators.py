"""
Named custom SQL functions and the built-in case comparators.

Usage::

    registry = build_default_function_registry()
    comparator = registry.lookup("binary")   # BinaryComparator()
    comparator.wrap(bindparam("name_0"))     # binary(:name_0)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from sqlalchemy import func

from ...ports.comparators import CaseComparator

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement

logger = logging.getLogger(__name__)


class BinaryComparator(CaseComparator):
    """MySQL-style ``BINARY(expr)``: compare byte-wise, hence case-sensitively."""

    @property
    def name(self) -> str:
        return "binary"

    def wrap(self, expression: Any) -> ColumnElement[Any]:
        return func.binary(expression)


class CustomFunctionRegistry:
    """
    Registry of custom SQL functions keyed by logical name.

    Registrations may be :class:`CaseComparator` instances or subclasses.
    :meth:`lookup` only ever returns a ``CaseComparator``: anything else
    registered under the name is ignored and reported as ``None``.
    """

    def __init__(self, functions: Mapping[str, Any] | None = None) -> None:
        self._functions: dict[str, Any] = dict(functions or {})

    def register(self, name: str, function: Any) -> None:
        self._functions[name] = function

    def unregister(self, name: str) -> None:
        self._functions.pop(name, None)

    def has(self, name: str) -> bool:
        return name in self._functions

    def lookup(self, name: str) -> CaseComparator | None:
        function = self._functions.get(name)
        if function is None:
            return None
        if isinstance(function, CaseComparator):
            return function
        if isinstance(function, type) and issubclass(function, CaseComparator):
            return function()
        logger.debug(
            "Custom function %r is registered as %r, which is not a CaseComparator",
            name,
            function,
        )
        return None


def build_default_function_registry() -> CustomFunctionRegistry:
    """Create a registry holding the built-in ``binary`` comparator."""
    return CustomFunctionRegistry({"binary": BinaryComparator})

"""
Case comparator lookup.

A case comparator wraps the bound placeholder of a string comparison in a
dialect-specific SQL function (for instance MySQL's ``BINARY``) to force a
case-sensitive match.  Resolvers look comparators up by logical name and
return ``None`` when the name is unknown or the registration is not a
:class:`CaseComparator`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement


class CaseComparator(ABC):
    """Strategy wrapping a SQL expression to change its case sensitivity."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Logical name the comparator is registered under."""
        ...

    @abstractmethod
    def wrap(self, expression: Any) -> ColumnElement[Any]:
        """Return ``expression`` wrapped in the comparator's SQL function."""
        ...


@runtime_checkable
class ICaseComparatorResolver(Protocol):
    def lookup(self, name: str) -> CaseComparator | None: ...

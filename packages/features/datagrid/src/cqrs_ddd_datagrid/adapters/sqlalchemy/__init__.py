"""
SQLAlchemy adapters for the datagrid ports.

Public API:
    - ``SQLAlchemyQueryBuilder`` — ``IQueryBuilder`` over ORM ``Select``
    - ``SQLAlchemyMetadataProvider`` — ``IMetadataProvider`` via mapper
      inspection
    - ``CustomFunctionRegistry`` / ``BinaryComparator`` — case comparator
      lookup (``ICaseComparatorResolver``)
"""

from .builder import SQLAlchemyQueryBuilder
from .comparators import (
    BinaryComparator,
    CustomFunctionRegistry,
    build_default_function_registry,
)
from .metadata import SQLAlchemyMetadataProvider

__all__ = [
    "BinaryComparator",
    "CustomFunctionRegistry",
    "SQLAlchemyMetadataProvider",
    "SQLAlchemyQueryBuilder",
    "build_default_function_registry",
]

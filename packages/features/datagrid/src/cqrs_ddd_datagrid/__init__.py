"""Admin datagrid queries — joins, filters, deterministic sorting, pagination."""

from __future__ import annotations

from .adapters.sqlalchemy import (
    BinaryComparator,
    CustomFunctionRegistry,
    SQLAlchemyMetadataProvider,
    SQLAlchemyQueryBuilder,
    build_default_function_registry,
)
from .exceptions import (
    DatagridError,
    InvalidArgumentError,
    InvalidOrderError,
    UnresolvedAssociationError,
)
from .filters import (
    Filter,
    FilterSpec,
    PredicateResult,
    StringFilter,
    StringOperator,
    StringOperatorRegistry,
    StringOperatorType,
)
from .joins import JoinAliasManager
from .ports import (
    CaseComparator,
    ICaseComparatorResolver,
    IMetadataProvider,
    IQueryBuilder,
    JoinClause,
    OrderByPart,
)
from .proxy import PageWindow, QueryProxy
from .settings import DatagridSettings
from .sorting import SortOrder, normalize_order_by

__all__ = [
    # Proxy
    "QueryProxy",
    "PageWindow",
    "DatagridSettings",
    # Joins / sorting
    "JoinAliasManager",
    "SortOrder",
    "normalize_order_by",
    # Filters
    "Filter",
    "FilterSpec",
    "PredicateResult",
    "StringFilter",
    "StringOperator",
    "StringOperatorRegistry",
    "StringOperatorType",
    # Ports
    "CaseComparator",
    "ICaseComparatorResolver",
    "IMetadataProvider",
    "IQueryBuilder",
    "JoinClause",
    "OrderByPart",
    # SQLAlchemy adapters
    "BinaryComparator",
    "CustomFunctionRegistry",
    "SQLAlchemyMetadataProvider",
    "SQLAlchemyQueryBuilder",
    "build_default_function_registry",
    # Exceptions
    "DatagridError",
    "InvalidArgumentError",
    "InvalidOrderError",
    "UnresolvedAssociationError",
]

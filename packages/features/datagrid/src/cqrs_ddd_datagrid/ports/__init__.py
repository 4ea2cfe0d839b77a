from .comparators import CaseComparator, ICaseComparatorResolver
from .metadata import IMetadataProvider
from .query_builder import IQueryBuilder, JoinClause, JoinKind, OrderByPart

__all__ = [
    "CaseComparator",
    "ICaseComparatorResolver",
    "IMetadataProvider",
    "IQueryBuilder",
    "JoinClause",
    "JoinKind",
    "OrderByPart",
]

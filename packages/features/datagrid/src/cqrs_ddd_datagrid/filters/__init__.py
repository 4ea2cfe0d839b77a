"""
Datagrid filters.

Public API:
    - ``StringFilter`` — string matching with case handling
    - ``FilterSpec`` / ``StringOperatorType`` — filter configuration
    - ``Filter`` / ``PredicateResult`` — base class and application result
    - ``StringOperator`` / ``StringOperatorRegistry`` — extension points for
      custom operators
"""

from .base import Filter, PredicateResult
from .operators import (
    DEFAULT_STRING_REGISTRY,
    StringOperator,
    StringOperatorRegistry,
    build_default_string_registry,
)
from .spec import FilterSpec, StringOperatorType
from .string import StringFilter

__all__ = [
    "DEFAULT_STRING_REGISTRY",
    "Filter",
    "FilterSpec",
    "PredicateResult",
    "StringFilter",
    "StringOperator",
    "StringOperatorRegistry",
    "StringOperatorType",
    "build_default_string_registry",
]

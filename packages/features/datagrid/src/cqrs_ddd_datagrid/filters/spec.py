"""Filter descriptors."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from ..exceptions import InvalidArgumentError


class StringOperatorType(IntEnum):
    """Operators offered by string filters, numbered as the admin forms send them."""

    CONTAINS = 1
    NOT_CONTAINS = 2
    EQUAL = 3
    STARTS_WITH = 4
    ENDS_WITH = 5
    NOT_EQUAL = 6

    @classmethod
    def coerce(cls, value: object) -> StringOperatorType:
        """
        Accept members, their integer values, numeric strings or member names.

        Raises:
            InvalidArgumentError: If ``value`` names no operator.
        """
        if isinstance(value, cls):
            return value
        try:
            if isinstance(value, str) and not value.strip().isdigit():
                return cls[value.strip().upper()]
            return cls(int(value))  # type: ignore[call-overload]
        except (KeyError, TypeError, ValueError):
            raise InvalidArgumentError(
                f"Unknown string operator type {value!r}. "
                f"Valid types: {', '.join(f'{m.name}={m.value}' for m in cls)}",
                argument="operator_type",
            ) from None


@dataclass(frozen=True)
class FilterSpec:
    """
    Immutable configuration of one filter instance.

    Attributes:
        name: Filter name, used in log records.
        field_name: Field filtered on; prefixes the filter's bound
            parameter names.  Defaults to ``name``.
        parent_association_chain: Associations traversed from the root
            entity to reach ``field_name``.
        operator_type: Operator used when the submitted data names none.
        case_sensitive: ``True`` forces a case-sensitive comparison when a
            comparator is available, ``False`` folds both sides to lower
            case, ``None`` compares as the database does.
        allow_empty: Apply the filter with ``""`` when no value is given.
    """

    name: str
    field_name: str = ""
    parent_association_chain: tuple[str, ...] = ()
    operator_type: StringOperatorType = StringOperatorType.CONTAINS
    case_sensitive: bool | None = None
    allow_empty: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidArgumentError("Filter name must not be empty", argument="name")
        object.__setattr__(self, "field_name", self.field_name or self.name)
        object.__setattr__(
            self, "parent_association_chain", tuple(self.parent_association_chain)
        )
        object.__setattr__(
            self, "operator_type", StringOperatorType.coerce(self.operator_type)
        )

    @property
    def parameter_prefix(self) -> str:
        return self.field_name.replace(".", "_")

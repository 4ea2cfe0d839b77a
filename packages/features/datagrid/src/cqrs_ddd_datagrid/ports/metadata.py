"""IMetadataProvider — entity reflection consumed by the query proxy."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IMetadataProvider(Protocol):
    """Answer questions about mapped entities: identifiers, associations, types."""

    def identifier_fields(self, entity: type[Any]) -> list[str]:
        """Primary-key attribute names, in declared order."""
        ...

    def has_association(self, entity: type[Any], field_name: str) -> bool: ...

    def association_names(self, entity: type[Any]) -> list[str]: ...

    def target_entity(self, entity: type[Any], field_name: str) -> type[Any]:
        """Entity class on the other side of the association ``field_name``."""
        ...

    def has_field(self, entity: type[Any], field_name: str) -> bool:
        """Whether ``field_name`` is a mapped attribute of ``entity``."""
        ...

    def field_type(self, entity: type[Any], field_name: str) -> str | None:
        """Lower-case type tag of a mapped column, ``None`` when not a column."""
        ...

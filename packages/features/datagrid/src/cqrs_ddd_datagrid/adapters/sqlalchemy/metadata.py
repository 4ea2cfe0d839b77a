"""Entity reflection backed by SQLAlchemy mapper inspection."""

from __future__ import annotations

from typing import Any

from sqlalchemy import inspect

from ...exceptions import UnresolvedAssociationError


class SQLAlchemyMetadataProvider:
    """:class:`IMetadataProvider` for declaratively mapped classes."""

    def identifier_fields(self, entity: type[Any]) -> list[str]:
        mapper = inspect(entity)
        return [
            mapper.get_property_by_column(column).key for column in mapper.primary_key
        ]

    def has_association(self, entity: type[Any], field_name: str) -> bool:
        return field_name in inspect(entity).relationships

    def association_names(self, entity: type[Any]) -> list[str]:
        return [rel.key for rel in inspect(entity).relationships]

    def target_entity(self, entity: type[Any], field_name: str) -> type[Any]:
        relationships = inspect(entity).relationships
        if field_name not in relationships:
            raise UnresolvedAssociationError(
                field_name, entity.__name__, self.association_names(entity)
            )
        return relationships[field_name].mapper.class_

    def has_field(self, entity: type[Any], field_name: str) -> bool:
        return field_name in inspect(entity).all_orm_descriptors

    def field_type(self, entity: type[Any], field_name: str) -> str | None:
        column_attrs = inspect(entity).column_attrs
        if field_name not in column_attrs:
            return None
        column_type = column_attrs[field_name].columns[0].type
        visit_name = getattr(column_type, "__visit_name__", type(column_type).__name__)
        return str(visit_name).lower()

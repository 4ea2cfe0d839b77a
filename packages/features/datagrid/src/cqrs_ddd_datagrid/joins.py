"""
Join alias resolution for association chains.

Filters and sorters reach fields on related entities through a chain of
association names (``["author", "publisher"]``).  :class:`JoinAliasManager`
turns such a chain into the alias of the last joined entity, reusing joins
the builder already has and adding LEFT JOINs only for missing steps.

Synthesized aliases concatenate a prefix with every association joined by
the manager: ``o.author`` becomes ``s_author`` and ``s_author.publisher``
becomes ``s_author_publisher``.  Steps served by a pre-existing join do not
extend the synthesized alias.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

from .exceptions import UnresolvedAssociationError

if TYPE_CHECKING:
    from .ports.metadata import IMetadataProvider
    from .ports.query_builder import IQueryBuilder, JoinClause

logger = logging.getLogger(__name__)


class JoinAliasManager:
    """Resolve association chains to join aliases without duplicate joins."""

    def __init__(
        self,
        metadata: IMetadataProvider,
        *,
        prefix: str = "s",
        aliases: Iterable[str] = (),
    ) -> None:
        self._metadata = metadata
        self._prefix = prefix
        self._aliases: list[str] = []
        for alias in aliases:
            self._remember(alias)

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def aliases(self) -> tuple[str, ...]:
        """Aliases joined or reused so far, in first-seen order."""
        return tuple(self._aliases)

    def copy(self) -> JoinAliasManager:
        return JoinAliasManager(
            self._metadata, prefix=self._prefix, aliases=self._aliases
        )

    def target_entity(
        self, root_entity: type[Any], association_chain: Sequence[str]
    ) -> type[Any]:
        """
        Return the entity reached by following ``association_chain`` from
        ``root_entity``.  Nothing is joined.

        Raises:
            UnresolvedAssociationError: If a step is not an association of
                the entity it is applied to.
        """
        entity = root_entity
        for field_name in association_chain:
            if not self._metadata.has_association(entity, field_name):
                raise UnresolvedAssociationError(
                    field_name,
                    entity.__name__,
                    self._metadata.association_names(entity),
                    chain=association_chain,
                )
            entity = self._metadata.target_entity(entity, field_name)
        return entity

    def resolve(self, builder: IQueryBuilder, association_chain: Sequence[str]) -> str:
        """
        Return the alias reached by following ``association_chain`` from the
        builder's root alias, adding LEFT JOINs to ``builder`` as needed.

        The whole chain is checked first, so a failing chain adds no join.

        Raises:
            UnresolvedAssociationError: If a step is not an association of
                the entity it is applied to.
        """
        self.target_entity(builder.root_entity, association_chain)

        alias = builder.root_alias
        new_alias = self._prefix

        for field_name in association_chain:
            join_expr = f"{alias}.{field_name}"
            existing = _find_join(builder.joins, join_expr)
            if existing is not None:
                self._remember(existing.alias)
                alias = existing.alias
                continue

            new_alias = f"{new_alias}_{field_name}"
            # A synthesized alias seen before is reused as is, even when an
            # unrelated chain produced it.
            if new_alias not in self._aliases:
                self._aliases.append(new_alias)
                builder.left_join(join_expr, new_alias)
                logger.debug("LEFT JOIN %s AS %s", join_expr, new_alias)
            alias = new_alias

        return alias

    def _remember(self, alias: str) -> None:
        if alias not in self._aliases:
            self._aliases.append(alias)


def _find_join(joins: Iterable[JoinClause], join_expr: str) -> JoinClause | None:
    for join in joins:
        if join.join == join_expr:
            return join
    return None

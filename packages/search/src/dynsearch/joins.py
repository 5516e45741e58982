"""
Field path resolution and join bookkeeping.

A :class:`Binding` names the table a field reference points at: the root
entity or the target of one relation. :class:`JoinSet` remembers which
relations a compilation has joined so far, in first-use order; it is
immutable and :meth:`JoinSet.add` returns a new set.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .keys import FieldKey, QualifiedField, parse_field_key

if TYPE_CHECKING:
    from .schema import SchemaIntrospector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Binding:
    """
    Table a field reference is resolved against.

    ``relation`` is ``None`` for the root entity; otherwise it names the
    relation on the root, and ``entity`` is the relation's target.
    """

    entity: Any
    relation: str | None = None

    @property
    def is_root(self) -> bool:
        return self.relation is None


@dataclass(frozen=True)
class JoinSet:
    relations: tuple[str, ...] = ()

    @classmethod
    def of(cls, relations: Iterable[str]) -> JoinSet:
        joins = cls()
        for relation in relations:
            joins = joins.add(relation)
        return joins

    def add(self, relation: str) -> JoinSet:
        if relation in self.relations:
            return self
        return JoinSet(self.relations + (relation,))

    def union(self, other: JoinSet) -> JoinSet:
        joins = self
        for relation in other.relations:
            joins = joins.add(relation)
        return joins

    def __contains__(self, relation: object) -> bool:
        return relation in self.relations

    def __iter__(self) -> Iterator[str]:
        return iter(self.relations)

    def __len__(self) -> int:
        return len(self.relations)


def resolve_binding(
    key: FieldKey,
    join_set: JoinSet,
    entity: Any,
    introspector: SchemaIntrospector,
) -> tuple[Binding, JoinSet]:
    """
    Resolve the binding of *key*, recording its relation in the join set.

    Raises :class:`~dynsearch.exceptions.UnknownRelationError` for a
    relation the entity does not have.
    """
    if not isinstance(key, QualifiedField):
        return Binding(entity), join_set

    info = introspector.relation_info(entity, key.relation)
    if key.relation not in join_set:
        logger.debug("Joining relation '%s'", key.relation)
    return Binding(info.target, key.relation), join_set.add(key.relation)


def resolve(
    key: Any,
    join_set: JoinSet,
    entity: Any,
    introspector: SchemaIntrospector,
) -> tuple[Binding, JoinSet]:
    """
    Resolve *key* to a binding and validate the field on it.

    Raises :class:`~dynsearch.exceptions.UnknownFieldError` when the field
    does not exist on the bound entity.
    """
    field_key = parse_field_key(key)
    binding, joins = resolve_binding(field_key, join_set, entity, introspector)
    # Raises for unknown fields.
    introspector.field_type(binding.entity, field_key.name)
    return binding, joins

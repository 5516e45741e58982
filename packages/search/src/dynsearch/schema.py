"""
Schema introspection contract.

The compiler never inspects an ORM directly. It asks a
:class:`SchemaIntrospector` for a field's semantic type and for the target
of a one-hop relation. Backends implement the protocol over their own
metadata; :class:`StaticSchemaIntrospector` serves tests and in-memory
collections from a plain mapping.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from .exceptions import UnknownFieldError, UnknownRelationError


class FieldType(str, Enum):
    DATE = "date"
    DATETIME = "datetime"
    NAIVE_DATETIME = "naive_datetime"
    TIME = "time"
    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    STRING = "string"
    BINARY = "binary"
    MAP = "map"
    UUID = "uuid"


@dataclass(frozen=True)
class ArrayType:
    """Array column whose items have semantic type *item*."""

    item: FieldType

    def __str__(self) -> str:
        return f"array({self.item.value})"


SemanticType = FieldType | ArrayType

# Types matched by equality; the rest match by case-insensitive substring.
EXACT_TYPES: frozenset[FieldType] = frozenset(
    {
        FieldType.DATE,
        FieldType.DATETIME,
        FieldType.NAIVE_DATETIME,
        FieldType.TIME,
        FieldType.INTEGER,
        FieldType.FLOAT,
        FieldType.DECIMAL,
        FieldType.BOOLEAN,
        FieldType.UUID,
    }
)

TEXT_TYPES: frozenset[FieldType] = frozenset({FieldType.STRING, FieldType.BINARY})


def is_exact(semantic_type: SemanticType) -> bool:
    return isinstance(semantic_type, FieldType) and semantic_type in EXACT_TYPES


def is_array(semantic_type: SemanticType) -> bool:
    return isinstance(semantic_type, ArrayType)


def is_text(semantic_type: SemanticType) -> bool:
    return isinstance(semantic_type, FieldType) and semantic_type in TEXT_TYPES


@dataclass(frozen=True)
class RelationInfo:
    """
    One-hop relation description.

    Attributes:
        name: Relation name on the owning entity.
        target: Entity handle of the related side.
        join_key: Column names on the owning side that drive the join.
        many: ``True`` for to-many relations.
        owning: ``True`` when the foreign key lives on the owning entity
            (belongs-to). Such relations are skipped by ``preload=True``.
    """

    name: str
    target: Any
    join_key: tuple[str, ...] = ()
    many: bool = False
    owning: bool = False


@runtime_checkable
class SchemaIntrospector(Protocol):
    """Field-type and relation lookup for an opaque entity handle."""

    def field_type(self, entity: Any, field: str) -> SemanticType:
        """Return the semantic type or raise :class:`UnknownFieldError`."""
        ...

    def relation_info(self, entity: Any, relation: str) -> RelationInfo:
        """Return the relation or raise :class:`UnknownRelationError`."""
        ...

    def has_field(self, entity: Any, field: str) -> bool: ...

    def field_names(self, entity: Any) -> list[str]: ...

    def relation_names(self, entity: Any) -> list[str]: ...

    def primary_key(self, entity: Any) -> str: ...


def entity_name(entity: Any) -> str:
    return getattr(entity, "__name__", None) or str(entity)


@dataclass
class EntitySchema:
    fields: dict[str, SemanticType] = field(default_factory=dict)
    relations: dict[str, RelationInfo] = field(default_factory=dict)
    primary_key: str = "id"


class StaticSchemaIntrospector:
    """
    :class:`SchemaIntrospector` backed by a mapping of entity -> schema.

    Usage::

        introspector = StaticSchemaIntrospector(
            {
                "Order": EntitySchema(
                    fields={"id": FieldType.INTEGER, "status": FieldType.STRING},
                    relations={"customer": RelationInfo("customer", "Customer")},
                ),
                "Customer": EntitySchema(fields={"name": FieldType.STRING}),
            }
        )
    """

    def __init__(self, schemas: dict[Any, EntitySchema]) -> None:
        self._schemas = schemas

    def _schema(self, entity: Any) -> EntitySchema:
        try:
            return self._schemas[entity]
        except KeyError:
            raise KeyError(f"No schema registered for {entity_name(entity)}") from None

    def field_type(self, entity: Any, field: str) -> SemanticType:
        schema = self._schema(entity)
        if field not in schema.fields:
            raise UnknownFieldError(field, entity_name(entity), list(schema.fields))
        return schema.fields[field]

    def relation_info(self, entity: Any, relation: str) -> RelationInfo:
        schema = self._schema(entity)
        if relation not in schema.relations:
            raise UnknownRelationError(
                relation, entity_name(entity), list(schema.relations)
            )
        return schema.relations[relation]

    def has_field(self, entity: Any, field: str) -> bool:
        return field in self._schema(entity).fields

    def field_names(self, entity: Any) -> list[str]:
        return list(self._schema(entity).fields)

    def relation_names(self, entity: Any) -> list[str]:
        return list(self._schema(entity).relations)

    def primary_key(self, entity: Any) -> str:
        return self._schema(entity).primary_key

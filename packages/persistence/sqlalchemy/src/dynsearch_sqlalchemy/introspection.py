"""
Schema introspection over SQLAlchemy declarative mappers.

Column types map onto :class:`~dynsearch.schema.FieldType`; a column may
override the mapping with ``info={"semantic_type": "..."}``. Types the table
below does not know fall back to the column's ``python_type``.
"""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    ARRAY,
    JSON,
    Boolean,
    Date,
    DateTime,
    Enum,
    Float,
    Integer,
    LargeBinary,
    Numeric,
    String,
    Time,
    Uuid,
)
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm import Mapper, RelationshipDirection

from dynsearch.exceptions import UnknownFieldError, UnknownRelationError
from dynsearch.schema import ArrayType, FieldType, RelationInfo, SemanticType

from .exceptions import MappingError

_PYTHON_TYPES: dict[type, FieldType] = {
    bool: FieldType.BOOLEAN,
    int: FieldType.INTEGER,
    float: FieldType.FLOAT,
    Decimal: FieldType.DECIMAL,
    datetime.datetime: FieldType.NAIVE_DATETIME,
    datetime.date: FieldType.DATE,
    datetime.time: FieldType.TIME,
    uuid.UUID: FieldType.UUID,
    bytes: FieldType.BINARY,
    dict: FieldType.MAP,
    str: FieldType.STRING,
}


def semantic_type_for(sa_type: Any) -> SemanticType:
    """Map a SQLAlchemy column type to a semantic type."""
    # Order matters: Float subclasses Numeric and Enum subclasses String.
    if isinstance(sa_type, ARRAY):
        item = semantic_type_for(sa_type.item_type)
        return ArrayType(item if isinstance(item, FieldType) else FieldType.STRING)
    if isinstance(sa_type, Boolean):
        return FieldType.BOOLEAN
    if isinstance(sa_type, Integer):
        return FieldType.INTEGER
    if isinstance(sa_type, Float):
        return FieldType.FLOAT
    if isinstance(sa_type, Numeric):
        return FieldType.DECIMAL if sa_type.asdecimal else FieldType.FLOAT
    if isinstance(sa_type, DateTime):
        return FieldType.DATETIME if sa_type.timezone else FieldType.NAIVE_DATETIME
    if isinstance(sa_type, Date):
        return FieldType.DATE
    if isinstance(sa_type, Time):
        return FieldType.TIME
    if isinstance(sa_type, Uuid):
        return FieldType.UUID
    if isinstance(sa_type, Enum | String):
        return FieldType.STRING
    if isinstance(sa_type, LargeBinary):
        return FieldType.BINARY
    if isinstance(sa_type, JSON):
        return FieldType.MAP

    try:
        python_type = sa_type.python_type
    except NotImplementedError:
        return FieldType.STRING
    for candidate, field_type in _PYTHON_TYPES.items():
        if issubclass(python_type, candidate):
            return field_type
    return FieldType.STRING


class SQLAlchemyIntrospector:
    """:class:`~dynsearch.schema.SchemaIntrospector` for mapped classes."""

    def _mapper(self, entity: Any) -> Mapper[Any]:
        try:
            mapper = sa_inspect(entity)
        except NoInspectionAvailable as exc:
            raise MappingError(f"{entity!r} is not a mapped class") from exc
        if not isinstance(mapper, Mapper):
            raise MappingError(f"{entity!r} is not a mapped class")
        return mapper

    def field_type(self, entity: Any, field: str) -> SemanticType:
        mapper = self._mapper(entity)
        attr = mapper.column_attrs.get(field)
        if attr is None:
            raise UnknownFieldError(
                field, mapper.class_.__name__, self.field_names(entity)
            )
        column = attr.columns[0]
        override = column.info.get("semantic_type")
        if isinstance(override, ArrayType | FieldType):
            return override
        if isinstance(override, str):
            return FieldType(override)
        return semantic_type_for(column.type)

    def relation_info(self, entity: Any, relation: str) -> RelationInfo:
        mapper = self._mapper(entity)
        rel = mapper.relationships.get(relation)
        if rel is None:
            raise UnknownRelationError(
                relation, mapper.class_.__name__, self.relation_names(entity)
            )
        return RelationInfo(
            name=relation,
            target=rel.mapper.class_,
            join_key=tuple(column.key for column in rel.local_columns),
            many=bool(rel.uselist),
            owning=rel.direction is RelationshipDirection.MANYTOONE,
        )

    def has_field(self, entity: Any, field: str) -> bool:
        return field in self._mapper(entity).column_attrs

    def field_names(self, entity: Any) -> list[str]:
        return [attr.key for attr in self._mapper(entity).column_attrs]

    def relation_names(self, entity: Any) -> list[str]:
        return [rel.key for rel in self._mapper(entity).relationships]

    def primary_key(self, entity: Any) -> str:
        mapper = self._mapper(entity)
        return mapper.get_property_by_column(mapper.primary_key[0]).key

"""Null / empty check operators for SQLAlchemy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import BINARY, VARBINARY, LargeBinary, or_

from dynsearch.operators import PredicateOperator

from ..strategy import SQLAlchemyOperator

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement

_BINARY_TYPES = (LargeBinary, BINARY, VARBINARY)


def _blank(column: Any) -> str | bytes:
    """Empty value of the column's own kind: ``b''`` for binary columns."""
    if isinstance(getattr(column, "type", None), _BINARY_TYPES):
        return b""
    return ""


class IsNullOperator(SQLAlchemyOperator):
    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.IS_NULL

    def apply(self, column: Any, _value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column.is_(None))


class IsNotNullOperator(SQLAlchemyOperator):
    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.IS_NOT_NULL

    def apply(self, column: Any, _value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column.is_not(None))


class IsEmptyOperator(SQLAlchemyOperator):
    """``column IS NULL OR column = ''``"""

    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.EMPTY

    def apply(self, column: Any, _value: Any) -> ColumnElement[bool]:
        return or_(column.is_(None), column == _blank(column))


class IsNotEmptyOperator(SQLAlchemyOperator):
    """``column IS NOT NULL OR column != ''``"""

    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.NOT_EMPTY

    def apply(self, column: Any, _value: Any) -> ColumnElement[bool]:
        return or_(column.is_not(None), column != _blank(column))

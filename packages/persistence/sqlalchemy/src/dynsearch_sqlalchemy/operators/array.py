"""Array operators for SQLAlchemy.

Note: These compile to the PostgreSQL array operators ``&&`` and ``@>``.
The value is bound with the column's own type so the driver sends an array.
"""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import ColumnElement, literal

from dynsearch.operators import PredicateOperator

from ..strategy import SQLAlchemyOperator


def _array_literal(column: Any, value: Any) -> Any:
    return literal(list(value), type_=getattr(column, "type", None))


class OverlapOperator(SQLAlchemyOperator):
    """``column && value``"""

    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.OVERLAP

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast(
            "ColumnElement[bool]", column.op("&&")(_array_literal(column, value))
        )


class ContainsAllOperator(SQLAlchemyOperator):
    """``column @> value``"""

    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.CONTAINS_ALL

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast(
            "ColumnElement[bool]", column.op("@>")(_array_literal(column, value))
        )

"""String operators for SQLAlchemy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import String
from sqlalchemy import cast as sa_cast

from dynsearch.operators import PredicateOperator

from ..strategy import SQLAlchemyOperator

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement


class IContainsOperator(SQLAlchemyOperator):
    """``column ILIKE '%value%'``; non-text columns are cast to text first."""

    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.ICONTAINS

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        if not isinstance(getattr(column, "type", None), String):
            column = sa_cast(column, String)
        return cast("ColumnElement[bool]", column.ilike(f"%{value}%"))

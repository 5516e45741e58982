"""Set operators for SQLAlchemy: in, not_in, between, not_between."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from dynsearch.operators import PredicateOperator

from ..strategy import SQLAlchemyOperator

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement


class InOperator(SQLAlchemyOperator):
    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.IN

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column.in_(list(value)))


class NotInOperator(SQLAlchemyOperator):
    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.NOT_IN

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column.not_in(list(value)))


class BetweenOperator(SQLAlchemyOperator):
    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.BETWEEN

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column.between(value[0], value[1]))


class NotBetweenOperator(SQLAlchemyOperator):
    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.NOT_BETWEEN

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", ~column.between(value[0], value[1]))

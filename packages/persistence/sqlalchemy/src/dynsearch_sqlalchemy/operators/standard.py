"""Standard comparison operators for SQLAlchemy."""

from __future__ import annotations

import operator as op_module
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, ClassVar, cast

from dynsearch.operators import PredicateOperator

from ..strategy import SQLAlchemyOperator

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement


class _Comparison(SQLAlchemyOperator):
    predicate: ClassVar[PredicateOperator]
    compare: ClassVar[Callable[[Any, Any], Any]]

    @property
    def name(self) -> PredicateOperator:
        return self.predicate

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", type(self).compare(column, value))


class EqualOperator(_Comparison):
    predicate = PredicateOperator.EQ
    compare = staticmethod(op_module.eq)


class NotEqualOperator(_Comparison):
    predicate = PredicateOperator.NE
    compare = staticmethod(op_module.ne)


class GreaterThanOperator(_Comparison):
    predicate = PredicateOperator.GT
    compare = staticmethod(op_module.gt)


class LessThanOperator(_Comparison):
    predicate = PredicateOperator.LT
    compare = staticmethod(op_module.lt)


class GreaterEqualOperator(_Comparison):
    predicate = PredicateOperator.GE
    compare = staticmethod(op_module.ge)


class LessEqualOperator(_Comparison):
    predicate = PredicateOperator.LE
    compare = staticmethod(op_module.le)

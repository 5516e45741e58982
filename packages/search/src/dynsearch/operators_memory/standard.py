"""Standard comparison operators: =, !=, >, <, >=, <=."""

from __future__ import annotations

import operator as op_module
from collections.abc import Callable
from typing import Any, ClassVar

from ..evaluator import MemoryOperator
from ..operators import PredicateOperator


class _Comparison(MemoryOperator):
    """Binary comparison; a ``None`` field value never matches."""

    predicate: ClassVar[PredicateOperator]
    compare: ClassVar[Callable[[Any, Any], Any]]

    @property
    def name(self) -> PredicateOperator:
        return self.predicate

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if field_value is None:
            return False
        return bool(type(self).compare(field_value, condition_value))


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

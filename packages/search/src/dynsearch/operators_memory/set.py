"""Set operators: in, not_in, between, not_between."""

from __future__ import annotations

from typing import Any

from ..evaluator import MemoryOperator
from ..operators import PredicateOperator


class InOperator(MemoryOperator):
    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.IN

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if field_value is None:
            return False
        return field_value in condition_value


class NotInOperator(MemoryOperator):
    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.NOT_IN

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if field_value is None:
            return False
        return field_value not in condition_value


class BetweenOperator(MemoryOperator):
    """Inclusive on both bounds; a missing bound matches nothing."""

    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.BETWEEN

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        low, high = condition_value
        if field_value is None or low is None or high is None:
            return False
        return bool(low <= field_value <= high)


class NotBetweenOperator(MemoryOperator):
    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.NOT_BETWEEN

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        low, high = condition_value
        if field_value is None or low is None or high is None:
            return False
        return not (low <= field_value <= high)

"""Array operators: overlap (``&&``) and contains_all (``@>``)."""

from __future__ import annotations

from typing import Any

from ..evaluator import MemoryOperator
from ..operators import PredicateOperator


class OverlapOperator(MemoryOperator):
    """True when the field shares at least one element with the value."""

    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.OVERLAP

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if field_value is None:
            return False
        return any(item in field_value for item in condition_value)


class ContainsAllOperator(MemoryOperator):
    """True when every element of the value is present in the field."""

    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.CONTAINS_ALL

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if field_value is None:
            return False
        return all(item in field_value for item in condition_value)

"""String operators: icontains."""

from __future__ import annotations

from typing import Any

from ..evaluator import MemoryOperator
from ..operators import PredicateOperator


class IContainsOperator(MemoryOperator):
    """Case-insensitive substring match, the in-memory ``ILIKE %v%``."""

    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.ICONTAINS

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if field_value is None:
            return False
        return str(condition_value).lower() in str(field_value).lower()

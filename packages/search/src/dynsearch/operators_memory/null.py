"""Null / empty check operators: is_null, is_not_null, empty, not_empty."""

from __future__ import annotations

from typing import Any

from ..evaluator import MemoryOperator
from ..operators import PredicateOperator

_BLANKS: tuple[str | bytes, ...] = ("", b"")


class IsNullOperator(MemoryOperator):
    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.IS_NULL

    def evaluate(self, field_value: Any, _condition_value: Any) -> bool:
        return field_value is None


class IsNotNullOperator(MemoryOperator):
    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.IS_NOT_NULL

    def evaluate(self, field_value: Any, _condition_value: Any) -> bool:
        return field_value is not None


class IsEmptyOperator(MemoryOperator):
    """``IS NULL OR = ''``; ``b''`` counts as blank for binary values."""

    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.EMPTY

    def evaluate(self, field_value: Any, _condition_value: Any) -> bool:
        return field_value is None or field_value in _BLANKS


class IsNotEmptyOperator(MemoryOperator):
    """``IS NOT NULL OR != ''``, which holds for every non-null value."""

    @property
    def name(self) -> PredicateOperator:
        return PredicateOperator.NOT_EMPTY

    def evaluate(self, field_value: Any, _condition_value: Any) -> bool:
        return field_value is not None

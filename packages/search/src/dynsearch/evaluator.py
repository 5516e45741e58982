"""
In-memory predicate evaluation.

Provides the :class:`MemoryOperator` strategy interface, a registry that
maps :class:`~dynsearch.operators.PredicateOperator` to strategies, and
:class:`PredicateEvaluator`, which walks a predicate tree against a joined
row of Python objects.

New operators are added by subclassing MemoryOperator and registering it
via ``register()``.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Mapping
from typing import Any

from .ast import (
    And,
    Condition,
    Constant,
    FieldDiff,
    FieldRef,
    FieldSum,
    Not,
    Or,
    Predicate,
    Target,
)
from .operators import PredicateOperator
from .registry import OperatorRegistry, OperatorStrategy

# Operators whose comparison value is a plain operand; a ``None`` operand
# (an unparseable filter value) matches nothing, as NULL does in SQL.
_VALUE_OPERATORS: frozenset[PredicateOperator] = frozenset(
    {
        PredicateOperator.EQ,
        PredicateOperator.NE,
        PredicateOperator.GT,
        PredicateOperator.GE,
        PredicateOperator.LT,
        PredicateOperator.LE,
    }
)


class MemoryOperator(OperatorStrategy):
    """
    Strategy interface for in-memory operator evaluation.

    Each operator is an isolated class with a single ``evaluate`` method.
    """

    @abstractmethod
    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        """
        Evaluate the operator against concrete values.

        Args:
            field_value: The value resolved from the candidate row.
            condition_value: The (coerced) value carried by the condition.

        Returns:
            True if the condition is satisfied.
        """
        ...


class MemoryOperatorRegistry(OperatorRegistry[MemoryOperator]):
    """
    In-memory strategies keyed by PredicateOperator.

    Usage::

        registry = MemoryOperatorRegistry()
        registry.register(EqualOperator())

        result = registry.evaluate(PredicateOperator.EQ, actual, expected)
    """

    backend = "memory"

    def evaluate(
        self,
        name: PredicateOperator,
        field_value: Any,
        condition_value: Any,
    ) -> bool:
        """
        Look up the operator and evaluate.

        Raises:
            UnsupportedOperatorError: If the operator is not registered.
        """
        return self.require(name).evaluate(field_value, condition_value)


class PredicateEvaluator:
    """
    Evaluate predicate trees against joined rows.

    A *row* maps ``None`` to the root object and each joined relation name
    to the related object for that row, mirroring one row of an inner join.
    """

    def __init__(self, registry: MemoryOperatorRegistry) -> None:
        self._registry = registry

    def evaluate(self, predicate: Predicate, row: Mapping[str | None, Any]) -> bool:
        if isinstance(predicate, Constant):
            return predicate.value
        if isinstance(predicate, Condition):
            return self._condition(predicate, row)
        if isinstance(predicate, Not):
            return not self.evaluate(predicate.predicate, row)
        if isinstance(predicate, Or):
            return any(self.evaluate(p, row) for p in predicate.predicates)
        if isinstance(predicate, And):
            return all(self.evaluate(p, row) for p in predicate.predicates)
        raise TypeError(f"Unknown predicate node: {predicate!r}")

    def _condition(self, condition: Condition, row: Mapping[str | None, Any]) -> bool:
        if condition.op in _VALUE_OPERATORS and condition.value is None:
            return False
        actual = resolve_target(condition.target, row)
        return self._registry.evaluate(condition.op, actual, condition.value)


# -- target resolution -------------------------------------------------------


def read_field(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def resolve_target(target: Target, row: Mapping[str | None, Any]) -> Any:
    if isinstance(target, FieldRef):
        return read_field(row.get(target.binding.relation), target.name)
    if isinstance(target, FieldDiff):
        left = resolve_target(target.left, row)
        right = resolve_target(target.right, row)
        if left is None or right is None:
            return None
        return left - right
    if isinstance(target, FieldSum):
        values = [resolve_target(f, row) for f in target.fields]
        if any(v is None for v in values):
            return None
        total = values[0]
        for value in values[1:]:
            total = total + value
        return total
    raise TypeError(f"Unknown target: {target!r}")

"""
In-memory operator implementations.

Provides concrete MemoryOperator subclasses for each PredicateOperator
and a factory function to create registries.

Usage::

    from dynsearch.operators_memory import build_default_registry

    registry = build_default_registry()
    result = registry.evaluate(PredicateOperator.EQ, actual, expected)
"""

from __future__ import annotations

from ..evaluator import MemoryOperatorRegistry
from .array import ContainsAllOperator, OverlapOperator
from .null import (
    IsEmptyOperator,
    IsNotEmptyOperator,
    IsNotNullOperator,
    IsNullOperator,
)
from .set import (
    BetweenOperator,
    InOperator,
    NotBetweenOperator,
    NotInOperator,
)
from .standard import (
    EqualOperator,
    GreaterEqualOperator,
    GreaterThanOperator,
    LessEqualOperator,
    LessThanOperator,
    NotEqualOperator,
)
from .string import IContainsOperator


def build_default_registry() -> MemoryOperatorRegistry:
    """
    Create a registry with all built-in operators.

    Example:
        >>> registry = build_default_registry()
        >>> registry.evaluate(PredicateOperator.EQ, "open", "open")
        True
    """
    registry = MemoryOperatorRegistry()
    registry.register_all(
        # Standard comparison
        EqualOperator(),
        NotEqualOperator(),
        GreaterThanOperator(),
        LessThanOperator(),
        GreaterEqualOperator(),
        LessEqualOperator(),
        # Set
        InOperator(),
        NotInOperator(),
        BetweenOperator(),
        NotBetweenOperator(),
        # String
        IContainsOperator(),
        # Null / empty
        IsNullOperator(),
        IsNotNullOperator(),
        IsEmptyOperator(),
        IsNotEmptyOperator(),
        # Array
        OverlapOperator(),
        ContainsAllOperator(),
    )
    return registry


__all__ = [
    "BetweenOperator",
    "ContainsAllOperator",
    "EqualOperator",
    "GreaterEqualOperator",
    "GreaterThanOperator",
    "IContainsOperator",
    "InOperator",
    "IsEmptyOperator",
    "IsNotEmptyOperator",
    "IsNotNullOperator",
    "IsNullOperator",
    "LessEqualOperator",
    "LessThanOperator",
    "NotBetweenOperator",
    "NotEqualOperator",
    "NotInOperator",
    "OverlapOperator",
    "build_default_registry",
]

"""
Lower a :mod:`dynsearch` predicate tree into a SQLAlchemy filter expression.

Uses the strategy pattern: each operator is an isolated class in
``operators/``, registered in a ``SQLAlchemyOperatorRegistry``.
``build_sqla_filter`` walks the tree and delegates leaf compilation to the
registry.

Field references are resolved against a *binding map*: ``None`` maps to the
root model and every joined relation name maps to its ``aliased()`` target,
see :mod:`dynsearch_sqlalchemy.statement`.
"""

from __future__ import annotations

from collections.abc import Mapping
from functools import reduce
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, false, not_, or_, true

from dynsearch.ast import (
    And,
    Condition,
    Constant,
    FieldDiff,
    FieldRef,
    FieldSum,
    Not,
    Or,
)
from dynsearch.operators import PredicateOperator

from .operators import DEFAULT_SQLA_REGISTRY

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement

    from dynsearch.ast import Predicate, Target

    from .strategy import SQLAlchemyOperatorRegistry

BindingMap = Mapping[str | None, Any]

# A ``None`` operand comes from a value that failed coercion; comparing
# against it must match nothing rather than render ``= NULL``.
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

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_sqla_filter(
    predicate: Predicate,
    bindings: BindingMap,
    *,
    registry: SQLAlchemyOperatorRegistry | None = None,
) -> ColumnElement[bool]:
    """
    Build a SQLAlchemy filter expression from a predicate tree.

    Args:
        predicate: Tree produced by :func:`dynsearch.compile_search`.
        bindings: Root model under ``None`` plus one alias per joined relation.
        registry: Optional custom operator registry.  Falls back to
            ``DEFAULT_SQLA_REGISTRY``.

    Returns:
        SQLAlchemy Boolean expression.
    """
    reg = registry or DEFAULT_SQLA_REGISTRY
    return _compile_node(predicate, bindings, reg)


def resolve_column(ref: FieldRef, bindings: BindingMap) -> Any:
    """Return the mapped attribute for *ref* on its bound model or alias."""
    return getattr(bindings[ref.binding.relation], ref.name)


# ---------------------------------------------------------------------------
# Internal compilation
# ---------------------------------------------------------------------------


def _compile_node(
    node: Predicate,
    bindings: BindingMap,
    registry: SQLAlchemyOperatorRegistry,
) -> ColumnElement[bool]:
    if isinstance(node, Constant):
        return true() if node.value else false()
    if isinstance(node, And):
        return and_(*(_compile_node(p, bindings, registry) for p in node.predicates))
    if isinstance(node, Or):
        return or_(*(_compile_node(p, bindings, registry) for p in node.predicates))
    if isinstance(node, Not):
        return not_(_compile_node(node.predicate, bindings, registry))
    if isinstance(node, Condition):
        return _compile_condition(node, bindings, registry)
    raise TypeError(f"Unknown predicate node: {node!r}")


def _compile_condition(
    condition: Condition,
    bindings: BindingMap,
    registry: SQLAlchemyOperatorRegistry,
) -> ColumnElement[bool]:
    if condition.op in _VALUE_OPERATORS and condition.value is None:
        return false()
    column = _compile_target(condition.target, bindings)
    return registry.apply(condition.op, column, condition.value)


def _compile_target(target: Target, bindings: BindingMap) -> Any:
    if isinstance(target, FieldRef):
        return resolve_column(target, bindings)
    if isinstance(target, FieldDiff):
        return resolve_column(target.left, bindings) - resolve_column(
            target.right, bindings
        )
    if isinstance(target, FieldSum):
        columns = [resolve_column(ref, bindings) for ref in target.fields]
        return reduce(lambda acc, col: acc + col, columns)
    raise TypeError(f"Unknown target: {target!r}")

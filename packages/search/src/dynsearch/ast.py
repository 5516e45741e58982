"""
Backend-neutral predicate tree.

The compiler produces this tree; backends lower it (see
``dynsearch_sqlalchemy.compiler``) or evaluate it directly against Python
objects (:mod:`dynsearch.evaluator`). Leaves are :class:`Condition` nodes
over a target expression; composites are :class:`And`, :class:`Or` and
:class:`Not`; :data:`TRUE` and :data:`FALSE` are constants.

Every node supports ``&``, ``|`` and ``~`` and serialises with
``to_dict()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .joins import Binding
from .operators import PredicateOperator

# ---------------------------------------------------------------------------
# Targets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldRef:
    binding: Binding
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.name, "relation": self.binding.relation}


@dataclass(frozen=True)
class FieldDiff:
    """``left - right`` evaluated per row."""

    left: FieldRef
    right: FieldRef

    def to_dict(self) -> dict[str, Any]:
        return {"diff": [self.left.to_dict(), self.right.to_dict()]}


@dataclass(frozen=True)
class FieldSum:
    """Sum of one or more fields evaluated per row."""

    fields: tuple[FieldRef, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"sum": [f.to_dict() for f in self.fields]}


Target = FieldRef | FieldDiff | FieldSum


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


class Predicate:
    """Base class providing the logical operators."""

    def __and__(self, other: Predicate) -> Predicate:
        return conjunction([self, other])

    def __or__(self, other: Predicate) -> Predicate:
        return disjunction([self, other])

    def __invert__(self) -> Predicate:
        return Not(self)

    def to_dict(self) -> dict[str, Any]:
        raise NotImplementedError


class Condition(Predicate):
    """Single ``target <op> value`` comparison."""

    def __init__(self, target: Target, op: PredicateOperator, value: Any = None):
        self.target = target
        self.op = op
        self.value = value

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, Condition)
            and self.target == other.target
            and self.op == other.op
            and self.value == other.value
        )

    def __hash__(self) -> int:
        return hash((self.target, self.op, repr(self.value)))

    def __repr__(self) -> str:
        return f"Condition({self.target!r}, {self.op.value!r}, {self.value!r})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "op": self.op.value,
            "target": self.target.to_dict(),
            "value": self.value,
        }


class _Composite(Predicate):
    op_name = ""

    def __init__(self, *predicates: Predicate) -> None:
        self.predicates = predicates

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, _Composite)
            and type(self) is type(other)
            and self.predicates == other.predicates
        )

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.predicates))

    def __repr__(self) -> str:
        inner = ", ".join(repr(p) for p in self.predicates)
        return f"{type(self).__name__}({inner})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "op": self.op_name,
            "conditions": [p.to_dict() for p in self.predicates],
        }


class And(_Composite):
    """Logical AND; an empty AND is true."""

    op_name = "and"


class Or(_Composite):
    """Logical OR; an empty OR is false."""

    op_name = "or"


class Not(Predicate):
    def __init__(self, predicate: Predicate) -> None:
        self.predicate = predicate

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Not) and self.predicate == other.predicate

    def __hash__(self) -> int:
        return hash(("not", self.predicate))

    def __repr__(self) -> str:
        return f"Not({self.predicate!r})"

    def to_dict(self) -> dict[str, Any]:
        return {"op": "not", "conditions": [self.predicate.to_dict()]}


class Constant(Predicate):
    def __init__(self, value: bool) -> None:
        self.value = value

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Constant) and self.value == other.value

    def __hash__(self) -> int:
        return hash(("const", self.value))

    def __repr__(self) -> str:
        return "TRUE" if self.value else "FALSE"

    def to_dict(self) -> dict[str, Any]:
        return {"op": "true" if self.value else "false"}


TRUE = Constant(True)
FALSE = Constant(False)


# -- construction helpers ----------------------------------------------------


def conjunction(predicates: list[Predicate]) -> Predicate:
    """
    AND the given predicates.

    Nested ANDs are flattened and ``TRUE`` operands dropped; an empty input
    gives ``TRUE`` and a single operand is returned as is.
    """
    flat: list[Predicate] = []
    for predicate in predicates:
        if isinstance(predicate, And):
            flat.extend(predicate.predicates)
        elif predicate != TRUE:
            flat.append(predicate)
    if not flat:
        return TRUE
    if len(flat) == 1:
        return flat[0]
    return And(*flat)


def disjunction(predicates: list[Predicate]) -> Predicate:
    """OR the given predicates; the dual of :func:`conjunction`."""
    flat: list[Predicate] = []
    for predicate in predicates:
        if isinstance(predicate, Or):
            flat.extend(predicate.predicates)
        elif predicate != FALSE:
            flat.append(predicate)
    if not flat:
        return FALSE
    if len(flat) == 1:
        return flat[0]
    return Or(*flat)


def iter_field_refs(predicate: Predicate) -> list[FieldRef]:
    """Return every field reference in *predicate*, depth first."""
    refs: list[FieldRef] = []
    stack: list[Predicate] = [predicate]
    while stack:
        node = stack.pop()
        if isinstance(node, Condition):
            target = node.target
            if isinstance(target, FieldRef):
                refs.append(target)
            elif isinstance(target, FieldDiff):
                refs.extend((target.left, target.right))
            else:
                refs.extend(target.fields)
        elif isinstance(node, _Composite):
            stack.extend(reversed(node.predicates))
        elif isinstance(node, Not):
            stack.append(node.predicate)
    return refs

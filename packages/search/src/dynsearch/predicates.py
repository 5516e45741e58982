"""
Predicate builder.

Turns one filter entry (a bound field, its semantic type and the raw
filter value) into a predicate tree node. The builder returns ``None`` when
the entry contributes nothing, e.g. a ``range`` with the wrong number of
bounds; callers must then skip the entry *and* the join it would need.

Dispatch, per operator token::

    (none)           exact types: =          others: ILIKE %v%
    and / or         AND / OR of the default match
    exact            one value: =, [None]: IS NULL, several values: TRUE
    exact_and/_or    AND / OR of =, whatever the type
    exact_not        NOT IN, None-aware
    not              exact types: NOT IN, others: AND of NOT ILIKE
    range/not_range  BETWEEN lo AND hi (hi as an inclusive range end)
    after(_equal)    > / >=
    before(_equal)   < / <= against the inclusive range end
    empty/not_empty  NULL checks; text fields also compare against ''

Array fields use overlap for OR semantics and containment otherwise.
"""

from __future__ import annotations

import datetime
from collections.abc import Callable, Sequence
from itertools import takewhile
from typing import TYPE_CHECKING, Any

from .absent import is_absent
from .ast import (
    FALSE,
    TRUE,
    Condition,
    FieldDiff,
    FieldRef,
    FieldSum,
    Predicate,
    Target,
    conjunction,
    disjunction,
)
from .coercion import UTC, coerce, coerce_range_end
from .operators import (
    FieldsComparator,
    OperatorToken,
    PredicateOperator,
    ReservedKey,
)
from .parser import extract_fields_comparator, extract_operator
from .schema import FieldType, SemanticType, is_array, is_exact, is_text

if TYPE_CHECKING:
    from .joins import Binding
    from .schema import SchemaIntrospector

P = PredicateOperator

_TEMPORAL_OPERATORS: dict[OperatorToken, PredicateOperator] = {
    OperatorToken.AFTER: P.GT,
    OperatorToken.AFTER_EQUAL: P.GE,
    OperatorToken.BEFORE: P.LT,
    OperatorToken.BEFORE_EQUAL: P.LE,
}

_FIELDS_COMPARATORS: dict[FieldsComparator, PredicateOperator] = {
    FieldsComparator.AFTER: P.GT,
    FieldsComparator.AFTER_EQUAL: P.GE,
    FieldsComparator.BEFORE: P.LT,
    FieldsComparator.BEFORE_EQUAL: P.LE,
    FieldsComparator.EQUAL: P.EQ,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def predicate_for_value(
    ref: FieldRef,
    semantic_type: SemanticType,
    value: Any,
    *,
    tz: datetime.tzinfo = UTC,
    use_or: bool = False,
) -> Predicate | None:
    """Build the predicate for a raw filter value (scalar or list)."""
    if isinstance(value, list | tuple):
        operator, operands = extract_operator(value)
        return build_predicate(
            ref, semantic_type, operator, operands, tz=tz, use_or=use_or
        )

    if is_array(semantic_type):
        items = coerce(semantic_type, value, tz)
        return Condition(ref, P.OVERLAP if use_or else P.CONTAINS_ALL, items)
    if is_exact(semantic_type):
        return Condition(ref, P.EQ, coerce(semantic_type, value, tz))
    return Condition(ref, P.ICONTAINS, _text(value))


def build_predicate(
    ref: FieldRef,
    semantic_type: SemanticType,
    operator: OperatorToken | None,
    values: Sequence[Any],
    *,
    tz: datetime.tzinfo = UTC,
    use_or: bool = False,
) -> Predicate | None:
    """Build the predicate for an operator token and its operands."""
    values = list(values)

    if operator is OperatorToken.EMPTY:
        return _empty_check(ref, semantic_type, negate=False)
    if operator is OperatorToken.NOT_EMPTY:
        return _empty_check(ref, semantic_type, negate=True)
    if not values:
        return None

    if is_array(semantic_type):
        return _array_match(ref, semantic_type, operator, values, tz, use_or)

    exact = is_exact(semantic_type)

    def match_all(*, or_: bool, exact: bool) -> Predicate:
        return _multi_match(ref, semantic_type, values, tz, or_=or_, exact=exact)

    match operator:
        case None:
            return match_all(or_=use_or, exact=exact)
        case OperatorToken.AND:
            return match_all(or_=False, exact=exact)
        case OperatorToken.OR:
            return match_all(or_=True, exact=exact)
        case OperatorToken.EXACT:
            return _exact_single(ref, semantic_type, values, tz)
        case OperatorToken.EXACT_AND:
            return match_all(or_=False, exact=True)
        case OperatorToken.EXACT_OR:
            return match_all(or_=True, exact=True)
        case OperatorToken.EXACT_NOT:
            return _exact_not(ref, semantic_type, values, tz)
        case OperatorToken.NOT:
            if exact:
                return _exact_not(ref, semantic_type, values, tz)
            return _ilike_not(ref, values)
        case OperatorToken.RANGE | OperatorToken.NOT_RANGE:
            negate = operator is OperatorToken.NOT_RANGE
            return _range(ref, semantic_type, values, tz, negate=negate)
        case _:
            return _temporal(ref, semantic_type, operator, values, tz)


def build_virtual_predicate(
    kind: ReservedKey,
    binding: Binding,
    values: Sequence[Any],
    introspector: SchemaIntrospector,
    *,
    tz: datetime.tzinfo = UTC,
) -> Predicate | None:
    """
    Build a ``_fields_diff`` / ``_fields_sum`` predicate.

    ``["paid", "amount", 0, "after"]`` reads as ``paid - amount > 0``.
    Leading elements naming fields on the bound entity are operands; the
    rest are thresholds, coerced with the first field's type.
    """
    comparator, raw = extract_fields_comparator(values)

    def names_field(value: Any) -> bool:
        return isinstance(value, str) and introspector.has_field(binding.entity, value)

    names = list(takewhile(names_field, raw))
    thresholds = raw[len(names) :]

    if kind is ReservedKey.FIELDS_DIFF and len(names) < 2:
        return None
    if kind is ReservedKey.FIELDS_SUM and not names:
        return None

    refs = [FieldRef(binding, name) for name in names]
    target: Target
    if kind is ReservedKey.FIELDS_DIFF:
        target = FieldDiff(refs[0], refs[1])
    else:
        target = FieldSum(tuple(refs))

    first_type = introspector.field_type(binding.entity, names[0])

    def convert(raw_value: Any) -> Any:
        return coerce(first_type, raw_value, tz)

    if comparator is FieldsComparator.RANGE and len(thresholds) >= 2:
        return Condition(
            target, P.BETWEEN, (convert(thresholds[0]), convert(thresholds[1]))
        )

    threshold = thresholds[0] if thresholds and thresholds[0] is not None else 0
    op = _FIELDS_COMPARATORS.get(comparator, P.EQ)
    return Condition(target, op, convert(threshold))


# ---------------------------------------------------------------------------
# Construction rules
# ---------------------------------------------------------------------------


def _text(value: Any) -> str:
    return coerce(FieldType.STRING, value)


def _multi_match(
    ref: FieldRef,
    semantic_type: SemanticType,
    values: list[Any],
    tz: datetime.tzinfo,
    *,
    or_: bool,
    exact: bool,
) -> Predicate:
    parts: list[Predicate] = []
    for value in values:
        if value is None:
            continue
        if exact:
            parts.append(Condition(ref, P.EQ, coerce(semantic_type, value, tz)))
        else:
            parts.append(Condition(ref, P.ICONTAINS, _text(value)))
    if or_:
        return disjunction(parts) if parts else FALSE
    return conjunction(parts) if parts else TRUE


def _exact_single(
    ref: FieldRef,
    semantic_type: SemanticType,
    values: list[Any],
    tz: datetime.tzinfo,
) -> Predicate:
    if len(values) != 1:
        return TRUE
    if values[0] is None:
        return Condition(ref, P.IS_NULL)
    return Condition(ref, P.EQ, coerce(semantic_type, values[0], tz))


def _exact_not(
    ref: FieldRef,
    semantic_type: SemanticType,
    values: list[Any],
    tz: datetime.tzinfo,
) -> Predicate:
    converted = [coerce(semantic_type, v, tz) for v in values]
    has_none = any(v is None for v in converted)
    excluded: list[Any] = []
    for value in converted:
        if value is not None and value not in excluded:
            excluded.append(value)

    not_null = Condition(ref, P.IS_NOT_NULL)
    if has_none and not excluded:
        return not_null
    if has_none:
        return conjunction([not_null, Condition(ref, P.NOT_IN, excluded)])
    return Condition(ref, P.NOT_IN, excluded)


def _ilike_not(ref: FieldRef, values: list[Any]) -> Predicate:
    parts: list[Predicate] = [
        ~Condition(ref, P.ICONTAINS, _text(v)) for v in values if v is not None
    ]
    if any(v is None for v in values):
        parts.append(Condition(ref, P.IS_NOT_NULL))
    return conjunction(parts)


def _range(
    ref: FieldRef,
    semantic_type: SemanticType,
    values: list[Any],
    tz: datetime.tzinfo,
    *,
    negate: bool,
) -> Predicate | None:
    if len(values) != 2:
        return None
    low = coerce(semantic_type, values[0], tz)
    high = coerce_range_end(semantic_type, values[1], tz)
    return Condition(ref, P.NOT_BETWEEN if negate else P.BETWEEN, (low, high))


def _temporal(
    ref: FieldRef,
    semantic_type: SemanticType,
    operator: OperatorToken,
    values: list[Any],
    tz: datetime.tzinfo,
) -> Predicate | None:
    if len(values) != 1:
        return None
    convert: Callable[..., Any]
    if operator in (OperatorToken.BEFORE, OperatorToken.BEFORE_EQUAL):
        convert = coerce_range_end
    else:
        convert = coerce
    return Condition(
        ref, _TEMPORAL_OPERATORS[operator], convert(semantic_type, values[0], tz)
    )


def _empty_check(
    ref: FieldRef,
    semantic_type: SemanticType,
    *,
    negate: bool,
) -> Predicate:
    if is_text(semantic_type):
        return Condition(ref, P.NOT_EMPTY if negate else P.EMPTY)
    return Condition(ref, P.IS_NOT_NULL if negate else P.IS_NULL)


def _array_match(
    ref: FieldRef,
    semantic_type: SemanticType,
    operator: OperatorToken | None,
    values: list[Any],
    tz: datetime.tzinfo,
    use_or: bool,
) -> Predicate | None:
    items = [v for v in values if not is_absent(v)]
    if not items:
        return None
    coerced = coerce(semantic_type, items, tz)
    if operator is OperatorToken.OR or use_or:
        return Condition(ref, P.OVERLAP, coerced)
    return Condition(ref, P.CONTAINS_ALL, coerced)

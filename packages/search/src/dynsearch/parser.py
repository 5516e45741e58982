"""Split the trailing operator keyword off a list filter value."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .operators import FieldsComparator, OperatorToken, comparator_for, token_for


def extract_operator(
    values: Sequence[Any],
) -> tuple[OperatorToken | None, list[Any]]:
    """
    Return ``(token, operands)``.

    The last element is treated as an operator only when it spells one of
    the closed :class:`OperatorToken` values; any other trailing string is
    an ordinary operand (``["foo", "bar", "sideways"]`` has three operands).
    """
    if not values:
        return None, []
    token = token_for(values[-1])
    if token is None:
        return None, list(values)
    return token, list(values[:-1])


def extract_fields_comparator(
    values: Sequence[Any],
) -> tuple[FieldsComparator, list[Any]]:
    """Like :func:`extract_operator` for ``_fields_diff`` / ``_fields_sum``."""
    if not values:
        return FieldsComparator.EQUAL, []
    comparator = comparator_for(values[-1])
    if comparator is None:
        return FieldsComparator.EQUAL, list(values)
    return comparator, list(values[:-1])

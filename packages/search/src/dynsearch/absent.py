"""
Absent-value classification.

A filter value is *absent* when it means "no constraint": ``None``, an
empty string, an empty list, the sentinels ``-1`` / ``"-1"``, or a list
whose elements are all absent. A list made of a trailing operator token
plus absent operands (``["", "before_equal"]``) is absent too; only
``empty`` / ``not_empty`` carry meaning without operands. Absent values
never generate a predicate and never cause a join, even when the key names
a relation.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .operators import OperatorToken, token_for

_ABSENT_SCALARS: tuple[Any, ...] = ("", "-1")

# Tokens that filter without any operand.
_NULLARY_TOKENS = frozenset({OperatorToken.EMPTY, OperatorToken.NOT_EMPTY})


def is_absent(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, list | tuple):
        items = list(value)
        if items:
            token = token_for(items[-1])
            if token in _NULLARY_TOKENS:
                return False
            if token is not None:
                items = items[:-1]
        return all(is_absent(item) for item in items)
    if isinstance(value, bool):
        # True == 1 and False == 0 must not collide with the -1 sentinel
        return False
    if isinstance(value, int) and value == -1:
        return True
    return isinstance(value, str) and value in _ABSENT_SCALARS


def drop_absent(filters: Mapping[Any, Any]) -> dict[Any, Any]:
    """Return a copy of *filters* without absent entries."""
    return {key: value for key, value in filters.items() if not is_absent(value)}

"""Build date filter values from optional *from* / *to* form inputs."""

from __future__ import annotations

from typing import Any

from .operators import OperatorToken


def _given(value: Any) -> bool:
    return value is not None and value != ""


def construct_date_list(from_date: Any, to_date: Any) -> list[Any]:
    """
    Return a filter value for a date field.

    Both bounds give a ``range``, one bound an ``after_equal`` /
    ``before_equal`` comparison, and neither an empty (absent) list.
    """
    if _given(from_date) and _given(to_date):
        return [from_date, to_date, OperatorToken.RANGE.value]
    if _given(from_date):
        return [from_date, OperatorToken.AFTER_EQUAL.value]
    if _given(to_date):
        return [to_date, OperatorToken.BEFORE_EQUAL.value]
    return []


def construct_date_map(from_date: Any, to_date: Any, key: str) -> dict[str, list[Any]]:
    """Like :func:`construct_date_list`, wrapped as ``{key: value}``."""
    return {key: construct_date_list(from_date, to_date)}

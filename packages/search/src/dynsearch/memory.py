"""
In-memory search executor.

Runs a :class:`~dynsearch.plan.QueryPlan` over plain Python object graphs
(dataclasses, pydantic models, dicts). Joins behave like SQL inner joins:
each root object is expanded into one row per related object, and roots
without a related object are dropped. Useful for tests and for small
collections that never reach a database.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping
from itertools import product
from typing import TYPE_CHECKING, Any

from .evaluator import PredicateEvaluator, read_field
from .plan import OrderClause, PageResult, Pagination, QueryPlan

if TYPE_CHECKING:
    from .engine import Preload
    from .evaluator import MemoryOperatorRegistry

logger = logging.getLogger(__name__)

Row = dict[str | None, Any]


class InMemorySearchExecutor:
    """
    :class:`~dynsearch.engine.SearchExecutor` over in-memory collections.

    Args:
        collections: Mapping of entity handle -> iterable of root objects.
        registry: Operator registry, e.g. ``build_default_registry()``.

    Related objects are already attached to their roots, so ``preload`` is
    accepted and ignored.
    """

    def __init__(
        self,
        collections: Mapping[Any, Iterable[Any]],
        registry: MemoryOperatorRegistry,
    ) -> None:
        self._collections = collections
        self._evaluator = PredicateEvaluator(registry)

    async def execute(
        self,
        plan: QueryPlan,
        pagination: Pagination,
        preload: Preload = False,
    ) -> PageResult[Any]:
        start = time.perf_counter()
        rows = [
            row
            for row in self._joined_rows(plan)
            if self._evaluator.evaluate(plan.predicate, row)
        ]
        rows = _sorted(rows, plan.order)

        roots = [row[None] for row in rows]
        if plan.distinct:
            roots = _unique(roots, plan.primary_key)
        total = len(roots)

        if pagination.is_paged:
            roots = roots[pagination.offset : pagination.offset + pagination.per_page]

        logger.debug(
            "In-memory search returned %d of %d row(s) in %.2fms",
            len(roots),
            total,
            (time.perf_counter() - start) * 1000,
        )
        return PageResult.build(roots, pagination, total)

    def _joined_rows(self, plan: QueryPlan) -> Iterable[Row]:
        relations = list(plan.joins)
        for root in self._collections.get(plan.entity, ()):
            related = [_as_list(read_field(root, name)) for name in relations]
            for combination in product(*related):
                row: Row = {None: root}
                row.update(zip(relations, combination, strict=True))
                yield row


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list | tuple | set):
        return list(value)
    return [value]


def _unique(roots: list[Any], primary_key: str) -> list[Any]:
    seen: set[Any] = set()
    unique: list[Any] = []
    for root in roots:
        key = read_field(root, primary_key)
        if key not in seen:
            seen.add(key)
            unique.append(root)
    return unique


def _sorted(rows: list[Row], order: tuple[OrderClause, ...]) -> list[Row]:
    # Stable sorts applied last-key-first give a multi-column ordering.
    # NULLs sort first ascending and last descending, as SQLite does.
    for clause in reversed(order):

        def sort_key(row: Row, clause: OrderClause = clause) -> tuple[bool, Any]:
            value = read_field(row.get(clause.relation), clause.field)
            return (value is not None, value if value is not None else 0)

        rows = sorted(rows, key=sort_key, reverse=clause.descending)
    return rows

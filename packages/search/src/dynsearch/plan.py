"""
Query plan, ordering and pagination value types.

A :class:`QueryPlan` is everything a backend needs to run a search: the
predicate tree, the relations to join (in first-use order), the ordering
and the distinct flag. It is produced by
:func:`dynsearch.engine.compile_search` and consumed by a search executor.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from .ast import TRUE, Predicate
from .joins import JoinSet
from .keys import RELATION_SEPARATOR
from .settings import OrderDirection

T = TypeVar("T")


@dataclass(frozen=True)
class OrderClause:
    field: str
    relation: str | None = None
    direction: OrderDirection = OrderDirection.ASC

    @property
    def descending(self) -> bool:
        return self.direction is OrderDirection.DESC

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "relation": self.relation,
            "direction": self.direction.value,
        }


def _order_key(value: Any) -> tuple[str, str | None] | None:
    """Split an ordering key into ``(field, relation)``; ``None`` if malformed."""
    if not isinstance(value, str) or not value:
        return None
    if RELATION_SEPARATOR not in value:
        return value, None
    name, _, relation = value.partition(RELATION_SEPARATOR)
    if not name or not relation or RELATION_SEPARATOR in relation:
        return None
    return name, relation


def _direction(value: Any) -> OrderDirection | None:
    if isinstance(value, OrderDirection):
        return value
    if isinstance(value, str) and value.lower() in ("asc", "desc"):
        return OrderDirection(value.lower())
    return None


def normalize_order_by(
    order_by: Any,
    direction: OrderDirection | str,
    primary_key: str,
) -> tuple[OrderClause, ...]:
    """
    Normalise the accepted ordering shapes into order clauses.

    Accepts a field name, ``"field@relation"``, a ``(field, direction)``
    pair, or a list mixing both. Malformed entries fall back to ordering
    by the primary key in the default direction.
    """
    default_direction = OrderDirection.parse(direction)
    fallback = OrderClause(primary_key, None, default_direction)

    def clause(entry: Any) -> OrderClause:
        if isinstance(entry, str):
            key = _order_key(entry)
            if key is None:
                return fallback
            return OrderClause(key[0], key[1], default_direction)
        if isinstance(entry, tuple | list) and len(entry) == 2:
            key = _order_key(entry[0])
            entry_direction = _direction(entry[1])
            if key is None or entry_direction is None:
                return fallback
            return OrderClause(key[0], key[1], entry_direction)
        return fallback

    if order_by is None or order_by == "":
        return (fallback,)
    if isinstance(order_by, tuple) and _direction(order_by[-1] if order_by else None):
        return (clause(order_by),)
    if isinstance(order_by, list | tuple):
        if not order_by:
            return (fallback,)
        return tuple(clause(entry) for entry in order_by)
    return (clause(order_by),)


@dataclass(frozen=True)
class QueryPlan:
    """
    Compiled, backend-neutral search.

    Attributes:
        entity: Root entity handle.
        predicate: Filter tree; ``TRUE`` when nothing filters.
        joins: Relations to inner-join, in first-use order.
        order: Ordering clauses, applied in sequence.
        distinct: Return distinct root rows and count distinct keys.
        primary_key: Name of the root entity's primary key.
    """

    entity: Any
    predicate: Predicate = TRUE
    joins: JoinSet = field(default_factory=JoinSet)
    order: tuple[OrderClause, ...] = ()
    distinct: bool = False
    primary_key: str = "id"

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-compatible dictionary."""
        return {
            "entity": getattr(self.entity, "__name__", str(self.entity)),
            "predicate": self.predicate.to_dict(),
            "joins": list(self.joins),
            "order": [c.to_dict() for c in self.order],
            "distinct": self.distinct,
            "primary_key": self.primary_key,
        }


@dataclass(frozen=True)
class Pagination:
    """
    Requested page.

    ``per_page <= 0`` means *unpaged*: the whole result is one page.
    ``page`` values below 1 are clamped to 1.
    """

    page: int = 1
    per_page: int = 0

    def __post_init__(self) -> None:
        if self.page < 1:
            object.__setattr__(self, "page", 1)

    @property
    def is_paged(self) -> bool:
        return self.per_page > 0

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page if self.is_paged else 0

    @property
    def limit(self) -> int | None:
        return self.per_page if self.is_paged else None

    def capped(self, max_per_page: int | None) -> Pagination:
        """Return a copy with ``per_page`` limited to *max_per_page*."""
        if max_per_page is None or not self.is_paged:
            return self
        if self.per_page <= max_per_page:
            return self
        return Pagination(page=self.page, per_page=max_per_page)


UNPAGED = Pagination()


@dataclass
class PageResult(Generic[T]):
    """One page of search results."""

    entries: list[T]
    page_number: int
    page_size: int
    total_entries: int
    total_pages: int

    @classmethod
    def build(
        cls,
        entries: Sequence[T],
        pagination: Pagination,
        total_entries: int,
    ) -> PageResult[T]:
        if not pagination.is_paged:
            return cls(
                entries=list(entries),
                page_number=1,
                page_size=len(entries),
                total_entries=total_entries,
                total_pages=1,
            )
        return cls(
            entries=list(entries),
            page_number=pagination.page,
            page_size=pagination.per_page,
            total_entries=total_entries,
            total_pages=max(math.ceil(total_entries / pagination.per_page), 1),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "entries": self.entries,
            "page_number": self.page_number,
            "page_size": self.page_size,
            "total_entries": self.total_entries,
            "total_pages": self.total_pages,
        }

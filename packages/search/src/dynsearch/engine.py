"""
Search entry point.

:func:`compile_search` is the pure step: filters in, :class:`QueryPlan`
out, no I/O. :class:`SearchEngine` adds the execution step by handing the
plan to an injected :class:`SearchExecutor`.

Usage::

    engine = SearchEngine(SQLAlchemyIntrospector(), executor)
    page = await engine.search(
        Order,
        {"status": "open", "amount": [100, 500, "range"]},
        pagination=Pagination(page=1, per_page=10),
    )
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from .combinator import CompileContext, combine, strip_fields
from .coercion import resolve_timezone
from .plan import (
    UNPAGED,
    OrderClause,
    PageResult,
    Pagination,
    QueryPlan,
    normalize_order_by,
)
from .settings import OrderDirection, SearchSettings

if TYPE_CHECKING:
    from .joins import JoinSet
    from .params import SearchParams
    from .schema import SchemaIntrospector

logger = logging.getLogger(__name__)

Preload = bool | Sequence[str]


@runtime_checkable
class SearchExecutor(Protocol):
    """Runs a compiled plan against a storage backend."""

    async def execute(
        self,
        plan: QueryPlan,
        pagination: Pagination,
        preload: Preload = False,
    ) -> PageResult[Any]:
        """
        Fetch one page of root rows and expand *preload* relations.

        ``preload`` is ``True`` (every has-one / has-many relation,
        recursively), a list of relation names or dotted paths, or
        ``False`` / ``[]``.
        """
        ...


def compile_search(
    entity: Any,
    filters: Mapping[Any, Any] | None,
    introspector: SchemaIntrospector,
    *,
    settings: SearchSettings | None = None,
    order_by: Any = None,
    order_direction: OrderDirection | str | None = None,
    timezone: str | None = None,
    use_or: bool = False,
    dropped_fields: Iterable[str] = (),
    distinct: bool = False,
) -> QueryPlan:
    """
    Compile a filter mapping into a :class:`QueryPlan`.

    Sensitive fields from *settings* and *dropped_fields* are stripped
    first. Unknown fields and relations raise
    :class:`~dynsearch.exceptions.UnknownFieldError` /
    :class:`~dynsearch.exceptions.UnknownRelationError`.
    """
    settings = settings or SearchSettings()
    tz = resolve_timezone(timezone or settings.default_timezone)
    hidden = settings.sensitive_fields | frozenset(dropped_fields)
    cleaned = strip_fields(filters or {}, hidden)

    ctx = CompileContext(
        entity=entity,
        introspector=introspector,
        tz=tz,
        use_or=use_or,
        relation_validation=settings.relation_validation,
    )
    predicate, joins = combine(cleaned, ctx)

    primary_key = introspector.primary_key(entity)
    order = normalize_order_by(
        order_by if order_by is not None else settings.default_order_by,
        order_direction or settings.default_order_direction,
        primary_key,
    )
    joins = _resolve_order(order, entity, introspector, joins)

    plan = QueryPlan(
        entity=entity,
        predicate=predicate,
        joins=joins,
        order=order,
        distinct=distinct,
        primary_key=primary_key,
    )
    logger.debug(
        "Compiled search on %s: %d join(s), order %s",
        getattr(entity, "__name__", entity),
        len(joins),
        ", ".join(f"{c.field}:{c.direction.value}" for c in order),
    )
    return plan


def _resolve_order(
    order: tuple[OrderClause, ...],
    entity: Any,
    introspector: SchemaIntrospector,
    joins: JoinSet,
) -> JoinSet:
    for clause in order:
        target = entity
        if clause.relation is not None:
            target = introspector.relation_info(entity, clause.relation).target
            if clause.relation not in joins:
                logger.debug("Joining relation '%s' for ordering", clause.relation)
            joins = joins.add(clause.relation)
        introspector.field_type(target, clause.field)
    return joins


class SearchEngine:
    """
    Compile and execute searches.

    Holds no per-call state; one instance can serve concurrent searches.
    """

    def __init__(
        self,
        introspector: SchemaIntrospector,
        executor: SearchExecutor,
        settings: SearchSettings | None = None,
    ) -> None:
        self.introspector = introspector
        self.executor = executor
        self.settings = settings or SearchSettings()

    def compile(
        self,
        entity: Any,
        filters: Mapping[Any, Any] | None = None,
        **options: Any,
    ) -> QueryPlan:
        return compile_search(
            entity, filters, self.introspector, settings=self.settings, **options
        )

    async def search(
        self,
        entity: Any,
        filters: Mapping[Any, Any] | None = None,
        *,
        pagination: Pagination | None = None,
        order_by: Any = None,
        order_direction: OrderDirection | str | None = None,
        timezone: str | None = None,
        preload: Preload = False,
        use_or: bool = False,
        dropped_fields: Iterable[str] = (),
        distinct: bool = False,
    ) -> PageResult[Any]:
        plan = self.compile(
            entity,
            filters,
            order_by=order_by,
            order_direction=order_direction,
            timezone=timezone,
            use_or=use_or,
            dropped_fields=dropped_fields,
            distinct=distinct,
        )
        page = (pagination or UNPAGED).capped(self.settings.max_per_page)
        return await self.executor.execute(plan, page, preload)

    async def search_params(
        self,
        entity: Any,
        params: SearchParams,
        *,
        dropped_fields: Iterable[str] = (),
    ) -> PageResult[Any]:
        """Run a search described by parsed request parameters."""
        return await self.search(
            entity,
            params.filters,
            dropped_fields=dropped_fields,
            **params.to_search_kwargs(),
        )

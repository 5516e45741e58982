"""
Turn a :class:`~dynsearch.plan.QueryPlan` into SQLAlchemy ``Select`` statements.

Every joined relation is inner-joined through an ``aliased()`` target named
after the relation, so a relation referenced from several filters or from
the ordering is joined exactly once.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import Select, asc, desc, distinct, func, select
from sqlalchemy.orm import RelationshipDirection, aliased, selectinload

from dynsearch.exceptions import UnknownRelationError

from .compiler import BindingMap, build_sqla_filter

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.orm import Mapper
    from sqlalchemy.orm.strategy_options import _AbstractLoad

    from dynsearch.plan import QueryPlan

    from .strategy import SQLAlchemyOperatorRegistry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_bindings(plan: QueryPlan) -> dict[str | None, Any]:
    """Return the root model under ``None`` plus one alias per joined relation."""
    model = plan.entity
    bindings: dict[str | None, Any] = {None: model}
    for relation in plan.joins:
        target = getattr(model, relation).property.mapper.class_
        bindings[relation] = aliased(target, name=relation)
    return bindings


def build_select(
    plan: QueryPlan,
    *,
    registry: SQLAlchemyOperatorRegistry | None = None,
) -> Select[Any]:
    """Build the entries query: joins, filter, ordering and distinct."""
    bindings = build_bindings(plan)
    stmt = _apply_joins(select(plan.entity), plan, bindings)
    stmt = stmt.where(build_sqla_filter(plan.predicate, bindings, registry=registry))
    stmt = _apply_order_by(stmt, plan, bindings)
    if plan.distinct:
        stmt = stmt.distinct()
    return stmt


def build_count(
    plan: QueryPlan,
    *,
    registry: SQLAlchemyOperatorRegistry | None = None,
) -> Select[Any]:
    """Build the total-count query for *plan*; distinct keys when requested."""
    bindings = build_bindings(plan)
    key = getattr(plan.entity, plan.primary_key)
    counted = func.count(distinct(key)) if plan.distinct else func.count(key)
    stmt = select(counted).select_from(plan.entity)
    stmt = _apply_joins(stmt, plan, bindings)
    return stmt.where(build_sqla_filter(plan.predicate, bindings, registry=registry))


def loader_options(model: type[Any], preload: bool | Sequence[str]) -> list[Any]:
    """
    Build ``selectinload`` options for *preload*.

    ``True`` loads every has-one / has-many relation recursively, skipping
    belongs-to relations and any model already on the current path. A list
    names relations or dotted paths (``"items.product"``) to load.
    """
    if preload is True:
        return _preload_all(model.__mapper__, frozenset({model}))
    if not preload:
        return []
    return [_preload_path(model, path) for path in preload]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _apply_joins(
    stmt: Select[Any], plan: QueryPlan, bindings: BindingMap
) -> Select[Any]:
    for relation in plan.joins:
        stmt = stmt.join(getattr(plan.entity, relation).of_type(bindings[relation]))
    return stmt


def _apply_order_by(
    stmt: Select[Any], plan: QueryPlan, bindings: BindingMap
) -> Select[Any]:
    clauses = []
    for clause in plan.order:
        column = getattr(bindings[clause.relation], clause.field)
        clauses.append(desc(column) if clause.descending else asc(column))
    if clauses:
        return stmt.order_by(*clauses)
    return stmt


def _preload_all(
    mapper: Mapper[Any], visited: frozenset[type]
) -> list[_AbstractLoad]:
    options: list[_AbstractLoad] = []
    for rel in mapper.relationships:
        if rel.direction is RelationshipDirection.MANYTOONE:
            continue
        target = rel.mapper.class_
        if target in visited:
            continue
        loader = selectinload(getattr(mapper.class_, rel.key))
        nested = _preload_all(rel.mapper, visited | {target})
        if nested:
            loader = loader.options(*nested)
        options.append(loader)
    return options


def _preload_path(model: type[Any], path: str) -> _AbstractLoad:
    loader: Any = None
    current = model
    for name in path.split("."):
        rel = current.__mapper__.relationships.get(name)
        if rel is None:
            raise UnknownRelationError(
                name,
                current.__name__,
                [r.key for r in current.__mapper__.relationships],
            )
        attr = getattr(current, name)
        loader = selectinload(attr) if loader is None else loader.selectinload(attr)
        current = rel.mapper.class_
    logger.debug("Preloading '%s' on %s", path, model.__name__)
    return loader

"""
Async SQLAlchemy search executor.

Runs a compiled :class:`~dynsearch.plan.QueryPlan` on an ``AsyncSession``:
one count query for the total, one entries query for the requested page,
plus ``selectinload`` round-trips for preloaded relations.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator, Sequence
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError

from dynsearch.plan import PageResult, Pagination, QueryPlan

from .exceptions import SearchExecutionError
from .statement import build_count, build_select, loader_options

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from .strategy import SQLAlchemyOperatorRegistry

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100


class SQLAlchemySearchExecutor:
    """
    :class:`~dynsearch.engine.SearchExecutor` backed by an ``AsyncSession``.

    Args:
        session: Session used for every query. The executor never commits
            or closes it.
        registry: Optional operator registry; defaults to
            ``DEFAULT_SQLA_REGISTRY``.
    """

    def __init__(
        self,
        session: AsyncSession,
        registry: SQLAlchemyOperatorRegistry | None = None,
    ) -> None:
        self.session = session
        self.registry = registry

    async def execute(
        self,
        plan: QueryPlan,
        pagination: Pagination,
        preload: bool | Sequence[str] = False,
    ) -> PageResult[Any]:
        start = time.monotonic()
        stmt = build_select(plan, registry=self.registry)
        options = loader_options(plan.entity, preload)
        if options:
            stmt = stmt.options(*options)
        if pagination.is_paged:
            stmt = stmt.offset(pagination.offset).limit(pagination.limit)

        try:
            total = await self.session.scalar(
                build_count(plan, registry=self.registry)
            )
            result = await self.session.execute(stmt)
            entries = list(result.scalars().all())
        except SQLAlchemyError as exc:
            logger.exception("Search on %s failed", plan.entity.__name__)
            raise SearchExecutionError(plan.entity.__name__, exc) from exc

        logger.debug(
            "Search on %s returned %d of %d row(s) in %.2fms",
            plan.entity.__name__,
            len(entries),
            total or 0,
            (time.monotonic() - start) * 1000,
        )
        return PageResult.build(entries, pagination, total or 0)

    async def stream(
        self,
        plan: QueryPlan,
        *,
        batch_size: int | None = None,
        preload: bool | Sequence[str] = False,
    ) -> AsyncIterator[Any]:
        """Yield every matching root row, fetched *batch_size* rows at a time."""
        stmt = build_select(plan, registry=self.registry)
        options = loader_options(plan.entity, preload)
        if options:
            stmt = stmt.options(*options)

        effective_batch = batch_size or DEFAULT_BATCH_SIZE
        try:
            result = await self.session.stream_scalars(
                stmt.execution_options(yield_per=effective_batch)
            )
            async for model in result:
                yield model
        except SQLAlchemyError as exc:
            logger.exception("Streaming search on %s failed", plan.entity.__name__)
            raise SearchExecutionError(plan.entity.__name__, exc) from exc

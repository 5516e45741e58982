"""Search repository bound to one mapped model."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from dynsearch.engine import SearchEngine
from dynsearch.exceptions import UnknownRelationError

from .exceptions import SearchExecutionError
from .executor import SQLAlchemySearchExecutor
from .introspection import SQLAlchemyIntrospector

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from dynsearch.params import SearchParams
    from dynsearch.plan import PageResult, Pagination, QueryPlan
    from dynsearch.settings import SearchSettings

    from .strategy import SQLAlchemyOperatorRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SQLAlchemySearchRepository(Generic[T]):
    """
    Dynamic search over a single SQLAlchemy model.

    Usage::

        async with session_factory() as session:
            orders = SQLAlchemySearchRepository(Order, session)
            page = await orders.search(
                {"status": "open", "amount": [100, 500, "range"]},
                pagination=Pagination(page=1, per_page=10),
            )
            async for order in orders.stream({"status": "closed"}):
                ...
    """

    def __init__(
        self,
        model: type[T],
        session: AsyncSession,
        *,
        settings: SearchSettings | None = None,
        registry: SQLAlchemyOperatorRegistry | None = None,
    ) -> None:
        self.model = model
        self.session = session
        self.executor = SQLAlchemySearchExecutor(session, registry)
        self.engine = SearchEngine(SQLAlchemyIntrospector(), self.executor, settings)

    def compile(
        self, filters: Mapping[Any, Any] | None = None, **options: Any
    ) -> QueryPlan:
        return self.engine.compile(self.model, filters, **options)

    async def search(
        self,
        filters: Mapping[Any, Any] | None = None,
        *,
        pagination: Pagination | None = None,
        preload: bool | Sequence[str] = False,
        **options: Any,
    ) -> PageResult[T]:
        return await self.engine.search(
            self.model, filters, pagination=pagination, preload=preload, **options
        )

    async def search_params(
        self,
        params: SearchParams,
        *,
        dropped_fields: Iterable[str] = (),
    ) -> PageResult[T]:
        return await self.engine.search_params(
            self.model, params, dropped_fields=dropped_fields
        )

    async def stream(
        self,
        filters: Mapping[Any, Any] | None = None,
        *,
        batch_size: int | None = None,
        preload: bool | Sequence[str] = False,
        **options: Any,
    ) -> AsyncIterator[T]:
        """Stream every match without pagination or a count query."""
        plan = self.compile(filters, **options)
        async for model in self.executor.stream(
            plan, batch_size=batch_size, preload=preload
        ):
            yield model

    async def ensure_loaded(
        self, instance: T, relations: Sequence[str] | None = None
    ) -> T:
        """
        Load the relations of one fetched *instance* that are not loaded yet.

        *relations* defaults to every relationship of the model; relations
        already loaded are left as they are.
        """
        mapper = inspect(self.model)
        available = [rel.key for rel in mapper.relationships]
        names = list(relations) if relations is not None else available
        for name in names:
            if name not in available:
                raise UnknownRelationError(name, self.model.__name__, available)

        unloaded = inspect(instance).unloaded
        missing = [name for name in names if name in unloaded]
        if not missing:
            return instance
        try:
            await self.session.refresh(instance, attribute_names=missing)
        except SQLAlchemyError as exc:
            logger.exception("Loading %s on %s failed", missing, self.model.__name__)
            raise SearchExecutionError(self.model.__name__, exc) from exc
        logger.debug("Loaded %s on %s", ", ".join(missing), self.model.__name__)
        return instance

"""
Request parameter parsing.

``SearchParams`` turns the flat query-string mapping of an HTTP request
(``?page=2&per_page=20&status=open&order_by=created_at``) into the
arguments of :meth:`dynsearch.engine.SearchEngine.search`. Keys it does not
recognise are treated as filters.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ValidationError
from .plan import Pagination
from .settings import OrderDirection

_CONTROL_KEYS = frozenset(
    {
        "page",
        "per_page",
        "order_by",
        "order_direction",
        "timezone",
        "preload",
        "use_or",
        "distinct",
    }
)


class SearchParams(BaseModel):
    """Validated search request."""

    model_config = ConfigDict(frozen=True)

    filters: dict[str, Any] = Field(default_factory=dict)
    page: int = 1
    per_page: int = 0
    order_by: str | list[str] | None = None
    order_direction: OrderDirection | None = None
    timezone: str | None = None
    preload: bool | list[str] = False
    use_or: bool = False
    distinct: bool = False

    @field_validator("order_direction", mode="before")
    @classmethod
    def _lower_direction(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower() or None
        return value

    @field_validator("order_by", mode="before")
    @classmethod
    def _split_order_by(cls, value: Any) -> Any:
        if isinstance(value, str) and "," in value:
            return [part.strip() for part in value.split(",") if part.strip()]
        return value or None

    @field_validator("preload", mode="before")
    @classmethod
    def _parse_preload(cls, value: Any) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("", "false", "0"):
                return False
            if lowered in ("true", "1"):
                return True
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @classmethod
    def from_query_params(cls, params: Mapping[str, Any]) -> SearchParams:
        """
        Build from a flat mapping; non-control keys become filters.

        Raises :class:`~dynsearch.exceptions.ValidationError` when a
        control parameter has the wrong type.
        """
        control = {k: v for k, v in params.items() if k in _CONTROL_KEYS}
        filters = {k: v for k, v in params.items() if k not in _CONTROL_KEYS}
        try:
            return cls(filters=filters, **control)
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            path = ".".join(str(part) for part in first["loc"])
            raise ValidationError(first["msg"], path=path) from exc

    @property
    def pagination(self) -> Pagination:
        return Pagination(page=self.page, per_page=self.per_page)

    def to_search_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``SearchEngine.search``."""
        kwargs: dict[str, Any] = {
            "pagination": self.pagination,
            "preload": self.preload,
            "use_or": self.use_or,
            "distinct": self.distinct,
        }
        if self.order_by is not None:
            kwargs["order_by"] = self.order_by
        if self.order_direction is not None:
            kwargs["order_direction"] = self.order_direction
        if self.timezone is not None:
            kwargs["timezone"] = self.timezone
        return kwargs

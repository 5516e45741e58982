"""Exceptions for the SQLAlchemy search backend."""

from __future__ import annotations

from typing import Any

from dynsearch.exceptions import SearchError, UnsupportedOperatorError


class SearchExecutionError(SearchError):
    """A compiled search failed inside the database driver."""

    def __init__(self, entity_name: str, cause: BaseException) -> None:
        self.entity_name = entity_name
        self.cause = cause
        super().__init__(f"Search on '{entity_name}' failed: {cause}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "SEARCH_EXECUTION_ERROR",
            "entity": self.entity_name,
            "message": str(self.cause),
        }


class MappingError(SearchError):
    """An entity handle is not a mapped SQLAlchemy class."""


__all__: list[str] = [
    "MappingError",
    "SearchExecutionError",
    "UnsupportedOperatorError",
]

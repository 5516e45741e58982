"""
Search exception hierarchy with fuzzy-match suggestions.

All exceptions inherit from ``SearchError`` and provide ``to_dict()`` for
API-friendly error responses.

Unknown fields and relations are programming errors (a form or a caller
references something the entity does not have) and always propagate.
Unparseable filter *values* never raise out of a search: they degrade to
``None`` inside :mod:`dynsearch.coercion`.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import Any


class SearchError(Exception):
    """Base exception for all search errors."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class ValidationError(SearchError):
    """A filter payload has the wrong shape (e.g. ``_multi_or`` not a list)."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "VALIDATION_ERROR",
            "message": self.message,
            "path": self.path,
        }


class UnknownFieldError(SearchError):
    """
    Field referenced by a filter or ordering key does not exist.

    Example error message::

        Unknown field 'stauts' on 'Order'.
        Did you mean one of these?
          • status

        Available fields: amount, created_at, id, status
    """

    def __init__(
        self,
        field: str,
        entity_name: str,
        available_fields: list[str],
        cutoff: float = 0.6,
    ) -> None:
        self.field = field
        self.entity_name = entity_name
        self.available_fields = available_fields
        self.suggestions = get_close_matches(
            field, available_fields, n=5, cutoff=cutoff
        )
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        lines = [f"Unknown field '{self.field}' on '{self.entity_name}'."]
        if self.suggestions:
            lines.append("Did you mean one of these?")
            for s in self.suggestions:
                lines.append(f"  • {s}")

        sorted_fields = sorted(self.available_fields)
        preview = ", ".join(sorted_fields[:15])
        if len(sorted_fields) > 15:
            preview += ", ..."
        lines.append(f"Available fields: {preview}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "UNKNOWN_FIELD",
            "field": self.field,
            "entity": self.entity_name,
            "suggestions": self.suggestions,
            "available_fields": sorted(self.available_fields),
        }


class UnknownRelationError(SearchError):
    """Relation named in a ``field@relation`` key does not exist."""

    def __init__(
        self,
        relation: str,
        entity_name: str,
        available_relations: list[str],
    ) -> None:
        self.relation = relation
        self.entity_name = entity_name
        self.available_relations = available_relations
        self.suggestions = get_close_matches(
            relation, available_relations, n=3, cutoff=0.6
        )

        message = f"Relation '{relation}' not found on '{entity_name}'."
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "UNKNOWN_RELATION",
            "relation": self.relation,
            "entity": self.entity_name,
            "suggestions": self.suggestions,
            "available_relations": sorted(self.available_relations),
        }


class CoercionError(SearchError):
    """A raw filter value cannot be converted to the field's semantic type."""

    def __init__(self, value: Any, semantic_type: Any) -> None:
        self.value = value
        self.semantic_type = semantic_type
        super().__init__(f"Cannot coerce {value!r} to {semantic_type}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "COERCION_ERROR",
            "value": repr(self.value),
            "type": str(self.semantic_type),
        }


class InvalidTimezoneError(SearchError):
    """The caller's timezone name is not a known IANA zone."""

    def __init__(self, timezone: str) -> None:
        self.timezone = timezone
        super().__init__(f"Unknown timezone: '{timezone}'")


class UnsupportedOperatorError(SearchError):
    """A backend has no strategy registered for a predicate operator."""

    def __init__(self, operator: Any, backend: str) -> None:
        self.operator = operator
        self.backend = backend
        super().__init__(f"Unsupported operator for {backend}: {operator}")

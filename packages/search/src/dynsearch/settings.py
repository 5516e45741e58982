"""
Engine-wide search settings.

``SearchSettings`` holds the defaults a :class:`~dynsearch.engine.SearchEngine`
applies when a call leaves an option unset. Instances are immutable; use
the ``with_*`` helpers to derive variants.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_SENSITIVE_FIELDS: frozenset[str] = frozenset(
    {"hashed_password", "password", "current_password", "password_confirmation"}
)


class RelationValidation(str, Enum):
    """When relation names in filter keys are checked."""

    # Every key is validated, including keys whose value is absent.
    EAGER = "eager"
    # Only keys that produce a predicate are validated.
    LAZY = "lazy"


class OrderDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(
        cls, value: Any, default: OrderDirection | None = None
    ) -> OrderDirection:
        if isinstance(value, OrderDirection):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("asc", "desc"):
                return cls(lowered)
        return default if default is not None else cls.ASC


@dataclass(frozen=True)
class SearchSettings:
    """
    Immutable search defaults.

    Attributes:
        default_timezone: IANA zone used to read naive datetime filter values.
        default_order_by: Ordering field; ``None`` orders by primary key.
        default_order_direction: Direction used when a call gives none.
        sensitive_fields: Filter keys stripped from every search.
        relation_validation: Eager or lazy checking of relation names.
        max_per_page: Upper bound applied to ``per_page``; ``None`` = no cap.
    """

    default_timezone: str = "UTC"
    default_order_by: str | None = None
    default_order_direction: OrderDirection = OrderDirection.ASC
    sensitive_fields: frozenset[str] = field(default=DEFAULT_SENSITIVE_FIELDS)
    relation_validation: RelationValidation = RelationValidation.EAGER
    max_per_page: int | None = None

    def with_timezone(self, timezone: str) -> SearchSettings:
        """Return a copy with a different default timezone."""
        return SearchSettings(
            default_timezone=timezone,
            default_order_by=self.default_order_by,
            default_order_direction=self.default_order_direction,
            sensitive_fields=self.sensitive_fields,
            relation_validation=self.relation_validation,
            max_per_page=self.max_per_page,
        )

    def with_ordering(
        self,
        order_by: str | None,
        direction: OrderDirection | str = OrderDirection.ASC,
    ) -> SearchSettings:
        """Return a copy with updated default ordering."""
        return SearchSettings(
            default_timezone=self.default_timezone,
            default_order_by=order_by,
            default_order_direction=OrderDirection.parse(direction),
            sensitive_fields=self.sensitive_fields,
            relation_validation=self.relation_validation,
            max_per_page=self.max_per_page,
        )

    def with_sensitive_fields(self, *fields: str) -> SearchSettings:
        """Return a copy with additional sensitive fields."""
        return SearchSettings(
            default_timezone=self.default_timezone,
            default_order_by=self.default_order_by,
            default_order_direction=self.default_order_direction,
            sensitive_fields=self.sensitive_fields | frozenset(fields),
            relation_validation=self.relation_validation,
            max_per_page=self.max_per_page,
        )

    def with_relation_validation(
        self, mode: RelationValidation | str
    ) -> SearchSettings:
        """Return a copy with a different relation validation mode."""
        return SearchSettings(
            default_timezone=self.default_timezone,
            default_order_by=self.default_order_by,
            default_order_direction=self.default_order_direction,
            sensitive_fields=self.sensitive_fields,
            relation_validation=RelationValidation(mode),
            max_per_page=self.max_per_page,
        )

    def with_max_per_page(self, max_per_page: int | None) -> SearchSettings:
        """Return a copy with a different page size cap."""
        return SearchSettings(
            default_timezone=self.default_timezone,
            default_order_by=self.default_order_by,
            default_order_direction=self.default_order_direction,
            sensitive_fields=self.sensitive_fields,
            relation_validation=self.relation_validation,
            max_per_page=max_per_page,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-compatible dictionary."""
        return {
            "default_timezone": self.default_timezone,
            "default_order_by": self.default_order_by,
            "default_order_direction": self.default_order_direction.value,
            "sensitive_fields": sorted(self.sensitive_fields),
            "relation_validation": self.relation_validation.value,
            "max_per_page": self.max_per_page,
        }

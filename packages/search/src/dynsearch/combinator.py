"""
Group combinator.

Folds a filter mapping into a single predicate while threading the
:class:`~dynsearch.joins.JoinSet` through every entry, left to right:

* top-level entries are ANDed (ORed when ``use_or`` is set);
* ``_or`` is a mapping whose entries are ORed into one block;
* ``_multi_or`` is a list of mappings, each ANDed internally and then ORed
  together;

and the three parts are ANDed. Absent entries are dropped before any
relation is joined, so a group that ends up empty adds neither a
predicate nor a join.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .absent import drop_absent
from .ast import TRUE, FieldRef, Predicate, conjunction, disjunction
from .coercion import UTC
from .exceptions import ValidationError
from .joins import JoinSet, resolve, resolve_binding
from .keys import parse_field_key
from .operators import VIRTUAL_FIELDS, ReservedKey
from .predicates import build_virtual_predicate, predicate_for_value
from .settings import RelationValidation

if TYPE_CHECKING:
    from .schema import SchemaIntrospector

logger = logging.getLogger(__name__)

_GROUP_KEYS = frozenset({ReservedKey.OR.value, ReservedKey.MULTI_OR.value})


@dataclass(frozen=True)
class CompileContext:
    """Per-call, read-only compilation inputs."""

    entity: Any
    introspector: SchemaIntrospector
    tz: datetime.tzinfo = UTC
    use_or: bool = False
    relation_validation: RelationValidation = RelationValidation.EAGER


def combine(
    filters: Mapping[Any, Any],
    ctx: CompileContext,
    joins: JoinSet | None = None,
) -> tuple[Predicate, JoinSet]:
    """Compile *filters* into ``(predicate, joins)``."""
    joins = joins if joins is not None else JoinSet()
    remaining = dict(filters)
    or_filters = remaining.pop(ReservedKey.OR.value, None)
    multi_or_filters = remaining.pop(ReservedKey.MULTI_OR.value, None)

    top, joins = _entries(remaining, ctx, joins, use_or=ctx.use_or)
    if not top:
        top_predicate: Predicate = TRUE
    elif ctx.use_or:
        top_predicate = disjunction(top)
    else:
        top_predicate = conjunction(top)

    or_block, joins = _or_group(or_filters, ctx, joins)
    multi_or_block, joins = _multi_or_group(multi_or_filters, ctx, joins)

    return conjunction([top_predicate, or_block, multi_or_block]), joins


def strip_fields(filters: Mapping[Any, Any], names: frozenset[str]) -> dict[Any, Any]:
    """
    Remove entries whose field name is in *names*, including inside
    ``_or`` and ``_multi_or`` groups. ``"password@user"`` is removed when
    ``"password"`` is listed.
    """

    def keep(key: Any) -> bool:
        if isinstance(key, tuple) and key:
            return key[0] not in names
        if isinstance(key, str):
            return key.partition("@")[0] not in names
        return True

    stripped: dict[Any, Any] = {}
    for key, value in filters.items():
        if key == ReservedKey.OR.value and isinstance(value, Mapping):
            stripped[key] = strip_fields(value, names)
        elif key == ReservedKey.MULTI_OR.value and isinstance(value, list):
            stripped[key] = [
                strip_fields(group, names) if isinstance(group, Mapping) else group
                for group in value
            ]
        elif keep(key):
            stripped[key] = value
    return stripped


# -- groups ------------------------------------------------------------------


def _or_group(
    or_filters: Any, ctx: CompileContext, joins: JoinSet
) -> tuple[Predicate, JoinSet]:
    if or_filters is None:
        return TRUE, joins
    if not isinstance(or_filters, Mapping):
        raise ValidationError("'_or' must be a mapping of filters", path="_or")

    parts, joins = _entries(or_filters, ctx, joins, use_or=ctx.use_or, path="_or")
    if not parts:
        return TRUE, joins
    return disjunction(parts), joins


def _multi_or_group(
    multi_or_filters: Any, ctx: CompileContext, joins: JoinSet
) -> tuple[Predicate, JoinSet]:
    if multi_or_filters is None:
        return TRUE, joins
    if not isinstance(multi_or_filters, list | tuple):
        raise ValidationError(
            "'_multi_or' must be a list of filter mappings", path="_multi_or"
        )

    groups: list[Predicate] = []
    for index, group in enumerate(multi_or_filters):
        path = f"_multi_or[{index}]"
        if not isinstance(group, Mapping):
            raise ValidationError(f"'{path}' must be a mapping of filters", path=path)
        parts, joins = _entries(group, ctx, joins, use_or=False, path=path)
        if parts:
            groups.append(conjunction(parts))

    if not groups:
        return TRUE, joins
    return disjunction(groups), joins


# -- entries -----------------------------------------------------------------


def _entries(
    filters: Mapping[Any, Any],
    ctx: CompileContext,
    joins: JoinSet,
    *,
    use_or: bool,
    path: str | None = None,
) -> tuple[list[Predicate], JoinSet]:
    if ctx.relation_validation is RelationValidation.EAGER:
        for key in filters:
            _validate_key(key, ctx)

    present = drop_absent(filters)
    if len(present) < len(filters):
        logger.debug(
            "Skipping absent filters: %s",
            ", ".join(str(key) for key in filters if key not in present),
        )

    parts: list[Predicate] = []
    for key, value in present.items():
        if key in _GROUP_KEYS:
            raise ValidationError(
                f"'{key}' groups cannot be nested",
                path=f"{path}.{key}" if path else str(key),
            )
        predicate, joins = _entry(key, value, ctx, joins, use_or=use_or)
        if predicate is not None:
            parts.append(predicate)
    return parts, joins


def _entry(
    key: Any,
    value: Any,
    ctx: CompileContext,
    joins: JoinSet,
    *,
    use_or: bool,
) -> tuple[Predicate | None, JoinSet]:
    field_key = parse_field_key(key)

    if field_key.name in VIRTUAL_FIELDS:
        if not isinstance(value, list | tuple):
            raise ValidationError(
                f"'{field_key.name}' expects a list of fields and thresholds",
                path=str(field_key),
            )
        binding, new_joins = resolve_binding(
            field_key, joins, ctx.entity, ctx.introspector
        )
        predicate = build_virtual_predicate(
            ReservedKey(field_key.name),
            binding,
            value,
            ctx.introspector,
            tz=ctx.tz,
        )
    else:
        binding, new_joins = resolve(field_key, joins, ctx.entity, ctx.introspector)
        semantic_type = ctx.introspector.field_type(binding.entity, field_key.name)
        predicate = predicate_for_value(
            FieldRef(binding, field_key.name),
            semantic_type,
            value,
            tz=ctx.tz,
            use_or=use_or,
        )

    if predicate is None:
        # Nothing to filter on: keep the join set untouched.
        return None, joins
    return predicate, new_joins


def _validate_key(key: Any, ctx: CompileContext) -> None:
    if key in _GROUP_KEYS:
        return
    field_key = parse_field_key(key)
    entity = ctx.entity
    if field_key.relation is not None:
        entity = ctx.introspector.relation_info(entity, field_key.relation).target
    if field_key.name not in VIRTUAL_FIELDS:
        ctx.introspector.field_type(entity, field_key.name)

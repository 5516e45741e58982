"""
Type-aware coercion of raw filter values.

Raw values usually arrive as strings from query parameters or form
fields. :func:`coerce` converts them to the Python type matching the
field's :data:`~dynsearch.schema.SemanticType`; anything unparseable
becomes ``None`` so that a bad value narrows the result to nothing
instead of failing the request. :func:`coerce_strict` raises
:class:`~dynsearch.exceptions.CoercionError` instead.
"""

from __future__ import annotations

import datetime
import logging
import uuid as uuid_module
from decimal import Decimal, InvalidOperation
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .exceptions import CoercionError, InvalidTimezoneError
from .schema import ArrayType, FieldType, SemanticType

logger = logging.getLogger(__name__)

UTC = datetime.timezone.utc

_TRUE_STRINGS = frozenset({"true"})
_FALSE_STRINGS = frozenset({"false"})


def resolve_timezone(name: str | datetime.tzinfo) -> datetime.tzinfo:
    """Return a tzinfo for an IANA zone name (``"UTC"``, ``"Europe/Berlin"``)."""
    if isinstance(name, datetime.tzinfo):
        return name
    if name.upper() in ("UTC", "ETC/UTC", "Z"):
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as err:
        raise InvalidTimezoneError(name) from err


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def coerce(
    semantic_type: SemanticType,
    value: Any,
    tz: datetime.tzinfo = UTC,
) -> Any:
    """Coerce *value* to *semantic_type*; ``None`` when it cannot be parsed."""
    try:
        return coerce_strict(semantic_type, value, tz)
    except CoercionError:
        logger.debug("Could not coerce %r to %s; using None", value, semantic_type)
        return None


def coerce_strict(
    semantic_type: SemanticType,
    value: Any,
    tz: datetime.tzinfo = UTC,
) -> Any:
    if isinstance(semantic_type, ArrayType):
        items = value if isinstance(value, list | tuple) else [value]
        return [coerce(semantic_type.item, item, tz) for item in items]

    if value is None:
        return "" if semantic_type is FieldType.STRING else None

    caster = _CASTERS.get(semantic_type)
    if caster is None:
        return value
    try:
        return caster(value, tz)
    except (ValueError, TypeError, ArithmeticError, InvalidOperation) as err:
        raise CoercionError(value, semantic_type) from err


def coerce_range_end(
    semantic_type: SemanticType,
    value: Any,
    tz: datetime.tzinfo = UTC,
) -> Any:
    """
    Coerce an inclusive upper bound.

    For ``datetime`` fields the bound is moved to second 59 of its minute,
    so ``"2024-01-01 10:05"`` as an upper bound covers ``10:05:59``.
    """
    converted = coerce(semantic_type, value, tz)
    if semantic_type is FieldType.DATETIME and isinstance(
        converted, datetime.datetime
    ):
        return converted.replace(second=59)
    return converted


# ---------------------------------------------------------------------------
# Casters
# ---------------------------------------------------------------------------


def _cast_date(value: Any, _tz: datetime.tzinfo) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    text = str(value).strip()
    if "T" in text or " " in text:
        return _parse_datetime_text(text).date()
    return datetime.date.fromisoformat(text)


def _cast_datetime(value: Any, tz: datetime.tzinfo) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        parsed = value
    elif isinstance(value, datetime.date):
        parsed = datetime.datetime.combine(value, datetime.time.min)
    else:
        parsed = _parse_datetime_text(str(value).strip())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed.astimezone(UTC)


def _cast_naive_datetime(value: Any, _tz: datetime.tzinfo) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        parsed = value
    elif isinstance(value, datetime.date):
        parsed = datetime.datetime.combine(value, datetime.time.min)
    else:
        parsed = _parse_datetime_text(str(value).strip())
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed


def _cast_time(value: Any, _tz: datetime.tzinfo) -> datetime.time:
    if isinstance(value, datetime.datetime):
        return value.time()
    if isinstance(value, datetime.time):
        return value
    return datetime.time.fromisoformat(str(value).strip())


def _cast_integer(value: Any, _tz: datetime.tzinfo) -> int:
    if isinstance(value, bool):
        raise TypeError("booleans are not integers")
    if isinstance(value, int):
        return value
    if isinstance(value, float | Decimal):
        if value != int(value):
            raise ValueError(f"{value} is not integral")
        return int(value)
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        number = float(text)
        if not number.is_integer():
            raise
        return int(number)


def _cast_float(value: Any, _tz: datetime.tzinfo) -> float:
    if isinstance(value, bool):
        raise TypeError("booleans are not floats")
    if isinstance(value, int | float | Decimal):
        return float(value)
    return float(str(value).strip())


def _cast_decimal(value: Any, _tz: datetime.tzinfo) -> Decimal:
    if isinstance(value, bool):
        raise TypeError("booleans are not decimals")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    result = Decimal(str(value).strip())
    if not result.is_finite():
        raise ValueError(f"{value} is not a finite number")
    return result


def _cast_boolean(value: Any, _tz: datetime.tzinfo) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ValueError(f"{value!r} is not a boolean")


def _cast_string(value: Any, _tz: datetime.tzinfo) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, list | tuple):
        return ", ".join(_cast_string(item, _tz) for item in value)
    return str(value)


def _cast_uuid(value: Any, _tz: datetime.tzinfo) -> uuid_module.UUID:
    if isinstance(value, uuid_module.UUID):
        return value
    return uuid_module.UUID(str(value).strip())


def _parse_datetime_text(text: str) -> datetime.datetime:
    return datetime.datetime.fromisoformat(text.replace("Z", "+00:00"))


_CASTERS = {
    FieldType.DATE: _cast_date,
    FieldType.DATETIME: _cast_datetime,
    FieldType.NAIVE_DATETIME: _cast_naive_datetime,
    FieldType.TIME: _cast_time,
    FieldType.INTEGER: _cast_integer,
    FieldType.FLOAT: _cast_float,
    FieldType.DECIMAL: _cast_decimal,
    FieldType.BOOLEAN: _cast_boolean,
    FieldType.STRING: _cast_string,
    FieldType.UUID: _cast_uuid,
}

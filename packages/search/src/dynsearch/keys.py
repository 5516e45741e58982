"""Filter and ordering keys: ``"status"`` or ``"name@customer"``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .exceptions import ValidationError

RELATION_SEPARATOR = "@"


@dataclass(frozen=True)
class PlainField:
    """Field on the root entity."""

    name: str

    @property
    def relation(self) -> None:
        return None

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class QualifiedField:
    """Field on an entity one relation hop away from the root."""

    name: str
    relation: str

    def __str__(self) -> str:
        return f"{self.name}{RELATION_SEPARATOR}{self.relation}"


FieldKey = PlainField | QualifiedField


def parse_field_key(key: Any) -> FieldKey:
    """
    Parse a filter key.

    Accepts ``"field"``, ``"field@relation"``, a ``(field, relation)``
    tuple, or an already parsed key. Keys with more than one ``@`` or an
    empty side are rejected; deeper relation paths are not supported.
    """
    if isinstance(key, PlainField | QualifiedField):
        return key
    if isinstance(key, tuple):
        if len(key) != 2 or not all(isinstance(part, str) and part for part in key):
            raise ValidationError(
                f"Field key tuple must be (field, relation), got {key!r}",
                path=str(key),
            )
        return QualifiedField(name=key[0], relation=key[1])
    if not isinstance(key, str) or not key:
        raise ValidationError(f"Invalid field key: {key!r}", path=str(key))

    if RELATION_SEPARATOR not in key:
        return PlainField(key)
    name, _, relation = key.partition(RELATION_SEPARATOR)
    if not name or not relation or RELATION_SEPARATOR in relation:
        raise ValidationError(f"Invalid field key: {key!r}", path=key)
    return QualifiedField(name=name, relation=relation)

from enum import Enum

# Bump whenever a token is added, removed or changes meaning: UI filter
# forms embed these strings directly.
OPERATOR_VOCABULARY_VERSION = 1


class OperatorToken(str, Enum):
    """Trailing keyword of a list filter value, e.g. ``[a, b, "range"]``."""

    # Ranges
    RANGE = "range"
    NOT_RANGE = "not_range"

    # Temporal / ordered comparison
    AFTER = "after"
    AFTER_EQUAL = "after_equal"
    BEFORE = "before"
    BEFORE_EQUAL = "before_equal"

    # Matching
    AND = "and"
    OR = "or"
    EXACT = "exact"
    EXACT_AND = "exact_and"
    EXACT_OR = "exact_or"
    EXACT_NOT = "exact_not"
    NOT = "not"

    # Emptiness
    NOT_EMPTY = "not_empty"
    EMPTY = "empty"


class FieldsComparator(str, Enum):
    """Trailing comparator of a ``_fields_diff`` / ``_fields_sum`` value."""

    AFTER = "after"
    AFTER_EQUAL = "after_equal"
    BEFORE = "before"
    BEFORE_EQUAL = "before_equal"
    RANGE = "range"
    EQUAL = "equal"


class PredicateOperator(str, Enum):
    """Leaf operators of the predicate IR, lowered by each backend."""

    # Standard comparison
    EQ = "="
    NE = "!="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="

    # Set
    IN = "in"
    NOT_IN = "not_in"
    BETWEEN = "between"
    NOT_BETWEEN = "not_between"

    # String
    ICONTAINS = "icontains"

    # Null / empty
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"
    EMPTY = "empty"
    NOT_EMPTY = "not_empty"

    # Array
    OVERLAP = "overlap"
    CONTAINS_ALL = "contains_all"


class ReservedKey(str, Enum):
    OR = "_or"
    MULTI_OR = "_multi_or"
    FIELDS_DIFF = "_fields_diff"
    FIELDS_SUM = "_fields_sum"


TEMPORAL_TOKENS: frozenset[OperatorToken] = frozenset(
    {
        OperatorToken.AFTER,
        OperatorToken.AFTER_EQUAL,
        OperatorToken.BEFORE,
        OperatorToken.BEFORE_EQUAL,
    }
)

VIRTUAL_FIELDS: frozenset[str] = frozenset(
    {ReservedKey.FIELDS_DIFF.value, ReservedKey.FIELDS_SUM.value}
)

# Pre-computed lookups for the parser
_TOKENS_BY_VALUE: dict[str, OperatorToken] = {t.value: t for t in OperatorToken}
_COMPARATORS_BY_VALUE: dict[str, FieldsComparator] = {
    c.value: c for c in FieldsComparator
}


def token_for(value: object) -> OperatorToken | None:
    """Return the operator token spelled by *value*, or ``None``."""
    if isinstance(value, str):
        return _TOKENS_BY_VALUE.get(value)
    return None


def comparator_for(value: object) -> FieldsComparator | None:
    """Return the virtual-field comparator spelled by *value*, or ``None``."""
    if isinstance(value, str):
        return _COMPARATORS_BY_VALUE.get(value)
    return None

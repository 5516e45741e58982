from .absent import drop_absent, is_absent
from .ast import (
    FALSE,
    TRUE,
    And,
    Condition,
    Constant,
    FieldDiff,
    FieldRef,
    FieldSum,
    Not,
    Or,
    Predicate,
    conjunction,
    disjunction,
)
from .coercion import coerce, coerce_range_end, coerce_strict, resolve_timezone
from .combinator import CompileContext, combine, strip_fields
from .dates import construct_date_list, construct_date_map
from .engine import SearchEngine, SearchExecutor, compile_search
from .evaluator import MemoryOperator, MemoryOperatorRegistry, PredicateEvaluator
from .exceptions import (
    CoercionError,
    InvalidTimezoneError,
    SearchError,
    UnknownFieldError,
    UnknownRelationError,
    UnsupportedOperatorError,
    ValidationError,
)
from .joins import Binding, JoinSet, resolve, resolve_binding
from .keys import PlainField, QualifiedField, parse_field_key
from .memory import InMemorySearchExecutor
from .operators import (
    OPERATOR_VOCABULARY_VERSION,
    FieldsComparator,
    OperatorToken,
    PredicateOperator,
    ReservedKey,
)
from .operators_memory import build_default_registry
from .params import SearchParams
from .parser import extract_fields_comparator, extract_operator
from .plan import OrderClause, PageResult, Pagination, QueryPlan, normalize_order_by
from .predicates import build_predicate, build_virtual_predicate, predicate_for_value
from .registry import OperatorRegistry, OperatorStrategy
from .schema import (
    ArrayType,
    EntitySchema,
    FieldType,
    RelationInfo,
    SchemaIntrospector,
    StaticSchemaIntrospector,
)
from .settings import OrderDirection, RelationValidation, SearchSettings

__all__ = [
    # Entry points
    "SearchEngine",
    "SearchExecutor",
    "compile_search",
    "InMemorySearchExecutor",
    # Configuration / request parsing
    "SearchSettings",
    "SearchParams",
    "OrderDirection",
    "RelationValidation",
    # Vocabulary
    "OPERATOR_VOCABULARY_VERSION",
    "OperatorToken",
    "FieldsComparator",
    "PredicateOperator",
    "ReservedKey",
    # Schema
    "FieldType",
    "ArrayType",
    "RelationInfo",
    "EntitySchema",
    "SchemaIntrospector",
    "StaticSchemaIntrospector",
    # Keys and joins
    "PlainField",
    "QualifiedField",
    "parse_field_key",
    "Binding",
    "JoinSet",
    "resolve",
    "resolve_binding",
    # Predicate tree
    "Predicate",
    "Condition",
    "And",
    "Or",
    "Not",
    "Constant",
    "TRUE",
    "FALSE",
    "FieldRef",
    "FieldDiff",
    "FieldSum",
    "conjunction",
    "disjunction",
    # Compilation steps
    "is_absent",
    "drop_absent",
    "extract_operator",
    "extract_fields_comparator",
    "coerce",
    "coerce_strict",
    "coerce_range_end",
    "resolve_timezone",
    "build_predicate",
    "build_virtual_predicate",
    "predicate_for_value",
    "CompileContext",
    "combine",
    "strip_fields",
    # Plan / pagination
    "QueryPlan",
    "OrderClause",
    "normalize_order_by",
    "Pagination",
    "PageResult",
    # Evaluator / strategy
    "OperatorStrategy",
    "OperatorRegistry",
    "MemoryOperator",
    "MemoryOperatorRegistry",
    "PredicateEvaluator",
    "build_default_registry",
    # Helpers
    "construct_date_list",
    "construct_date_map",
    # Exceptions
    "SearchError",
    "ValidationError",
    "UnknownFieldError",
    "UnknownRelationError",
    "CoercionError",
    "InvalidTimezoneError",
    "UnsupportedOperatorError",
]

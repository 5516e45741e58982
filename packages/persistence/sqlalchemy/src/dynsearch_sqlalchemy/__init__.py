from .compiler import build_sqla_filter, resolve_column
from .exceptions import MappingError, SearchExecutionError
from .executor import SQLAlchemySearchExecutor
from .introspection import SQLAlchemyIntrospector, semantic_type_for
from .operators import DEFAULT_SQLA_REGISTRY, build_default_sqla_registry
from .repository import SQLAlchemySearchRepository
from .statement import build_bindings, build_count, build_select, loader_options
from .strategy import SQLAlchemyOperator, SQLAlchemyOperatorRegistry

__all__ = [
    # Entry points
    "SQLAlchemySearchRepository",
    "SQLAlchemySearchExecutor",
    "SQLAlchemyIntrospector",
    "semantic_type_for",
    # Statement building
    "build_sqla_filter",
    "resolve_column",
    "build_bindings",
    "build_select",
    "build_count",
    "loader_options",
    # Strategy
    "SQLAlchemyOperator",
    "SQLAlchemyOperatorRegistry",
    "DEFAULT_SQLA_REGISTRY",
    "build_default_sqla_registry",
    # Exceptions
    "MappingError",
    "SearchExecutionError",
]

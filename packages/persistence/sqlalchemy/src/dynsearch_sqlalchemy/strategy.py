"""
SQLAlchemy leaf compilation strategies.

Each :class:`SQLAlchemyOperator` lowers one
:class:`~dynsearch.operators.PredicateOperator` applied to a column (or an
arithmetic expression over columns) into a boolean ``ColumnElement``.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any

from dynsearch.registry import OperatorRegistry, OperatorStrategy

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement

    from dynsearch.operators import PredicateOperator


class SQLAlchemyOperator(OperatorStrategy):
    """Lowers one predicate operator to a SQLAlchemy boolean clause."""

    @abstractmethod
    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        """
        Args:
            column: A column, aliased attribute or arithmetic expression.
            value: The coerced condition value.
        """
        ...


class SQLAlchemyOperatorRegistry(OperatorRegistry[SQLAlchemyOperator]):
    """SQLAlchemy strategies keyed by predicate operator."""

    backend = "sqlalchemy"

    def apply(
        self, name: PredicateOperator, column: Any, value: Any
    ) -> ColumnElement[bool]:
        """
        Raises:
            UnsupportedOperatorError: If the operator is not registered.
        """
        return self.require(name).apply(column, value)

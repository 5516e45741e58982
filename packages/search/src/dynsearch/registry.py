"""
Operator strategy registries shared by every backend.

A backend implements one :class:`OperatorStrategy` subclass per
:class:`~dynsearch.operators.PredicateOperator` and collects them in an
:class:`OperatorRegistry` subclass that names the backend for error
reporting.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Generic, TypeVar

from .exceptions import UnsupportedOperatorError
from .operators import PredicateOperator


class OperatorStrategy(ABC):
    """Base class of every per-operator strategy."""

    @property
    @abstractmethod
    def name(self) -> PredicateOperator:
        """The operator this strategy handles."""
        ...


S = TypeVar("S", bound=OperatorStrategy)


class OperatorRegistry(Generic[S]):
    """
    Strategies keyed by :class:`~dynsearch.operators.PredicateOperator`.

    Registering a strategy for an operator that already has one replaces it.
    """

    backend: ClassVar[str] = "unknown"

    def __init__(self) -> None:
        self._strategies: dict[PredicateOperator, S] = {}

    def register(self, strategy: S) -> None:
        self._strategies[strategy.name] = strategy

    def register_all(self, *strategies: S) -> None:
        for strategy in strategies:
            self.register(strategy)

    def unregister(self, name: PredicateOperator) -> None:
        self._strategies.pop(name, None)

    def get(self, name: PredicateOperator) -> S | None:
        return self._strategies.get(name)

    def has(self, name: PredicateOperator) -> bool:
        return name in self._strategies

    @property
    def supported_operators(self) -> set[PredicateOperator]:
        return set(self._strategies)

    def require(self, name: PredicateOperator) -> S:
        """
        Return the strategy for *name*.

        Raises:
            UnsupportedOperatorError: If nothing is registered for *name*.
        """
        strategy = self._strategies.get(name)
        if strategy is None:
            raise UnsupportedOperatorError(name, self.backend)
        return strategy

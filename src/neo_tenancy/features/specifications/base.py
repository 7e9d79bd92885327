"""Composable, side-effect-free predicates over entities.

Composition never mutates operands: ``and_``, ``or_`` and ``not_`` return new
specifications. AND and OR short-circuit left to right. Negating a negation
returns the wrapped specification itself, so repeated toggling never grows a
chain of wrappers.
"""

from abc import ABC, abstractmethod
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class Specification(ABC, Generic[T]):
    """Base class for all specifications."""

    @abstractmethod
    def is_satisfied_by(self, candidate: T) -> bool:
        """Check whether the candidate satisfies this specification."""
        ...

    @abstractmethod
    def get_description(self) -> str:
        """Human-readable description, for debugging and logging only."""
        ...

    def and_(self, other: "Specification[T]") -> "Specification[T]":
        return AndSpecification(self, other)

    def or_(self, other: "Specification[T]") -> "Specification[T]":
        return OrSpecification(self, other)

    def not_(self) -> "Specification[T]":
        return NotSpecification(self)

    def __and__(self, other: "Specification[T]") -> "Specification[T]":
        return self.and_(other)

    def __or__(self, other: "Specification[T]") -> "Specification[T]":
        return self.or_(other)

    def __invert__(self) -> "Specification[T]":
        return self.not_()

    def __call__(self, candidate: T) -> bool:
        return self.is_satisfied_by(candidate)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.get_description()})"


class AndSpecification(Specification[T]):
    """Both operands must hold; the right operand is skipped when the left fails."""

    def __init__(self, left: Specification[T], right: Specification[T]):
        self.left = left
        self.right = right

    def is_satisfied_by(self, candidate: T) -> bool:
        return self.left.is_satisfied_by(candidate) and self.right.is_satisfied_by(candidate)

    def get_description(self) -> str:
        return f"({self.left.get_description()} AND {self.right.get_description()})"


class OrSpecification(Specification[T]):
    """Either operand must hold; the right operand is skipped when the left holds."""

    def __init__(self, left: Specification[T], right: Specification[T]):
        self.left = left
        self.right = right

    def is_satisfied_by(self, candidate: T) -> bool:
        return self.left.is_satisfied_by(candidate) or self.right.is_satisfied_by(candidate)

    def get_description(self) -> str:
        return f"({self.left.get_description()} OR {self.right.get_description()})"


class NotSpecification(Specification[T]):
    """Negation of a wrapped specification."""

    def __init__(self, specification: Specification[T]):
        self.specification = specification

    def is_satisfied_by(self, candidate: T) -> bool:
        return not self.specification.is_satisfied_by(candidate)

    def not_(self) -> Specification[T]:
        return self.specification

    def get_description(self) -> str:
        return f"NOT ({self.specification.get_description()})"


class PredicateSpecification(Specification[T]):
    """Wraps an ad-hoc callable. Evaluable in memory only, not translatable to a query."""

    def __init__(self, predicate: Callable[[T], bool], description: Optional[str] = None):
        self.predicate = predicate
        self.description = description or getattr(predicate, "__name__", "predicate")

    def is_satisfied_by(self, candidate: T) -> bool:
        return bool(self.predicate(candidate))

    def get_description(self) -> str:
        return self.description


def get_nesting_depth(specification: Specification) -> int:
    """Composition depth: a leaf is 0, each combinator adds one level."""
    if isinstance(specification, (AndSpecification, OrSpecification)):
        return 1 + max(
            get_nesting_depth(specification.left),
            get_nesting_depth(specification.right),
        )
    if isinstance(specification, NotSpecification):
        return 1 + get_nesting_depth(specification.specification)
    return 0

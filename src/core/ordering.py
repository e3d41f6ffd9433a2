"""Three-way comparator combinators.

Comparators return -1, 0, or 1. ``lexicographic`` chains field comparators so
multi-field orderings are declared once instead of hand-written per type.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

T = TypeVar("T")
Comparator = Callable[[T, T], int]


def compare_natural(left: Any, right: Any) -> int:
    """Compare two values with their natural ordering."""
    return (left > right) - (left < right)


def comparing(
    key: Callable[[T], Any],
    comparator: Comparator[Any] = compare_natural,
) -> Comparator[T]:
    """Build a comparator that compares one extracted key.

    Args:
        key: Field extractor.
        comparator: Comparator applied to the extracted values.

    Returns:
        Comparator over the owning objects.
    """

    def compare(left: T, right: T) -> int:
        return comparator(key(left), key(right))

    return compare


def absent_greatest(comparator: Comparator[Any] = compare_natural) -> Comparator[Any]:
    """Wrap a comparator so ``None`` sorts after every present value."""

    def compare(left: Any, right: Any) -> int:
        if left is None and right is None:
            return 0
        if left is None:
            return 1
        if right is None:
            return -1
        return comparator(left, right)

    return compare


def lexicographic(*comparators: Comparator[T]) -> Comparator[T]:
    """Chain comparators: the first non-zero result decides.

    Args:
        comparators: Field comparators in priority order.

    Returns:
        Combined comparator; 0 only when every field compares equal.
    """

    def compare(left: T, right: T) -> int:
        for comparator in comparators:
            result = comparator(left, right)
            if result != 0:
                return result
        return 0

    return compare

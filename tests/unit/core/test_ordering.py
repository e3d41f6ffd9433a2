"""Unit tests for comparator combinators."""

from __future__ import annotations

from functools import cmp_to_key

from core.ordering import absent_greatest, compare_natural, comparing, lexicographic


def test_compare_natural_returns_sign() -> None:
    """Natural comparison should return -1, 0, or 1."""
    assert (compare_natural(1, 2), compare_natural(2, 2), compare_natural(3, 2)) == (-1, 0, 1)


def test_absent_greatest_sorts_none_last() -> None:
    """None should rank after every present value."""
    values = sorted(["b", None, "a"], key=cmp_to_key(absent_greatest()))

    assert values == ["a", "b", None]


def test_lexicographic_uses_first_non_equal_field() -> None:
    """Later comparators should only break ties of earlier ones."""
    order = lexicographic(
        comparing(lambda pair: pair[0]),
        comparing(lambda pair: pair[1], absent_greatest()),
    )
    pairs = [(2, "a"), (1, None), (1, "z")]

    assert sorted(pairs, key=cmp_to_key(order)) == [(1, "z"), (1, None), (2, "a")]


def test_lexicographic_without_comparators_treats_all_equal() -> None:
    """An empty chain should compare everything equal."""
    assert lexicographic()("a", "b") == 0

"""Eager consumers: drain a sequence into a value.

None of these return for an unbounded sequence unless they can stop early
(first and takenth stop at the element they need). Bound the input first
with take() or slice() when in doubt.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, TypeVar

from pullseq.buffering import slice
from pullseq.errors import InvalidArgumentError
from pullseq.protocol import EXHAUSTED
from pullseq.sources import of

T = TypeVar("T")
A = TypeVar("A")


def to_list(seq: Iterable[T]) -> list[T]:
    """Every element, in order."""
    return list(of(seq))


def takenth(seq: Iterable[T], n: int, default: T | None = None) -> T | None:
    """The element at position n, or default if seq is shorter. Pulls n + 1 elements at most."""
    item = slice(seq, n, n + 1).pull()
    if item is EXHAUSTED:
        return default
    return item.value


def first(seq: Iterable[T], default: T | None = None) -> T | None:
    return takenth(seq, 0, default)


def last(seq: Iterable[T], default: T | None = None) -> T | None:
    """The final element, or default if seq is empty.

    O(length): always walks the whole sequence, even for sized inputs.
    """
    result = default
    for item in of(seq):
        result = item
    return result


def join(seq: Iterable[Any], separator: str = ",") -> str:
    """str() of every element, joined by separator."""
    return separator.join(str(item) for item in of(seq))


def foldl(seq: Iterable[T], fn: Callable[[A, T], A], initial: A) -> A:
    """fn(...fn(fn(initial, x0), x1)..., xn), left to right."""
    acc = initial
    for item in of(seq):
        acc = fn(acc, item)
    return acc


def foldl1(seq: Iterable[T], fn: Callable[[T, T], T]) -> T:
    """foldl seeded with the first element. seq must not be empty."""
    source = of(seq)
    head = source.pull()
    if head is EXHAUSTED:
        raise InvalidArgumentError("foldl1 of an empty sequence")
    return foldl(source, fn, head.value)


def foldr(seq: Iterable[T], fn: Callable[[A, T], A], initial: A) -> A:
    """Like foldl, but over the elements from last to first."""
    return foldl(reversed(to_list(seq)), fn, initial)


def foldr1(seq: Iterable[T], fn: Callable[[T, T], T]) -> T:
    """foldr seeded with the last element. seq must not be empty."""
    items = to_list(seq)
    if not items:
        raise InvalidArgumentError("foldr1 of an empty sequence")
    return foldl(reversed(items[:-1]), fn, items[-1])


def for_each(seq: Iterable[T], fn: Callable[[T], Any]) -> None:
    """Call fn on every element for its side effects."""
    for item in of(seq):
        fn(item)

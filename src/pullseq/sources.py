"""Sequence sources: adapters for Python iterables and a few generators.

of() is the coercion every combinator applies to its inputs, so callers can
pass lists, strings, generators or other PullSequences interchangeably.
"""

from __future__ import annotations

from typing import Iterable, Iterator, TypeVar

from pullseq.errors import InvalidArgumentError
from pullseq.protocol import EXHAUSTED, Pulled, PullSequence, Value

T = TypeVar("T")

_END = object()


class IterSource(PullSequence[T]):
    """Wraps a Python iterator."""

    def __init__(self, iterator: Iterator[T]) -> None:
        super().__init__()
        self._iterator = iterator

    def _advance(self) -> Pulled[T]:
        item = next(self._iterator, _END)
        if item is _END:
            return EXHAUSTED
        return Value(item)

    def _release(self) -> None:
        self._iterator = None


def of(source: Iterable[T]) -> PullSequence[T]:
    """Coerce an iterable into a PullSequence. PullSequences pass through unchanged."""
    if isinstance(source, PullSequence):
        return source
    return IterSource(iter(source))


class Count(PullSequence[int]):
    """Unbounded arithmetic progression."""

    def __init__(self, start: int = 0, step: int = 1) -> None:
        super().__init__()
        self._next = start
        self._step = step

    def _advance(self) -> Pulled[int]:
        current = self._next
        self._next += self._step
        return Value(current)


def count(start: int = 0, step: int = 1) -> Count:
    """start, start + step, start + 2*step, ... forever."""
    return Count(start, step)


class Range(PullSequence[int]):
    """Half-open arithmetic range [start, stop) in steps of step."""

    def __init__(self, start: int, stop: int, step: int = 1) -> None:
        super().__init__()
        if step == 0:
            raise InvalidArgumentError("range step must not be zero")
        self._next = start
        self._stop = stop
        self._step = step

    def _advance(self) -> Pulled[int]:
        current = self._next
        if self._step > 0 and current >= self._stop:
            return EXHAUSTED
        if self._step < 0 and current <= self._stop:
            return EXHAUSTED
        self._next += self._step
        return Value(current)


def range(start: int, stop: int | None = None, step: int = 1) -> Range:
    """range(stop) or range(start, stop[, step]).

    A zero step is rejected here, before anything is pulled.
    """
    if stop is None:
        start, stop = 0, start
    return Range(start, stop, step)


class Repeat(PullSequence[T]):
    def __init__(self, value: T, times: int | None = None) -> None:
        super().__init__()
        if times is not None and times < 0:
            raise InvalidArgumentError(f"repeat times must be >= 0, got {times}")
        self._value = value
        self._remaining = times

    def _advance(self) -> Pulled[T]:
        if self._remaining is not None:
            if self._remaining == 0:
                return EXHAUSTED
            self._remaining -= 1
        return Value(self._value)

    def _release(self) -> None:
        self._value = None


def repeat(value: T, times: int | None = None) -> Repeat[T]:
    """value forever, or exactly `times` times."""
    return Repeat(value, times)

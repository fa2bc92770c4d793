"""Stateless transforms: one pure rule per pull, O(1) extra state.

Each combinator wraps its upstream(s) and propagates exhaustion on the same
pull it sees it. Names deliberately match the builtins they mirror, so
import them by module (`from pullseq import transform`) or through the
package namespace if shadowing the builtins would be confusing.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, TypeVar

from pullseq.protocol import EXHAUSTED, Pulled, PullSequence, Value
from pullseq.sources import of

T = TypeVar("T")
U = TypeVar("U")


class Map(PullSequence[U]):
    def __init__(self, upstream: Iterable[T], fn: Callable[[T], U]) -> None:
        super().__init__()
        self._upstream = of(upstream)
        self._fn = fn

    def _advance(self) -> Pulled[U]:
        item = self._upstream.pull()
        if item is EXHAUSTED:
            return EXHAUSTED
        return Value(self._fn(item.value))

    def _release(self) -> None:
        self._upstream = None


def map(seq: Iterable[T], fn: Callable[[T], U]) -> Map[U]:
    """Apply fn to every element."""
    return Map(seq, fn)


class StarMap(PullSequence[U]):
    def __init__(self, upstream: Iterable[Iterable[Any]], fn: Callable[..., U]) -> None:
        super().__init__()
        self._upstream = of(upstream)
        self._fn = fn

    def _advance(self) -> Pulled[U]:
        item = self._upstream.pull()
        if item is EXHAUSTED:
            return EXHAUSTED
        return Value(self._fn(*item.value))

    def _release(self) -> None:
        self._upstream = None


def starmap(seq: Iterable[Iterable[Any]], fn: Callable[..., U]) -> StarMap[U]:
    """Apply fn to each element unpacked as positional arguments."""
    return StarMap(seq, fn)


class Filter(PullSequence[T]):
    """Keeps elements whose predicate result equals `keep`."""

    def __init__(self, upstream: Iterable[T], pred: Callable[[T], Any], keep: bool = True) -> None:
        super().__init__()
        self._upstream = of(upstream)
        self._pred = pred
        self._keep = keep

    def _advance(self) -> Pulled[T]:
        while True:
            item = self._upstream.pull()
            if item is EXHAUSTED:
                return EXHAUSTED
            if bool(self._pred(item.value)) is self._keep:
                return item

    def _release(self) -> None:
        self._upstream = None


def filter(seq: Iterable[T], pred: Callable[[T], Any]) -> Filter[T]:
    """Only elements for which pred is truthy."""
    return Filter(seq, pred, keep=True)


def filterfalse(seq: Iterable[T], pred: Callable[[T], Any]) -> Filter[T]:
    """Only elements for which pred is falsy."""
    return Filter(seq, pred, keep=False)


class DropWhile(PullSequence[T]):
    def __init__(self, upstream: Iterable[T], pred: Callable[[T], Any]) -> None:
        super().__init__()
        self._upstream = of(upstream)
        self._pred = pred
        self._dropping = True

    def _advance(self) -> Pulled[T]:
        while True:
            item = self._upstream.pull()
            if item is EXHAUSTED:
                return EXHAUSTED
            if not self._dropping:
                return item
            if not self._pred(item.value):
                self._dropping = False
                return item

    def _release(self) -> None:
        self._upstream = None


def dropwhile(seq: Iterable[T], pred: Callable[[T], Any]) -> DropWhile[T]:
    """Skip elements while pred holds, then pass everything, including the first failure.

    pred is not called again once it has returned false.
    """
    return DropWhile(seq, pred)


class TakeWhile(PullSequence[T]):
    def __init__(self, upstream: Iterable[T], pred: Callable[[T], Any]) -> None:
        super().__init__()
        self._upstream = of(upstream)
        self._pred = pred

    def _advance(self) -> Pulled[T]:
        item = self._upstream.pull()
        if item is EXHAUSTED or not self._pred(item.value):
            return EXHAUSTED
        return item

    def _release(self) -> None:
        self._upstream = None


def takewhile(seq: Iterable[T], pred: Callable[[T], Any]) -> TakeWhile[T]:
    """Elements while pred holds; stops for good at the first failure."""
    return TakeWhile(seq, pred)


class Chain(PullSequence[T]):
    """Concatenation. Inputs are coerced only when they are reached."""

    def __init__(self, inputs: Iterable[Iterable[T]]) -> None:
        super().__init__()
        self._inputs = of(inputs)
        self._current: PullSequence[T] | None = None

    def _advance(self) -> Pulled[T]:
        while True:
            if self._current is None:
                nxt = self._inputs.pull()
                if nxt is EXHAUSTED:
                    return EXHAUSTED
                self._current = of(nxt.value)
            item = self._current.pull()
            if item is not EXHAUSTED:
                return item
            self._current = None

    def _release(self) -> None:
        self._inputs = None
        self._current = None


def chain(*seqs: Iterable[T]) -> Chain[T]:
    """All of seqs[0], then all of seqs[1], and so on."""
    return Chain(seqs)


class Zip(PullSequence[tuple]):
    """Tuples of one element per input, stopping at the shortest input.

    Inputs are pulled left to right. When one runs dry, whatever was already
    pulled from the inputs to its left for that step is dropped.
    """

    def __init__(self, inputs: Iterable[Iterable[Any]]) -> None:
        super().__init__()
        self._inputs = [of(seq) for seq in inputs]

    def _advance(self) -> Pulled[tuple]:
        if not self._inputs:
            return EXHAUSTED
        row = []
        for seq in self._inputs:
            item = seq.pull()
            if item is EXHAUSTED:
                return EXHAUSTED
            row.append(item.value)
        return Value(tuple(row))

    def _release(self) -> None:
        self._inputs = []


def zip(*seqs: Iterable[Any]) -> Zip:
    return Zip(seqs)


class Enumerate(PullSequence[tuple]):
    def __init__(self, upstream: Iterable[T], start: int = 0) -> None:
        super().__init__()
        self._upstream = of(upstream)
        self._index = start

    def _advance(self) -> Pulled[tuple]:
        item = self._upstream.pull()
        if item is EXHAUSTED:
            return EXHAUSTED
        index = self._index
        self._index += 1
        return Value((index, item.value))

    def _release(self) -> None:
        self._upstream = None


def enumerate(seq: Iterable[T], start: int = 0) -> Enumerate:
    """(index, element) pairs, counting from start."""
    return Enumerate(seq, start)


class Weave(PullSequence[T]):
    """Round-robin over the inputs, one element from each in turn."""

    def __init__(self, inputs: Iterable[Iterable[T]]) -> None:
        super().__init__()
        self._inputs = [of(seq) for seq in inputs]
        self._turn = 0

    def _advance(self) -> Pulled[T]:
        if not self._inputs:
            return EXHAUSTED
        item = self._inputs[self._turn].pull()
        if item is EXHAUSTED:
            return EXHAUSTED
        self._turn = (self._turn + 1) % len(self._inputs)
        return item

    def _release(self) -> None:
        self._inputs = []


def weave(*seqs: Iterable[T]) -> Weave[T]:
    """a0, b0, c0, a1, b1, c1, ... Ends when the input whose turn it is runs dry."""
    return Weave(seqs)

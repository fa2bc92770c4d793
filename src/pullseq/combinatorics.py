"""Combinatorial generators over a materialized pool.

Each generator drains its (finite) source into a tuple on the first pull,
then enumerates results lazily by index arithmetic; no result is computed
before it is requested. Out-of-range requests (r larger than the pool) give
an empty sequence, not an error.

Cardinalities, for a pool of size n:
    permutations(pool, r)                   n! / (n - r)!
    combinations(pool, r)                   C(n, r)
    combinations_with_replacement(pool, r)  C(n + r - 1, r)
    product(p1, ..., pk)                    len(p1) * ... * len(pk)
"""

from __future__ import annotations

import logging
from typing import Iterable, TypeVar

from pullseq._state import CombinationState, PermutationState, ProductState
from pullseq.errors import InvalidArgumentError
from pullseq.protocol import EXHAUSTED, Pulled, PullSequence, Value

T = TypeVar("T")

logger = logging.getLogger("pullseq.combinatorics")


def _materialize(seq: Iterable[T], name: str) -> tuple:
    pool = tuple(seq)
    logger.debug("%s: materialized pool of %d elements", name, len(pool))
    return pool


def _check_r(r: int | None) -> None:
    if r is not None and r < 0:
        raise InvalidArgumentError(f"r must be non-negative, got {r}")


# ─── permutations ────────────────────────────────────────────────────────────


class Permutations(PullSequence[tuple]):
    """r-length orderings of the pool, in lexicographic order of positions."""

    def __init__(self, seq: Iterable[T], r: int | None = None) -> None:
        super().__init__()
        _check_r(r)
        self._seq = seq
        self._r = r
        self._pool: tuple | None = None
        self._state: PermutationState | None = None

    def _start(self) -> bool:
        self._pool = _materialize(self._seq, "permutations")
        self._seq = None
        n = len(self._pool)
        r = n if self._r is None else self._r
        if r > n:
            return False
        self._state = PermutationState(
            indices=list(range(n)),
            cycles=list(range(n, n - r, -1)),
            r=r,
        )
        return True

    def _advance(self) -> Pulled[tuple]:
        if self._state is None and not self._start():
            return EXHAUSTED
        state = self._state
        if state.started and not self._step(state):
            return EXHAUSTED
        state.started = True
        pool = self._pool
        return Value(tuple(pool[i] for i in state.indices[: state.r]))

    def _step(self, state: PermutationState) -> bool:
        """Move indices to the next permutation. False when the last one was emitted."""
        indices, cycles = state.indices, state.cycles
        n = len(indices)
        for i in reversed(range(state.r)):
            cycles[i] -= 1
            if cycles[i] == 0:
                # Rotate indices[i:] left by one and reset this position's countdown.
                indices[i:] = indices[i + 1 :] + indices[i : i + 1]
                cycles[i] = n - i
            else:
                j = n - cycles[i]
                indices[i], indices[j] = indices[j], indices[i]
                return True
        return False

    def _release(self) -> None:
        self._seq = None
        self._pool = None
        self._state = None


def permutations(seq: Iterable[T], r: int | None = None) -> Permutations:
    """Successive r-length permutations of seq's elements (r defaults to len(seq)).

    permutations([1, 2, 3], 2) -> (1, 2) (1, 3) (2, 1) (2, 3) (3, 1) (3, 2)
    """
    return Permutations(seq, r)


# ─── combinations ────────────────────────────────────────────────────────────


class Combinations(PullSequence[tuple]):
    """r-length selections in lexicographic order of index tuples.

    Indices are strictly increasing, or non-decreasing when elements may
    be repeated.
    """

    def __init__(self, seq: Iterable[T], r: int | None, replacement: bool = False) -> None:
        super().__init__()
        _check_r(r)
        self._seq = seq
        self._r = r
        self._replacement = replacement
        self._pool: tuple | None = None
        self._state: CombinationState | None = None

    def _start(self) -> bool:
        name = "combinations_with_replacement" if self._replacement else "combinations"
        self._pool = _materialize(self._seq, name)
        self._seq = None
        n = len(self._pool)
        r = n if self._r is None else self._r
        if self._replacement:
            if n == 0 and r > 0:
                return False
            indices = [0] * r
        else:
            if r > n:
                return False
            indices = list(range(r))
        self._state = CombinationState(indices=indices, r=r, replacement=self._replacement)
        return True

    def _advance(self) -> Pulled[tuple]:
        if self._state is None and not self._start():
            return EXHAUSTED
        state = self._state
        if state.started and not self._step(state):
            return EXHAUSTED
        state.started = True
        pool = self._pool
        return Value(tuple(pool[i] for i in state.indices))

    def _step(self, state: CombinationState) -> bool:
        indices, r = state.indices, state.r
        n = len(self._pool)
        # Rightmost index that has not reached its ceiling.
        i = r - 1
        while i >= 0 and indices[i] == self._ceiling(state, i, n):
            i -= 1
        if i < 0:
            return False
        indices[i] += 1
        for j in range(i + 1, r):
            indices[j] = indices[j - 1] if state.replacement else indices[j - 1] + 1
        return True

    @staticmethod
    def _ceiling(state: CombinationState, i: int, n: int) -> int:
        if state.replacement:
            return n - 1
        return i + n - state.r

    def _release(self) -> None:
        self._seq = None
        self._pool = None
        self._state = None


def combinations(seq: Iterable[T], r: int | None = None) -> Combinations:
    """r-length subsequences of seq, no element repeated (r defaults to len(seq)).

    combinations([1, 2, 3, 4], 2) -> (1, 2) (1, 3) (1, 4) (2, 3) (2, 4) (3, 4)
    """
    return Combinations(seq, r)


def combinations_with_replacement(seq: Iterable[T], r: int) -> Combinations:
    """r-length subsequences of seq where an element may repeat.

    combinations_with_replacement("ABC", 2) -> AA AB AC BB BC CC
    """
    return Combinations(seq, r, replacement=True)


# ─── product ─────────────────────────────────────────────────────────────────


class Product(PullSequence[tuple]):
    """Cartesian product, odometer style: the rightmost pool turns fastest."""

    def __init__(self, seqs: tuple[Iterable, ...], repeat: int = 1) -> None:
        super().__init__()
        if repeat < 0:
            raise InvalidArgumentError(f"repeat must be non-negative, got {repeat}")
        self._seqs = seqs
        self._repeat = repeat
        self._state: ProductState | None = None

    def _start(self) -> bool:
        pools = [_materialize(seq, "product") for seq in self._seqs] * self._repeat
        self._seqs = None
        if any(len(pool) == 0 for pool in pools):
            return False
        self._state = ProductState(pools=pools, indices=[0] * len(pools))
        return True

    def _advance(self) -> Pulled[tuple]:
        if self._state is None and not self._start():
            return EXHAUSTED
        state = self._state
        if state.started and not self._step(state):
            return EXHAUSTED
        state.started = True
        return Value(tuple(pool[i] for pool, i in zip(state.pools, state.indices)))

    @staticmethod
    def _step(state: ProductState) -> bool:
        for k in reversed(range(len(state.pools))):
            state.indices[k] += 1
            if state.indices[k] < len(state.pools[k]):
                return True
            state.indices[k] = 0
        return False

    def _release(self) -> None:
        self._seqs = None
        self._state = None


def product(*seqs: Iterable, repeat: int = 1) -> Product:
    """Cartesian product of seqs, like nested for loops with the last seq innermost.

    repeat=k repeats the whole list of seqs k times: product(a, repeat=2) is
    product(a, a). With no seqs the product is a single empty tuple.
    """
    return Product(seqs, repeat)

"""Stateful combinators that hold buffers: cycle, tee, slice/take, flatten.

cycle keeps a copy of every element until its source runs dry, then replays
the copy forever. tee fans one upstream out to n branches through per-branch
FIFOs. Both buffers grow without bound when misused (an infinite source for
cycle, an abandoned branch for tee); crossing the configured threshold in
pullseq.config logs one warning per buffer.
"""

from __future__ import annotations

import logging
import weakref
from collections import deque
from typing import Iterable, TypeVar

from pullseq import config
from pullseq._state import CycleCache, TeeBuffer
from pullseq.errors import InvalidArgumentError
from pullseq.protocol import EXHAUSTED, Pulled, PullSequence, Value
from pullseq.sources import Count, Range, of
from pullseq.transform import Chain

T = TypeVar("T")

logger = logging.getLogger("pullseq.buffering")


def _over_threshold(size: int) -> bool:
    limit = config.get_buffer_warning()
    return limit is not None and size >= limit


# ─── cycle ───────────────────────────────────────────────────────────────────


class Cycle(PullSequence[T]):
    """Pass the source through while saving it, then replay the saved copy forever."""

    def __init__(self, upstream: Iterable[T]) -> None:
        super().__init__()
        self._upstream = of(upstream)
        self._cache = CycleCache()

    def _advance(self) -> Pulled[T]:
        cache = self._cache
        if not cache.replaying:
            item = self._upstream.pull()
            if item is not EXHAUSTED:
                cache.saved.append(item.value)
                if not cache.warned and _over_threshold(len(cache.saved)):
                    cache.warned = True
                    logger.warning(
                        "cycle cache holds %d elements and the source is still running",
                        len(cache.saved),
                    )
                return item
            if not cache.saved:
                return EXHAUSTED
            cache.replaying = True
            self._upstream = None
            logger.debug("cycle source exhausted; replaying %d cached elements", len(cache.saved))

        value = cache.saved[cache.index]
        cache.index = (cache.index + 1) % len(cache.saved)
        return Value(value)

    def _release(self) -> None:
        self._upstream = None
        self._cache = None


def cycle(seq: Iterable[T]) -> Cycle[T]:
    """seq's elements, then the same elements again, indefinitely.

    seq must be finite: replay starts only once it is exhausted. An empty
    seq gives an empty cycle.
    """
    return Cycle(seq)


# ─── tee ─────────────────────────────────────────────────────────────────────


class TeeBranch(PullSequence[T]):
    """One of the branches returned by tee(). Owns its queue inside the shared buffer."""

    def __init__(self, buffer: TeeBuffer, queue: deque) -> None:
        super().__init__()
        self._buffer = buffer
        self._queue = queue
        self._finalizer = weakref.finalize(self, _detach, buffer, queue)

    def _advance(self) -> Pulled[T]:
        if self._queue:
            return Value(self._queue.popleft())
        buffer = self._buffer
        if buffer.exhausted:
            return EXHAUSTED
        try:
            item = buffer.upstream.pull()
        except Exception:
            # Siblings drain what is queued, then report exhaustion.
            buffer.exhausted = True
            raise
        if item is EXHAUSTED:
            buffer.exhausted = True
            return EXHAUSTED
        for queue in buffer.queues:
            queue.append(item.value)
        limit = config.get_buffer_warning()
        if limit is not None and not buffer.warned:
            longest = max(len(q) for q in buffer.queues)
            if longest >= limit:
                buffer.warned = True
                logger.warning(
                    "tee buffer holds %d unconsumed elements; a branch is falling behind",
                    longest,
                )
        return Value(self._queue.popleft())

    def _release(self) -> None:
        # Runs _detach now; the finalizer never fires twice.
        self._finalizer()
        self._buffer = None
        self._queue = None


def _detach(buffer: TeeBuffer, queue: deque) -> None:
    """Stop feeding a queue whose branch is exhausted or gone."""
    buffer.queues = [q for q in buffer.queues if q is not queue]
    queue.clear()


def tee(seq: Iterable[T], n: int = 2) -> tuple[TeeBranch[T], ...]:
    """Split seq into n independent branches.

    seq is pulled at most once per element; each branch sees every element
    in order. Elements one branch has pulled and another has not are held
    in memory, so drain the branches at comparable rates. A branch that is
    garbage-collected stops receiving elements.

    Hand seq over completely: pulling it directly after tee() would skip
    elements in every branch.
    """
    if n < 0:
        raise InvalidArgumentError(f"tee n must be >= 0, got {n}")
    buffer = TeeBuffer(upstream=of(seq))
    branches = []
    for _ in range(n):
        queue: deque = deque()
        buffer.queues.append(queue)
        branches.append(TeeBranch(buffer, queue))
    return tuple(branches)


# ─── slice / take ────────────────────────────────────────────────────────────


class Slice(PullSequence[T]):
    """Elements whose position is produced by a Range of target indices.

    Every element up to the last selected one is pulled, selected or not,
    so upstream side effects happen in order. Nothing beyond the last
    selected index is pulled.
    """

    def __init__(self, upstream: Iterable[T], start: int, stop: int | None, step: int) -> None:
        super().__init__()
        self._upstream = of(upstream)
        self._targets: PullSequence[int] = (
            Range(start, stop, step) if stop is not None else Count(start, step)
        )
        self._position = -1

    def _advance(self) -> Pulled[T]:
        target = self._targets.pull()
        if target is EXHAUSTED:
            return EXHAUSTED
        while True:
            item = self._upstream.pull()
            if item is EXHAUSTED:
                return EXHAUSTED
            self._position += 1
            if self._position == target.value:
                return item

    def _release(self) -> None:
        self._upstream = None
        self._targets = None


def slice(seq: Iterable[T], *args: int | None) -> Slice[T]:
    """slice(seq, stop), slice(seq, start, stop) or slice(seq, start, stop, step).

    stop may be None for no upper bound. Indices must be non-negative and
    step positive; anything else is rejected before pulling starts.
    """
    if len(args) == 1:
        start, stop, step = 0, args[0], 1
    elif len(args) == 2:
        start, stop, step = args[0], args[1], 1
    elif len(args) == 3:
        start, stop, step = args
    else:
        raise InvalidArgumentError(f"slice takes 1 to 3 bounds, got {len(args)}")
    start = 0 if start is None else start
    step = 1 if step is None else step
    if step <= 0:
        raise InvalidArgumentError(f"slice step must be positive, got {step}")
    if start < 0 or (stop is not None and stop < 0):
        raise InvalidArgumentError("slice indices must be non-negative")
    return Slice(seq, start, stop, step)


def take(seq: Iterable[T], n: int) -> Slice[T]:
    """The first n elements."""
    return slice(seq, n)


# ─── flatten ─────────────────────────────────────────────────────────────────


def flatten(seqs: Iterable[Iterable[T]]) -> Chain[T]:
    """Remove one level of nesting: each element of seqs is itself iterated."""
    return Chain(seqs)

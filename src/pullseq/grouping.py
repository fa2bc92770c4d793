"""group_by and the run-length helpers built on it (compress, pack).

group_by yields (key, subgroup) pairs for each run of consecutive elements
sharing a key. All subgroups read through one GroupCursor owned by the
parent, so nothing is buffered per group: asking the parent for the next
pair skips whatever the current subgroup has not yet yielded.

A subgroup holds the cursor plus the generation it was issued under. Every
pull checks that generation is still current; a subgroup the parent has
moved past raises StaleGroupError instead of quietly returning elements that
belong to a later group. Dropping the parent does not invalidate the
subgroup it last handed out.
"""

from __future__ import annotations

import logging
from operator import itemgetter
from typing import Any, Callable, Iterable, TypeVar

from pullseq._state import NOTHING, GroupCursor
from pullseq.errors import StaleGroupError
from pullseq.protocol import EXHAUSTED, Pulled, PullSequence, Value
from pullseq.sources import of
from pullseq.transform import Map

T = TypeVar("T")

logger = logging.getLogger("pullseq.grouping")


def _identity(x: Any) -> Any:
    return x


def _same_key(a: Any, b: Any) -> bool:
    return a is b or a == b


def _step(cursor: GroupCursor) -> bool:
    """Pull one element into the cursor. False once upstream is exhausted."""
    if cursor.exhausted:
        return False
    try:
        item = cursor.upstream.pull()
        if item is EXHAUSTED:
            cursor.exhausted = True
            return False
        cursor.current_value = item.value
        cursor.current_key = cursor.key_fn(item.value)
    except Exception:
        # The parent and every subgroup share this cursor; none of them may read it again.
        cursor.exhausted = True
        cursor.generation += 1
        raise
    return True


class GroupBy(PullSequence[tuple]):
    """Parent sequence of (key, Subgroup) pairs. Owns the GroupCursor."""

    def __init__(self, upstream: Iterable[T], key_fn: Callable[[T], Any] | None = None) -> None:
        super().__init__()
        self._cursor = GroupCursor(upstream=of(upstream), key_fn=key_fn or _identity)

    def _advance(self) -> Pulled[tuple]:
        cursor = self._cursor
        while _same_key(cursor.current_key, cursor.target_key):
            if not _step(cursor):
                # Outstanding subgroups must not keep reading a finished cursor.
                cursor.generation += 1
                return EXHAUSTED
        cursor.target_key = cursor.current_key
        cursor.generation += 1
        return Value((cursor.target_key, Subgroup(cursor, cursor.target_key, cursor.generation)))

    def _release(self) -> None:
        self._cursor = None


class Subgroup(PullSequence[T]):
    """Elements of one run, read through the parent's cursor.

    Valid only until the parent hands out its next pair (or reports
    exhaustion, or a pull through the shared cursor raises). A subgroup that has already reported exhaustion keeps
    doing so; one that has not raises StaleGroupError on every pull.
    """

    def __init__(self, cursor: GroupCursor, key: Any, generation: int) -> None:
        super().__init__()
        self.key = key
        self._cursor = cursor
        self._generation = generation
        self._started = False

    def pull(self) -> Pulled[T]:
        if not self._exhausted:
            self._check_current()
        return super().pull()

    def _check_current(self) -> None:
        if self._cursor.generation != self._generation:
            logger.debug("stale subgroup pulled for key %r", self.key)
            raise StaleGroupError(
                f"subgroup for key {self.key!r} was pulled after group_by moved past it",
                key=self.key,
            )

    def _advance(self) -> Pulled[T]:
        cursor = self._cursor
        # The first pull yields the element the parent already looked at.
        if self._started and not _step(cursor):
            return EXHAUSTED
        self._started = True
        if not _same_key(cursor.current_key, self.key):
            return EXHAUSTED
        return Value(cursor.current_value)

    def _release(self) -> None:
        self._cursor = None

    def __repr__(self) -> str:
        state = "exhausted" if self._exhausted else "active"
        return f"Subgroup(key={self.key!r}, {state})"


def group_by(seq: Iterable[T], key_fn: Callable[[T], Any] | None = None) -> GroupBy:
    """(key, subgroup) for each run of consecutive elements with equal keys.

    key_fn defaults to the identity. Drain each subgroup before asking for
    the next pair if its elements are needed; the parent does not keep them.

    Usage:
        for key, run in group_by("aaabcc"):
            print(key, to_list(run))
        # a ['a', 'a', 'a']
        # b ['b']
        # c ['c', 'c']
    """
    return GroupBy(seq, key_fn)


def compress(seq: Iterable[T], key_fn: Callable[[T], Any] | None = None) -> Map:
    """One key per run: consecutive duplicates collapsed, order kept."""
    return Map(GroupBy(seq, key_fn), itemgetter(0))


def _drain_run(pair: tuple) -> list:
    return list(pair[1])


def pack(seq: Iterable[T], key_fn: Callable[[T], Any] | None = None) -> Map:
    """Each run materialized as a list, drained before the next run starts."""
    return Map(GroupBy(seq, key_fn), _drain_run)

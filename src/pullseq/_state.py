"""State records for the stateful combinators.

Plain data, no behavior: the combinator classes in buffering, grouping and
combinatorics own these records and drive them. Keeping the records separate
makes each invariant visible in one place.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from pullseq.protocol import PullSequence

# Marks "no key / no value yet" in a GroupCursor. Never equal to a real key.
NOTHING: Any = object()


@dataclass(eq=False)
class CycleCache:
    """Elements seen so far by cycle(), replayed once the source runs dry."""

    saved: list = field(default_factory=list)
    index: int = 0
    replaying: bool = False
    warned: bool = False


@dataclass(eq=False)
class TeeBuffer:
    """One upstream, one FIFO per live branch.

    Invariant: a queue holds exactly the elements some branch has already
    pulled from upstream that its own branch has not consumed yet. The
    upstream is pulled at most once per element.
    """

    upstream: PullSequence
    queues: list[deque] = field(default_factory=list)
    exhausted: bool = False
    warned: bool = False


@dataclass(eq=False)
class GroupCursor:
    """The single shared cursor of one group_by call.

    generation counts how many groups the parent has handed out. A subgroup
    remembers the generation it was issued under; once the counter moves on,
    that subgroup is stale.
    """

    upstream: PullSequence
    key_fn: Callable[[Any], Any]
    current_key: Any = NOTHING
    current_value: Any = NOTHING
    target_key: Any = NOTHING
    generation: int = 0
    exhausted: bool = False


@dataclass(eq=False)
class PermutationState:
    """indices is a permutation of range(n); indices[:r] is the current output.

    cycles[i] counts down the swaps left at position i before it rotates.
    """

    indices: list[int]
    cycles: list[int]
    r: int
    started: bool = False


@dataclass(eq=False)
class CombinationState:
    """indices is strictly increasing (non-decreasing with replacement)."""

    indices: list[int]
    r: int
    replacement: bool = False
    started: bool = False


@dataclass(eq=False)
class ProductState:
    """One index per pool; the rightmost index moves fastest."""

    pools: list[tuple]
    indices: list[int]
    started: bool = False

"""Pull sequence protocol: the contract every combinator consumes and produces.

A pull returns either Value(x) or the EXHAUSTED singleton. The two never
overlap: Value(None) is a perfectly good element. Exhaustion is terminal;
once a sequence has reported it, every later pull reports it again without
touching any upstream.

Python's own iteration protocol sits on top: __next__ unwraps the Value or
raises StopIteration, so every PullSequence works in a for loop, list(),
and anything else that takes an iterator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Value(Generic[T]):
    """A successfully pulled element."""

    value: T


class Exhausted:
    """Type of the EXHAUSTED singleton."""

    __slots__ = ()
    _instance: Exhausted | None = None

    def __new__(cls) -> Exhausted:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "EXHAUSTED"


EXHAUSTED = Exhausted()

Pulled = Union[Value[T], Exhausted]


class PullSequence(Generic[T]):
    """Base for every pull-based sequence.

    Subclasses implement _advance(), which computes the next result from the
    combinator's own state. pull() wraps it to enforce terminality: after
    _advance() reports exhaustion, or raises, it is never called again.
    """

    def __init__(self) -> None:
        self._exhausted = False

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def pull(self) -> Pulled[T]:
        """Return the next element as Value, or EXHAUSTED."""
        if self._exhausted:
            return EXHAUSTED
        try:
            result = self._advance()
        except Exception:
            # A failed callback leaves the chain unusable, like a generator that raised.
            self._finish()
            raise
        if result is EXHAUSTED:
            self._finish()
        return result

    def _advance(self) -> Pulled[T]:
        raise NotImplementedError

    def _finish(self) -> None:
        """Mark exhausted and drop references to upstream state."""
        self._exhausted = True
        self._release()

    def _release(self) -> None:
        """Hook: let go of buffers or upstreams once exhausted. Default: nothing."""

    def __iter__(self) -> PullSequence[T]:
        return self

    def __next__(self) -> T:
        result = self.pull()
        if result is EXHAUSTED:
            raise StopIteration
        return result.value

    def __repr__(self) -> str:
        state = "exhausted" if self._exhausted else "active"
        return f"{type(self).__name__}({state})"

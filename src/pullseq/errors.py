"""Error types raised by pullseq combinators.

Exhaustion is not here: running out of elements is an ordinary pull result
(see protocol.EXHAUSTED), never an exception.
"""

from __future__ import annotations


class PullSeqError(Exception):
    """Base class for every error pullseq raises on its own behalf."""


class InvalidArgumentError(PullSeqError, ValueError):
    """A combinator was built with arguments it cannot honor.

    Raised at construction time, before anything is pulled.
    """


class StaleGroupError(PullSeqError, RuntimeError):
    """A group_by subgroup was pulled after its parent moved to a later group.

    The elements the subgroup never yielded were consumed by the parent and
    cannot be recovered.
    """

    def __init__(self, message: str, key: object) -> None:
        self.key = key
        super().__init__(message)

    def __repr__(self) -> str:
        return f"StaleGroupError({super().__repr__()}, key={self.key!r})"

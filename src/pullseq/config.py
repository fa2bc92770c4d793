"""Library-wide settings.

Only one knob today: the size at which a growing buffer (a tee queue or a
cycle cache) logs a warning. Buffers are never capped; the warning exists so
a forgotten tee branch or a cycle over a huge source shows up in logs before
it shows up as memory pressure.
"""

from __future__ import annotations

from contextlib import contextmanager

from pullseq.errors import InvalidArgumentError

DEFAULT_BUFFER_WARNING = 10_000

_buffer_warning: int | None = DEFAULT_BUFFER_WARNING


def set_buffer_warning(size: int | None) -> None:
    """Set the buffer length that triggers a growth warning. None disables it."""
    global _buffer_warning
    if size is not None and size <= 0:
        raise InvalidArgumentError(f"buffer warning size must be positive, got {size}")
    _buffer_warning = size


def get_buffer_warning() -> int | None:
    return _buffer_warning


@contextmanager
def buffer_warning(size: int | None):
    """Context manager: use a different warning threshold inside the block.

    Usage:
        with buffer_warning(100):
            a, b = tee(source)
            ...
    """
    previous = _buffer_warning
    set_buffer_warning(size)
    try:
        yield
    finally:
        set_buffer_warning(previous)

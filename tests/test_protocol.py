"""Tests for the pull protocol: Value / EXHAUSTED and PullSequence terminality."""

import pytest

from pullseq import EXHAUSTED, PullSequence, Value, map, of


class _Boom(PullSequence):
    """Yields 1, then raises from the second pull on."""

    def __init__(self):
        super().__init__()
        self.calls = 0

    def _advance(self):
        self.calls += 1
        if self.calls == 1:
            return Value(1)
        raise RuntimeError("boom")


class TestPullResult:
    def test_none_is_a_value_not_exhaustion(self):
        seq = of([None, 0, ""])
        assert seq.pull() == Value(None)
        assert seq.pull() == Value(0)
        assert seq.pull() == Value("")
        assert seq.pull() is EXHAUSTED

    def test_exhausted_is_falsy_singleton(self):
        assert not EXHAUSTED
        assert repr(EXHAUSTED) == "EXHAUSTED"
        assert type(EXHAUSTED)() is EXHAUSTED

    def test_value_truthy_even_for_falsy_payload(self):
        assert Value(0)


class TestPullSequence:
    def test_exhaustion_is_terminal(self):
        seq = of([1])
        assert seq.pull() == Value(1)
        assert seq.pull() is EXHAUSTED
        assert seq.exhausted
        assert seq.pull() is EXHAUSTED

    def test_python_iteration(self):
        assert list(of("abc")) == ["a", "b", "c"]

    def test_next_raises_stop_iteration_at_end(self):
        seq = of([1])
        assert next(seq) == 1
        with pytest.raises(StopIteration):
            next(seq)

    def test_of_passes_pull_sequences_through(self):
        seq = of([1, 2])
        assert of(seq) is seq

    def test_of_rejects_non_iterables(self):
        with pytest.raises(TypeError):
            of(42)

    def test_callback_error_leaves_sequence_terminal(self):
        boom = _Boom()
        assert boom.pull() == Value(1)
        with pytest.raises(RuntimeError, match="boom"):
            boom.pull()
        assert boom.exhausted
        assert boom.pull() is EXHAUSTED
        assert boom.calls == 2

    def test_error_propagates_through_wrappers(self):
        def explode(x):
            raise ValueError(f"bad {x}")

        seq = map(map([1, 2], lambda x: x + 1), explode)
        with pytest.raises(ValueError, match="bad 2"):
            seq.pull()
        assert seq.pull() is EXHAUSTED

    def test_repr(self):
        seq = of([])
        assert repr(seq) == "IterSource(active)"
        seq.pull()
        assert repr(seq) == "IterSource(exhausted)"

    def test_advance_must_be_implemented(self):
        with pytest.raises(NotImplementedError):
            PullSequence().pull()

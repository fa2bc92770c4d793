"""Tests for group_by and its derivatives compress and pack."""

import logging

import pytest

from pullseq import (
    EXHAUSTED,
    StaleGroupError,
    Value,
    compress,
    first,
    group_by,
    map,
    pack,
    to_list,
)


class TestGroupBy:
    def test_runs_drained_in_order(self):
        keys, lengths = [], []
        for key, run in group_by("aaabbbcddddaa"):
            keys.append(key)
            lengths.append(len(to_list(run)))
        assert keys == ["a", "b", "c", "d", "a"]
        assert lengths == [3, 3, 1, 4, 2]

    def test_key_function(self):
        groups = [(k, to_list(g)) for k, g in group_by([1, 3, 2, 4, 5], lambda x: x % 2)]
        assert groups == [(1, [1, 3]), (0, [2, 4]), (1, [5])]

    def test_empty_source(self):
        assert group_by([]).pull() is EXHAUSTED

    def test_skipping_a_subgroup_loses_its_elements(self):
        parent = group_by("aaabb")
        key_a, _ = next(parent)
        key_b, run_b = next(parent)
        assert (key_a, key_b) == ("a", "b")
        assert to_list(run_b) == ["b", "b"]

    def test_partially_drained_subgroup_skipped(self):
        parent = group_by("aaab")
        _, run_a = next(parent)
        assert next(run_a) == "a"
        key, run_b = next(parent)
        assert key == "b"
        assert to_list(run_b) == ["b"]

    def test_none_elements_are_values(self):
        parent = group_by([None, None, 1])
        key, run = next(parent)
        assert key is None
        assert run.pull() == Value(None)
        assert run.pull() == Value(None)
        assert run.pull() is EXHAUSTED

    def test_key_function_called_once_per_element(self):
        seen = []

        def key(x):
            seen.append(x)
            return x

        for _, run in group_by("aab", key):
            to_list(run)
        assert seen == ["a", "a", "b"]

    def test_subgroup_repr_names_key(self):
        _, run = next(group_by("a"))
        assert repr(run) == "Subgroup(key='a', active)"

    def test_subgroup_survives_dropped_parent(self):
        key, run = next(group_by("aab"))
        assert key == "a"
        assert to_list(run) == ["a", "a"]

    def test_subgroup_from_first_is_readable(self):
        key, run = first(group_by("aab"))
        assert key == "a"
        assert to_list(run) == ["a", "a"]


class TestStaleSubgroup:
    def test_pulling_superseded_subgroup_raises(self):
        parent = group_by("aaabbb")
        _, run_a = next(parent)
        next(parent)
        with pytest.raises(StaleGroupError) as excinfo:
            run_a.pull()
        assert excinfo.value.key == "a"

    def test_stale_error_repeats(self):
        parent = group_by("ab")
        _, run_a = next(parent)
        next(parent)
        for _ in "xx":
            with pytest.raises(StaleGroupError):
                next(run_a)

    def test_stale_after_partial_drain(self):
        parent = group_by("aaab")
        _, run_a = next(parent)
        next(run_a)
        next(parent)
        with pytest.raises(StaleGroupError):
            run_a.pull()

    def test_stale_when_parent_reaches_end(self):
        parent = group_by("aa")
        _, run_a = next(parent)
        assert parent.pull() is EXHAUSTED
        with pytest.raises(StaleGroupError):
            run_a.pull()

    def test_drained_subgroup_keeps_reporting_exhaustion(self):
        parent = group_by("aab")
        _, run_a = next(parent)
        assert to_list(run_a) == ["a", "a"]
        next(parent)
        assert run_a.pull() is EXHAUSTED

    def test_stale_error_is_a_runtime_error(self):
        parent = group_by("ab")
        _, run_a = next(parent)
        next(parent)
        with pytest.raises(RuntimeError):
            run_a.pull()

    def test_stale_pull_logged(self, caplog):
        parent = group_by("ab")
        _, run_a = next(parent)
        next(parent)
        with caplog.at_level(logging.DEBUG, logger="pullseq.grouping"):
            with pytest.raises(StaleGroupError):
                run_a.pull()
        assert "stale subgroup pulled for key 'a'" in caplog.text


class TestCallbackErrors:
    @staticmethod
    def _fails_on(bad, calls):
        def key(x):
            calls.append(x)
            if x == bad:
                raise ValueError(f"bad key {x!r}")
            return x

        return key

    def test_key_error_in_parent_pull_propagates(self):
        calls = []
        parent = group_by("ab", self._fails_on("b", calls))
        next(parent)
        with pytest.raises(ValueError, match="bad key 'b'"):
            parent.pull()
        assert parent.pull() is EXHAUSTED
        assert calls == ["a", "b"]

    def test_key_error_on_first_element(self):
        parent = group_by("b", self._fails_on("b", []))
        with pytest.raises(ValueError):
            parent.pull()
        assert parent.pull() is EXHAUSTED

    def test_outstanding_subgroup_is_stale_after_parent_failure(self):
        parent = group_by("aab", self._fails_on("b", []))
        _, run_a = next(parent)
        with pytest.raises(ValueError):
            parent.pull()
        with pytest.raises(StaleGroupError):
            run_a.pull()

    def test_key_error_in_subgroup_pull_propagates(self):
        calls = []
        parent = group_by("aab", self._fails_on("b", calls))
        _, run_a = next(parent)
        assert run_a.pull() == Value("a")
        assert run_a.pull() == Value("a")
        with pytest.raises(ValueError, match="bad key 'b'"):
            run_a.pull()
        assert run_a.pull() is EXHAUSTED
        assert parent.pull() is EXHAUSTED
        assert calls == ["a", "a", "b"]

    def test_upstream_error_under_group_by(self):
        def explode(x):
            if x == 2:
                raise RuntimeError("upstream failed")
            return x

        parent = group_by(map([1, 2, 3], explode))
        _, run_1 = next(parent)
        assert run_1.pull() == Value(1)
        with pytest.raises(RuntimeError, match="upstream failed"):
            run_1.pull()
        assert parent.pull() is EXHAUSTED


class TestCompressPack:
    def test_compress(self):
        seq = compress("aaabbbcddddaa")
        assert to_list(seq) == ["a", "b", "c", "d", "a"]
        assert seq.pull() is EXHAUSTED

    def test_pack(self):
        seq = pack("aaabbbcddddaa")
        assert to_list(seq) == [
            ["a", "a", "a"],
            ["b", "b", "b"],
            ["c"],
            ["d", "d", "d", "d"],
            ["a", "a"],
        ]
        assert seq.pull() is EXHAUSTED

    def test_pack_with_key(self):
        assert to_list(pack([1, 1, 2, 3, 5], lambda x: x % 2)) == [[1, 1], [2], [3, 5]]

    def test_compress_is_lazy(self):
        pulled = []
        seq = compress(map("aab", lambda x: pulled.append(x) or x))
        assert next(seq) == "a"
        assert pulled == ["a"]

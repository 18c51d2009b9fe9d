"""Tests for the query cache."""

import pytest

from recipe_box.cache import QueryCache


class TestFetch:
    """Tests for reading through the cache."""

    def test_loads_when_missing(self, cache):
        calls = []

        def loader():
            calls.append(1)
            return ["a"]

        assert cache.fetch("key", loader) == ["a"]
        assert cache.fetch("key", loader) == ["a"]
        assert len(calls) == 1

    def test_reloads_after_invalidate(self, cache):
        values = iter([["first"], ["second"]])
        cache.fetch("key", lambda: next(values))
        cache.invalidate("key")

        assert cache.fetch("key", lambda: next(values)) == ["second"]

    def test_invalidate_keeps_value_readable(self, cache):
        cache.set("key", [1])
        cache.invalidate("key")

        assert cache.is_stale("key")
        assert cache.get("key") == [1]

    def test_invalidate_unknown_key_is_noop(self, cache):
        cache.invalidate("nothing")
        assert "nothing" not in cache

    def test_clear(self, cache):
        cache.set("a", 1)
        cache.clear()
        assert "a" not in cache
        assert cache.get("a", "default") == "default"


class TestSnapshot:
    """Tests for snapshot and restore."""

    def test_snapshot_is_independent_copy(self, cache):
        cache.set("key", [{"n": 1}])
        snap = cache.snapshot("key")
        cache.get("key")[0]["n"] = 2

        assert snap == [{"n": 1}]

    def test_restore_missing_removes_key(self, cache):
        snap = cache.snapshot("key")
        cache.set("key", [1])
        cache.restore("key", snap)

        assert "key" not in cache


class TestOptimistic:
    """Tests for optimistic updates."""

    def test_applies_update_during_body(self, cache):
        cache.set("key", [1])
        with cache.optimistic("key", lambda items: [*items, 2]):
            assert cache.get("key") == [1, 2]

    def test_success_keeps_update_and_marks_stale(self, cache):
        cache.set("key", [1])
        with cache.optimistic("key", lambda items: [*items, 2]):
            pass

        assert cache.get("key") == [1, 2]
        assert cache.is_stale("key")

    def test_failure_restores_previous_value(self, cache):
        cache.set("key", [1])
        with pytest.raises(RuntimeError, match="boom"):
            with cache.optimistic("key", lambda items: [*items, 2]):
                raise RuntimeError("boom")

        assert cache.get("key") == [1]
        assert cache.is_stale("key")

    def test_failure_on_missing_key_leaves_it_missing(self, cache):
        with pytest.raises(RuntimeError):
            with cache.optimistic("key", lambda items: [*items, "x"], default=[]):
                assert cache.get("key") == ["x"]
                raise RuntimeError("boom")

        assert "key" not in cache

    def test_updater_does_not_mutate_snapshot(self, cache):
        original = [1]
        cache.set("key", original)

        def append_in_place(items):
            items.append(2)
            return items

        with pytest.raises(RuntimeError):
            with cache.optimistic("key", append_in_place):
                raise RuntimeError("boom")

        assert cache.get("key") == [1]

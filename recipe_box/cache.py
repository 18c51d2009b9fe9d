"""Client-side query cache with optimistic updates."""

import copy
import logging
from collections.abc import Callable, Hashable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class _Entry:
    value: Any
    stale: bool = False


class QueryCache:
    """
    Cached query results keyed by tuples such as ("grocery_list", user_id).

    Services read through fetch(), which reloads a key when it is missing
    or has been invalidated. Writes go through optimistic(), which applies
    the change locally first and puts the previous value back if the
    remote write fails.
    """

    def __init__(self) -> None:
        self._entries: dict[Hashable, _Entry] = {}

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def get(self, key: Hashable, default: Any = None) -> Any:
        entry = self._entries.get(key)
        return entry.value if entry is not None else default

    def set(self, key: Hashable, value: Any) -> None:
        self._entries[key] = _Entry(value)

    def is_stale(self, key: Hashable) -> bool:
        entry = self._entries.get(key)
        return entry is None or entry.stale

    def fetch(self, key: Hashable, loader: Callable[[], Any]) -> Any:
        """Return the cached value, calling loader() if it is missing or stale."""
        if self.is_stale(key):
            logger.debug("Cache miss for %s, loading", key)
            self.set(key, loader())
        return self._entries[key].value

    def invalidate(self, key: Hashable) -> None:
        """Mark a key stale so the next fetch reloads it. Keeps the old value readable."""
        entry = self._entries.get(key)
        if entry is not None:
            entry.stale = True

    def clear(self) -> None:
        self._entries.clear()

    def snapshot(self, key: Hashable) -> Any:
        """Deep copy of the current value (or a sentinel if the key is absent)."""
        entry = self._entries.get(key)
        if entry is None:
            return _MISSING
        return copy.deepcopy(entry.value)

    def restore(self, key: Hashable, snapshot: Any) -> None:
        """Put back a value taken with snapshot()."""
        if snapshot is _MISSING:
            self._entries.pop(key, None)
        else:
            self.set(key, snapshot)

    @contextmanager
    def optimistic(
        self, key: Hashable, updater: Callable[[Any], Any], default: Any = None
    ) -> Iterator[None]:
        """
        Apply updater to the cached value for the duration of a remote write.

        Usage:
            with cache.optimistic(key, lambda items: [new, *items], default=[]):
                store.insert(...)

        On an exception in the body the previous value is restored and the
        exception propagates. The key is invalidated either way so the next
        read reflects the store.
        """
        previous = self.snapshot(key)
        current = self.get(key, default)
        self.set(key, updater(copy.copy(current)))
        try:
            yield
        except Exception:
            logger.debug("Rolling back optimistic update for %s", key)
            self.restore(key, previous)
            raise
        finally:
            self.invalidate(key)

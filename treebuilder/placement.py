"""Placement cache: compute each feature's tree positions once."""

import logging
import threading

logger = logging.getLogger(__name__)


class PlacementCache:
    """Memoize tree positions per ``(element, density)``.

    Keys hold the element object itself (hashed by identity), so two
    features that happen to share an id never share positions.

    Every key gets its own lock, so concurrent first renders of the same
    feature compute the positions once and share them.
    """

    def __init__(self):
        self._positions = {}
        self._locks = {}
        self._guard = threading.Lock()
        self.hits = 0
        self.misses = 0

    def _lock_for(self, key):
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def get_or_compute(self, element, density, compute):
        """Return cached positions, calling ``compute(density)`` on a miss."""
        key = (element, density)
        with self._lock_for(key):
            cached = self._positions.get(key)
            if cached is not None:
                self.hits += 1
                return cached
            positions = tuple(compute(density))
            self._positions[key] = positions
            self.misses += 1
            logger.debug(f"Placed {len(positions)} trees for element "
                         f"{element.id} at density {density}")
            return positions

    def __contains__(self, key):
        """``(element, density) in cache``."""
        return key in self._positions

    def __len__(self):
        return len(self._positions)

    def clear(self):
        with self._guard:
            self._positions.clear()
            self._locks.clear()

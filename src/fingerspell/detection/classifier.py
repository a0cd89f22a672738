"""
Nearest-neighbour letter classifier over reference feature vectors.
"""
import math
from typing import Dict, Iterable, Optional, Sequence, Tuple

import numpy as np

from src.fingerspell.core.config import CLASSIFICATION_THRESHOLD, DISTANCE_CACHE_SIZE


def euclidean_distance(a: Sequence[float], b: Sequence[float], bound: Optional[float] = None) -> float:
    """
    Euclidean distance between two equal-length vectors.

    Args:
        a, b: Feature vectors
        bound: Optional distance past which the exact value does not matter;
            accumulation stops and inf is returned once it is exceeded

    Returns:
        Distance, or inf if the lengths differ or the bound was exceeded
    """
    if len(a) != len(b):
        return math.inf

    limit = bound * bound if bound is not None else math.inf
    total = 0.0
    for x, y in zip(a, b):
        diff = x - y
        total += diff * diff
        if total > limit:
            return math.inf
    return math.sqrt(total)


class DistanceCache:
    """Fixed-capacity memo of pair distances, emptied when full."""

    def __init__(self, capacity: int = DISTANCE_CACHE_SIZE):
        self.capacity = capacity
        self._items: Dict[Tuple[bytes, bytes], float] = {}

    @staticmethod
    def fingerprint(vector: Sequence[float]) -> bytes:
        # exact bytes, so two different vectors never share a slot
        return np.asarray(vector, dtype=np.float64).tobytes()

    def get(self, key):
        return self._items.get(key)

    def put(self, key, value: float):
        if len(self._items) >= self.capacity:
            self._items.clear()
        self._items[key] = value

    def clear(self):
        self._items.clear()

    def __len__(self):
        return len(self._items)


class NearestNeighborClassifier:
    """
    Classifies a feature vector as the letter of its closest reference sample.

    A match is only reported when the closest sample lies strictly within
    `threshold`. Ties are broken by the smallest letter so the answer does not
    depend on the order of the reference entries.
    """

    def __init__(self, threshold: float = CLASSIFICATION_THRESHOLD,
                 cache_size: int = DISTANCE_CACHE_SIZE):
        self.cache = DistanceCache(cache_size) if cache_size > 0 else None
        self._threshold = float(threshold)

    @property
    def threshold(self) -> float:
        return self._threshold

    @threshold.setter
    def threshold(self, value: float):
        # memoised distances are cut off at the old threshold
        self._threshold = float(value)
        if self.cache is not None:
            self.cache.clear()

    def distance(self, query: Sequence[float], sample: Sequence[float],
                 query_print: Optional[bytes] = None) -> float:
        """Distance bounded by the threshold, memoised when a cache is configured."""
        if self.cache is None:
            return euclidean_distance(query, sample, bound=self.threshold)

        if query_print is None:
            query_print = DistanceCache.fingerprint(query)
        key = (query_print, DistanceCache.fingerprint(sample))
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        value = euclidean_distance(query, sample, bound=self.threshold)
        self.cache.put(key, value)
        return value

    def nearest(self, query: Sequence[float], reference_set: Iterable) -> Tuple[str, float]:
        """
        Find the closest reference letter.

        Args:
            query: Feature vector to classify
            reference_set: Iterable of ReferenceEntry

        Returns:
            (letter, distance); ("", inf) if nothing lies within the threshold
        """
        best_letter = ""
        best_distance = math.inf
        if query is None or len(query) == 0:
            return best_letter, best_distance

        query_print = DistanceCache.fingerprint(query) if self.cache is not None else None
        for entry in reference_set:
            for sample in entry.samples:
                d = self.distance(query, sample, query_print)
                if d < best_distance or (d == best_distance and d != math.inf and entry.letter < best_letter):
                    best_distance = d
                    best_letter = entry.letter
        return best_letter, best_distance

    def classify(self, query: Sequence[float], reference_set: Iterable) -> str:
        """Return the best matching letter, or "" if there is no confident match."""
        letter, distance = self.nearest(query, reference_set)
        return letter if distance < self.threshold else ""

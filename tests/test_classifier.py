import math
import random

import pytest

from src.fingerspell.detection.classifier import (
    DistanceCache,
    NearestNeighborClassifier,
    euclidean_distance,
)
from src.fingerspell.training.schemas import ReferenceEntry


def entry(letter, *samples):
    return ReferenceEntry(letter=letter, samples=[list(s) for s in samples], captured_at=0)


def test_euclidean_distance():
    assert euclidean_distance([0, 0, 0], [3, 4, 0]) == 5.0
    assert euclidean_distance([1.5], [1.5]) == 0.0


def test_length_mismatch_is_infinite():
    assert euclidean_distance([1, 2, 3], [1, 2]) == math.inf


def test_bound_short_circuits_only_past_the_bound():
    assert euclidean_distance([0, 0], [3, 4], bound=5.0) == 5.0
    assert euclidean_distance([0, 0], [30, 40], bound=5.0) == math.inf


def test_nearest_sample_wins():
    refs = [entry("A", [0, 0, 0]), entry("B", [10, 0, 0], [1, 1, 0])]
    clf = NearestNeighborClassifier(threshold=150)
    assert clf.classify([1, 1, 1], refs) == "B"
    assert clf.classify([0, 0, 0.5], refs) == "A"


def test_distance_beyond_threshold_gives_no_match():
    refs = [entry("A", [500.0, 0.0])]
    clf = NearestNeighborClassifier(threshold=150)
    assert clf.classify([0.0, 0.0], refs) == ""
    assert clf.nearest([0.0, 0.0], refs) == ("", math.inf)


def test_threshold_is_strict():
    refs = [entry("A", [150.0])]
    assert NearestNeighborClassifier(threshold=150).classify([0.0], refs) == ""
    assert NearestNeighborClassifier(threshold=150.001).classify([0.0], refs) == "A"


def test_mismatched_samples_are_never_selected():
    refs = [entry("A", [0.0, 0.0, 0.0, 0.0]), entry("B", [1.0, 1.0])]
    assert NearestNeighborClassifier().classify([0.0, 0.0], refs) == "B"


def test_empty_inputs():
    clf = NearestNeighborClassifier()
    assert clf.classify([], [entry("A", [0.0])]) == ""
    assert clf.classify([0.0], []) == ""


def test_result_independent_of_entry_order():
    rnd = random.Random(3)
    refs = [entry(chr(65 + i), *[[rnd.uniform(-50, 50) for _ in range(6)] for _ in range(3)])
            for i in range(8)]
    # duplicate sample under two letters to force a tie
    refs.append(entry("Q", refs[2].samples[0]))
    query = refs[2].samples[0]
    expected = NearestNeighborClassifier(threshold=500).classify(query, refs)
    assert expected == "C"
    for _ in range(10):
        shuffled = refs[:]
        rnd.shuffle(shuffled)
        assert NearestNeighborClassifier(threshold=500).classify(query, shuffled) == expected


def test_cache_does_not_change_results():
    rnd = random.Random(9)
    refs = [entry(chr(65 + i), *[[rnd.uniform(-20, 20) for _ in range(9)] for _ in range(4)])
            for i in range(5)]
    cached = NearestNeighborClassifier(threshold=40, cache_size=7)
    uncached = NearestNeighborClassifier(threshold=40, cache_size=0)
    for _ in range(50):
        query = [rnd.uniform(-20, 20) for _ in range(9)]
        assert cached.classify(query, refs) == uncached.classify(query, refs)
        # repeat the same query against a warm cache
        assert cached.classify(query, refs) == uncached.classify(query, refs)
    assert len(cached.cache) <= 7


def test_cache_clears_on_overflow():
    cache = DistanceCache(capacity=2)
    cache.put(("a", "b"), 1.0)
    cache.put(("a", "c"), 2.0)
    assert len(cache) == 2
    cache.put(("a", "d"), 3.0)
    assert len(cache) == 1
    assert cache.get(("a", "d")) == 3.0
    assert cache.get(("a", "b")) is None


def test_fingerprint_distinguishes_close_vectors():
    assert DistanceCache.fingerprint([0.1, 0.2]) != DistanceCache.fingerprint([0.1, 0.2000001])
    assert DistanceCache.fingerprint((1, 2)) == DistanceCache.fingerprint([1.0, 2.0])


def test_classify_default_sample_returns_its_letter(store, rng):
    defaults = store.get_default("ASL", rng=rng)
    m_sample = next(e for e in defaults if e.letter == "M").samples[2]
    refs = store.get_combined("ASL", defaults=defaults)
    assert NearestNeighborClassifier(threshold=150).classify(m_sample, refs) == "M"


def test_raising_threshold_discards_cut_off_distances():
    refs = [entry("A", [100.0, 0.0])]
    clf = NearestNeighborClassifier(threshold=50)
    assert clf.classify([0.0, 0.0], refs) == ""
    assert len(clf.cache) == 1

    clf.threshold = 150
    assert len(clf.cache) == 0
    assert clf.classify([0.0, 0.0], refs) == "A"
    assert clf.nearest([0.0, 0.0], refs) == ("A", 100.0)

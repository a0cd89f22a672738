import numpy as np
import pytest

from src.fingerspell.core.errors import ModelLoadError
from src.fingerspell.detection.hand_capture import Detection, LandmarkProvider
from src.fingerspell.training.storage import MemoryStorage
from src.fingerspell.training.store import ReferenceStore


def make_landmarks(seed=0, count=21, origin=(320.0, 400.0, 0.0)):
    """Plausible pixel-space landmarks: wrist at origin, joints above it."""
    rng = np.random.default_rng(seed)
    points = [tuple(origin)]
    for i in range(1, count):
        chain, joint = divmod(i - 1, 4)
        x = origin[0] - 60 + chain * 30 + rng.uniform(-5, 5)
        y = origin[1] - 40 * (joint + 1) + rng.uniform(-5, 5)
        z = rng.uniform(-20, 20)
        points.append((round(x, 1), round(y, 1), round(z, 1)))
    return points


class FakeProvider(LandmarkProvider):
    """Landmark provider returning a scripted sequence of detections."""

    def __init__(self, script=None, fail_load=False):
        self.script = list(script or [])
        self.fail_load = fail_load
        self.loaded = False
        self.detect_calls = 0

    def load(self):
        if self.fail_load:
            raise ModelLoadError("model file missing")
        self.loaded = True
        return self

    def detect(self, frame):
        self.detect_calls += 1
        if not self.script:
            return []
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        if item is None:
            return []
        return [Detection(item)]


class FakeFrameSource:
    """Yields `count` dummy frames, then ends the stream."""

    def __init__(self, count):
        self.remaining = count
        self.reads = 0

    async def next_frame(self):
        if self.remaining <= 0:
            return None
        self.remaining -= 1
        self.reads += 1
        return np.zeros((48, 64, 3), dtype=np.uint8)


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FailingStorage(MemoryStorage):
    """Storage whose writes always fail."""

    def set_item(self, key, value):
        raise OSError("disk full")


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return ReferenceStore(storage)


@pytest.fixture
def landmarks():
    return make_landmarks()


@pytest.fixture
def rng():
    return np.random.default_rng(42)

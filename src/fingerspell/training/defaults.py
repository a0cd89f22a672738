"""
Built-in default alphabets used before a user has trained any letters.

Each letter has a hand-authored base pattern: a rough palm-relative offset for
the first five or six joints. The values are qualitative approximations, not
measured data. Samples are produced by jittering the base pattern and padding
it out to a full feature vector.
"""
from typing import Dict, List, Optional

import numpy as np

from src.fingerspell.core.config import (
    DEFAULT_JITTER,
    DEFAULT_PAD_SCALE,
    DEFAULT_SAMPLES_PER_LETTER,
    NUM_LANDMARKS,
)
from src.fingerspell.core.languages import SignLanguage
from src.fingerspell.training.schemas import ReferenceEntry, now_ms

ASL_BASE_PATTERNS: Dict[str, List[float]] = {
    "A": [0.5, 0.1, 0, 0.3, 0.2, 0, 0.1, 0.2, 0, 0, 0.2, 0, 0, 0.2, 0, 0, 0.2, 0],  # fist, thumb alongside
    "B": [0, 0.8, 0, 0, 0.8, 0, 0, 0.8, 0, 0, 0.8, 0, 0, 0.8, 0, 0.2, 0, 0],  # flat hand
    "C": [0.5, 0.3, 0.3, 0.5, 0.4, 0.3, 0.5, 0.4, 0.3, 0.5, 0.4, 0.3, 0.4, 0.3, 0.2],
    "D": [0, 0.8, 0, 0.1, 0.2, 0, 0.1, 0.2, 0, 0.1, 0.2, 0, 0.3, 0.2, 0],
    "E": [0.2, 0.2, 0, 0.2, 0.2, 0, 0.2, 0.2, 0, 0.2, 0.2, 0, 0.2, 0.2, 0],
    "F": [0.3, 0.3, 0, 0.3, 0.3, 0, 0, 0.7, 0, 0, 0.7, 0, 0, 0.7, 0],
    "G": [0.4, 0.1, 0, 0.7, 0.3, 0, 0.1, 0.2, 0, 0.1, 0.2, 0, 0.1, 0.2, 0],
    "H": [0.3, 0.1, 0, 0, 0.8, 0, 0, 0.8, 0, 0.1, 0.2, 0, 0.1, 0.2, 0],
    "I": [0.3, 0.1, 0, 0.1, 0.2, 0, 0.1, 0.2, 0, 0.1, 0.2, 0, 0, 0.8, 0],
    "J": [0.3, 0.1, 0, 0.1, 0.2, 0, 0.1, 0.2, 0, 0.1, 0.2, 0, 0, 0.8, 0.3],  # moving I
    "K": [0.3, 0.1, 0, 0, 0.8, 0.3, 0, 0.8, 0.3, 0.1, 0.2, 0, 0.1, 0.2, 0],
    "L": [0.8, 0, 0, 0, 0.8, 0, 0.1, 0.2, 0, 0.1, 0.2, 0, 0.1, 0.2, 0],
    "M": [0.3, 0.1, 0, 0.1, 0.3, 0.2, 0.1, 0.3, 0.2, 0.1, 0.3, 0.2, 0.1, 0.2, 0],
    "N": [0.3, 0.1, 0, 0.1, 0.3, 0.2, 0.1, 0.3, 0.2, 0.1, 0.2, 0, 0.1, 0.2, 0],
    "O": [0.4, 0.3, 0.1, 0.4, 0.3, 0.1, 0.4, 0.3, 0.1, 0.4, 0.3, 0.1, 0.4, 0.3, 0.1],
    "P": [0.4, 0.2, 0, 0, 0.7, 0.3, 0.1, 0.2, 0, 0.1, 0.2, 0, 0.1, 0.2, 0],
    "Q": [0.4, 0.2, 0, 0.7, 0.3, 0.3, 0.1, 0.2, 0, 0.1, 0.2, 0, 0.1, 0.2, 0],
    "R": [0.3, 0.1, 0, 0, 0.8, 0, 0, 0.8, 0, 0.1, 0.2, 0, 0.1, 0.2, 0],
    "S": [0.5, 0.2, 0, 0.1, 0.2, 0, 0.1, 0.2, 0, 0.1, 0.2, 0, 0.1, 0.2, 0],
    "T": [0.3, 0.2, 0, 0.1, 0.2, 0, 0.1, 0.2, 0, 0.1, 0.2, 0, 0.1, 0.2, 0],
    "U": [0.3, 0.1, 0, 0, 0.8, 0, 0, 0.8, 0, 0.1, 0.2, 0, 0.1, 0.2, 0],
    "V": [0.3, 0.1, 0, 0, 0.8, 0, 0, 0.8, 0, 0.1, 0.2, 0, 0.1, 0.2, 0],
    "W": [0.3, 0.1, 0, 0, 0.8, 0, 0, 0.8, 0, 0, 0.8, 0, 0.1, 0.2, 0],
    "X": [0.3, 0.1, 0, 0.4, 0.4, 0, 0.1, 0.2, 0, 0.1, 0.2, 0, 0.1, 0.2, 0],
    "Y": [0.7, 0.1, 0, 0.1, 0.2, 0, 0.1, 0.2, 0, 0.1, 0.2, 0, 0, 0.8, 0],
    "Z": [0.3, 0.1, 0, 0.6, 0.3, 0, 0.1, 0.2, 0, 0.1, 0.2, 0, 0.1, 0.2, 0],  # index zigzag
}

# FSL shares most hand shapes with ASL
FSL_BASE_PATTERNS: Dict[str, List[float]] = dict(ASL_BASE_PATTERNS)
FSL_BASE_PATTERNS.update({
    "A": [0.5, 0.1, 0, 0.35, 0.2, 0, 0.1, 0.2, 0, 0, 0.2, 0, 0, 0.2, 0, 0, 0.2, 0],
    "Ñ": [0.3, 0.1, 0.1, 0.1, 0.3, 0.3, 0.1, 0.3, 0.2, 0.1, 0.2, 0, 0.1, 0.2, 0],  # N with a wave
    "NG": [0.3, 0.1, 0.2, 0.1, 0.3, 0.3, 0.1, 0.3, 0.3, 0.1, 0.2, 0, 0.1, 0.2, 0],
})

BASE_PATTERNS = {
    SignLanguage.ASL: ASL_BASE_PATTERNS,
    SignLanguage.FSL: FSL_BASE_PATTERNS,
}

_NEUTRAL_PATTERN = [0.0] * 15


def get_base_pattern(letter: str, language: SignLanguage = SignLanguage.ASL) -> List[float]:
    """Base pattern for a letter, or a neutral all-zero pattern if unknown."""
    return list(BASE_PATTERNS[language].get(letter, _NEUTRAL_PATTERN))


def generate_default_samples(letter: str, language: SignLanguage = SignLanguage.ASL,
                             rng: Optional[np.random.Generator] = None,
                             count: int = DEFAULT_SAMPLES_PER_LETTER) -> List[List[float]]:
    """
    Generate jittered feature vectors for one letter.

    Args:
        letter: Letter to generate samples for
        language: Sign language whose base pattern is used
        rng: numpy Generator; a fresh unseeded one is used if omitted
        count: Number of samples

    Returns:
        List of `count` vectors, each 3 * (NUM_LANDMARKS - 1) long
    """
    rng = rng if rng is not None else np.random.default_rng()
    base = np.array(get_base_pattern(letter, language), dtype=np.float64)
    known_points = len(base) // 3
    low, high = DEFAULT_PAD_SCALE

    samples = []
    for _ in range(count):
        variation = base * (1 + rng.uniform(-DEFAULT_JITTER, DEFAULT_JITTER, size=base.shape))
        points = variation[:known_points * 3].reshape(known_points, 3)

        padded = []
        for _ in range(NUM_LANDMARKS - 1 - known_points):
            # each coordinate borrows from an independently chosen known point
            sources = rng.integers(0, known_points, size=3)
            scale = rng.uniform(low, high, size=3)
            padded.append(points[sources, [0, 1, 2]] * scale)

        full = np.vstack([points] + padded) if padded else points
        samples.append(full.flatten().tolist())

    return samples


def get_default_alphabet(language: SignLanguage,
                         rng: Optional[np.random.Generator] = None) -> List[ReferenceEntry]:
    """
    Build the default reference set for a language, one entry per letter.

    The result is random on every call unless a seeded rng is given; callers
    that need stable defaults should generate once and keep the result.
    """
    rng = rng if rng is not None else np.random.default_rng()
    timestamp = now_ms()
    return [
        ReferenceEntry(
            letter=letter,
            samples=generate_default_samples(letter, language, rng),
            captured_at=timestamp,
        )
        for letter in language.letters
    ]

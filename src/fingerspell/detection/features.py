"""
Palm-relative feature extraction from hand landmarks.
"""
import numpy as np

from src.fingerspell.core.config import FEATURE_PRECISION, NUM_LANDMARKS, PALM_INDEX


def extract_features(landmarks):
    """
    Convert a hand skeleton into a flat feature vector relative to the palm.

    Every landmark after the palm point has the palm's coordinates subtracted,
    and the (x, y, z) offsets are flattened in landmark order.

    Args:
        landmarks: sequence of 21 (x, y, z) points or np.array of shape (21, 3).
            Missing or short input is allowed.

    Returns:
        feature vector: tuple of 60 floats rounded to FEATURE_PRECISION
        decimals, or an empty tuple if the landmarks are missing or invalid
    """
    if landmarks is None:
        return ()

    try:
        count = min(len(landmarks), NUM_LANDMARKS)
    except TypeError:
        return ()
    if count < NUM_LANDMARKS:
        return ()

    try:
        points = np.array([landmarks[i] for i in range(count)], dtype=np.float64)
    except (TypeError, ValueError):
        return ()

    if points.shape != (NUM_LANDMARKS, 3) or not np.all(np.isfinite(points)):
        return ()

    relative = points[PALM_INDEX + 1:] - points[PALM_INDEX]
    rounded = np.round(relative, FEATURE_PRECISION)

    # tolist() hands back plain python floats
    return tuple(rounded.flatten().tolist())


def is_valid_feature_vector(vector, length=None):
    """Check that a vector is non-empty and (optionally) of a given length."""
    if vector is None or len(vector) == 0:
        return False
    return length is None or len(vector) == length

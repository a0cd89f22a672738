"""
Core application configuration and constants.
"""
from pathlib import Path

# Base paths
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
MODELS_DIR = PROJECT_ROOT / "models"
DATA_DIR = PROJECT_ROOT / "data"
STORAGE_DIR = DATA_DIR / "storage"
EXPORT_DIR = DATA_DIR / "exports"

# Detector model (MediaPipe Tasks bundle)
HAND_LANDMARKER_PATH = MODELS_DIR / "hand_landmarker.task"
MIN_DETECTION_CONFIDENCE = 0.5
MIN_PRESENCE_CONFIDENCE = 0.5
MIN_TRACKING_CONFIDENCE = 0.5

# Landmark geometry
NUM_LANDMARKS = 21  # wrist + 5 fingers x 4 joints
PALM_INDEX = 0
FEATURE_LENGTH = 3 * (NUM_LANDMARKS - 1)  # 60
FEATURE_PRECISION = 2  # decimals kept in feature vectors

# Finger chains, each starting at the palm
FINGER_CHAINS = {
    "thumb": [0, 1, 2, 3, 4],
    "index": [0, 5, 6, 7, 8],
    "middle": [0, 9, 10, 11, 12],
    "ring": [0, 13, 14, 15, 16],
    "pinky": [0, 17, 18, 19, 20],
}

# Skeleton edges drawn on the overlay: finger chains plus the knuckle line
PALM_EDGES = [(5, 9), (9, 13), (13, 17)]
HAND_CONNECTIONS = [
    (start, end)
    for chain in FINGER_CHAINS.values()
    for start, end in zip(chain, chain[1:])
] + PALM_EDGES

# Classification settings
CLASSIFICATION_THRESHOLD = 150.0  # max euclidean distance for a confident match
DISTANCE_CACHE_SIZE = 2048  # memo entries before the cache is cleared

# Default exemplar generation
DEFAULT_SAMPLES_PER_LETTER = 5
DEFAULT_JITTER = 0.1  # +/-10% multiplicative noise on base patterns
DEFAULT_PAD_SCALE = (0.8, 1.2)  # extra scaling for padded positions

# Frame loop settings
FRAME_SKIP = 2  # process every Nth frame
HAND_TOAST_COOLDOWN = 3.0  # seconds between "hand detected" notifications
FEATURE_DEBOUNCE = 0.15  # seconds to coalesce training-mode feature emissions

# Session settings
HISTORY_SIZE = 10  # recognized letters kept, newest first

# Storage keys
TRAINING_DATA_KEYS = {
    "ASL": "asl-training-data",
    "FSL": "fsl-training-data",
}
ACTIVE_LANGUAGE_KEY = "active-sign-language"
DEFAULT_LANGUAGE = "ASL"

# Alphabets
ASL_LETTERS = list("ABCDEFGHIJKLMNOPQRSTUVWXYZ")
FSL_LETTERS = list("ABCDEFGHIJKLMN") + ["Ñ", "NG"] + list("OPQRSTUVWXYZ")
ALPHABETS = {
    "ASL": ASL_LETTERS,
    "FSL": FSL_LETTERS,
}
LANGUAGE_NAMES = {
    "ASL": "American Sign Language",
    "FSL": "Filipino Sign Language",
}

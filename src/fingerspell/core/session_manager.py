"""
Recognition and training sessions.

These sit between the frame loop callbacks and whatever shows results to the
user: they keep the recognized-letter history, track the language in use, and
collect captured samples before they are saved.
"""
import logging
from collections import deque
from typing import Callable, List, Optional, Sequence, Union

from src.fingerspell.core.config import FEATURE_LENGTH, HISTORY_SIZE
from src.fingerspell.core.errors import TrainingError
from src.fingerspell.core.languages import SignLanguage, parse_language
from src.fingerspell.detection.features import is_valid_feature_vector
from src.fingerspell.detection.recognizer import SignRecognizer
from src.fingerspell.training.store import ReferenceStore

logger = logging.getLogger(__name__)


class RecognitionSession:
    """State of a recognition view: language, current letter and history."""

    def __init__(self, store: ReferenceStore, language: Optional[Union[str, SignLanguage]] = None,
                 recognizer_factory: Callable[..., SignRecognizer] = SignRecognizer,
                 history_size: int = HISTORY_SIZE):
        """
        Args:
            store: Reference store shared with training
            language: Language to start with, the store's active language if omitted
            recognizer_factory: Builds a recognizer for (language, store)
            history_size: Number of recognized letters to keep
        """
        self.store = store
        self.recognizer_factory = recognizer_factory
        self.language = parse_language(language) if language else store.active_language
        self.recognizer = recognizer_factory(self.language, store)

        self.current_letter = ""
        self.hand_detected = False
        self.history = deque(maxlen=history_size)

    def handle_hand_detected(self, detected: bool):
        self.hand_detected = detected

    def handle_letter(self, letter: str) -> bool:
        """
        Record a newly recognized letter.

        Returns:
            True if the letter was added to the history
        """
        if not letter:
            self.current_letter = ""
            return False
        if letter == self.current_letter:
            return False
        self.current_letter = letter
        self.history.appendleft(letter)
        logger.debug("Recognized: %s", letter)
        return True

    def get_history(self) -> List[str]:
        """Recognized letters, newest first."""
        return list(self.history)

    def clear_history(self):
        self.history.clear()

    def change_language(self, language: Union[str, SignLanguage]) -> SignRecognizer:
        """Switch language, persist the choice and start a fresh history."""
        language = parse_language(language)
        self.store.active_language = language
        self.language = language
        self.recognizer = self.recognizer_factory(language, self.store)
        self.current_letter = ""
        self.history.clear()
        return self.recognizer

    def ready_message(self) -> str:
        """Short status describing what recognition will match against."""
        custom = len(self.store.load(self.language))
        if custom:
            return (f"Ready with {custom} custom trained letters "
                    f"plus defaults for {self.language.value}")
        return f"Using default {self.language.value} alphabet recognition"

    def get_progress(self) -> dict:
        return {
            "language": self.language.value,
            "current_letter": self.current_letter,
            "hand_detected": self.hand_detected,
            "history": self.get_history(),
        }


class TrainingSession:
    """Collects samples for one letter at a time and saves them to the store."""

    def __init__(self, store: ReferenceStore, language: Optional[Union[str, SignLanguage]] = None):
        self.store = store
        self.language = parse_language(language) if language else store.active_language
        self.selected_letter = ""
        self.hand_detected = False
        self.latest_features: tuple = ()
        self.samples: List[List[float]] = []

    @property
    def sample_count(self) -> int:
        return len(self.samples)

    def select_letter(self, letter: str):
        """
        Pick the letter to train. Samples captured for another letter are dropped.

        Raises:
            TrainingError: if the letter is not in the language's alphabet
        """
        if not self.language.has_letter(letter):
            raise TrainingError(f"'{letter}' is not a {self.language.value} letter")
        if letter != self.selected_letter:
            self.samples = []
        self.selected_letter = letter

    def step_letter(self, step: int = 1) -> str:
        """Select the letter `step` places along the alphabet, wrapping around."""
        letters = self.language.letters
        if self.selected_letter in letters:
            index = (letters.index(self.selected_letter) + step) % len(letters)
        else:
            index = 0 if step > 0 else len(letters) - 1
        self.select_letter(letters[index])
        return self.selected_letter

    def handle_hand_detected(self, detected: bool):
        self.hand_detected = detected
        if not detected:
            self.latest_features = ()

    def handle_features(self, features: Sequence[float]):
        self.latest_features = tuple(features)

    def capture_sample(self) -> int:
        """
        Add the most recent feature vector as a sample.

        Returns:
            Number of samples captured so far

        Raises:
            TrainingError: if no hand is visible or no letter is selected
        """
        if not self.hand_detected or not is_valid_feature_vector(self.latest_features, FEATURE_LENGTH):
            raise TrainingError("No hand detected. Position your hand in the camera frame first.")
        if not self.selected_letter:
            raise TrainingError("No letter selected. Please select a letter to train.")

        self.samples.append(list(self.latest_features))
        logger.info("Sample #%d captured for letter %s", len(self.samples), self.selected_letter)
        return len(self.samples)

    def save(self):
        """
        Save the captured samples, replacing any earlier ones for the letter.

        Raises:
            TrainingError: if nothing was captured
            StorageWriteError: if the store could not write
        """
        if not self.samples:
            raise TrainingError("No samples captured. Capture at least one sample before saving.")

        entry = self.store.save(self.selected_letter, self.samples, self.language)
        self.discard()
        self.selected_letter = ""
        return entry

    def discard(self):
        self.samples = []

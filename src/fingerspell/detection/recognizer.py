"""
Language-scoped letter recognition.

One SignRecognizer exists per sign language and is picked explicitly by the
caller. Its default alphabet is generated once when it is built and reused
for every classification, so recognition never pays for regenerating it.
"""
import logging
from typing import List, Optional, Sequence, Union

import numpy as np

from src.fingerspell.core.languages import SignLanguage, parse_language
from src.fingerspell.detection.classifier import NearestNeighborClassifier
from src.fingerspell.detection.features import extract_features
from src.fingerspell.training.schemas import ReferenceEntry
from src.fingerspell.training.store import ReferenceStore

logger = logging.getLogger(__name__)


class SignRecognizer:
    """Recognizes letters of one sign language from landmarks or features."""

    def __init__(self, language: Union[str, SignLanguage], store: ReferenceStore,
                 classifier: Optional[NearestNeighborClassifier] = None,
                 rng: Optional[np.random.Generator] = None):
        """
        Args:
            language: Sign language this recognizer answers for
            store: Reference store holding the user's samples
            classifier: Classifier to use; a default one is built if omitted
            rng: numpy Generator for the default alphabet
        """
        self.language = parse_language(language)
        self.store = store
        self.classifier = classifier or NearestNeighborClassifier()
        self.defaults: List[ReferenceEntry] = store.get_default(self.language, rng=rng)
        logger.info("%s recognizer ready with %d default letters",
                    self.language.value, len(self.defaults))

    def reference_set(self) -> List[ReferenceEntry]:
        """User data merged with this recognizer's defaults."""
        return self.store.get_combined(self.language, defaults=self.defaults)

    def recognize_features(self, features: Sequence[float]) -> str:
        """Classify a feature vector. Returns "" when there is no confident match."""
        if features is None or len(features) == 0:
            return ""
        return self.classifier.classify(features, self.reference_set())

    def recognize(self, landmarks) -> str:
        """Extract features from a landmark set and classify them."""
        return self.recognize_features(extract_features(landmarks))

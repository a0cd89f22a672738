"""
Hand landmark detection using MediaPipe, plus landmark overlay drawing.
"""
import logging
from pathlib import Path
from typing import List, NamedTuple, Optional, Tuple

import cv2
import numpy as np

from src.fingerspell.core import config
from src.fingerspell.core.errors import ModelLoadError

logger = logging.getLogger(__name__)

Point = Tuple[float, float, float]


class Detection(NamedTuple):
    """One detected hand: 21 (x, y, z) points in frame-pixel coordinates."""
    landmarks: List[Point]
    score: float = 1.0


class LandmarkProvider:
    """
    Interface of the hand landmark detector consumed by the frame loop.

    `detect` returns zero or one Detection per frame.
    """

    def load(self):
        raise NotImplementedError

    def detect(self, frame) -> List[Detection]:
        raise NotImplementedError

    def close(self):
        pass


class MediaPipeHandProvider(LandmarkProvider):
    """Landmark provider backed by the MediaPipe Tasks HandLandmarker."""

    def __init__(self, model_path=None,
                 min_detection_confidence: float = config.MIN_DETECTION_CONFIDENCE,
                 min_presence_confidence: float = config.MIN_PRESENCE_CONFIDENCE,
                 min_tracking_confidence: float = config.MIN_TRACKING_CONFIDENCE):
        """
        Args:
            model_path: Path to hand_landmarker.task, config default if omitted
            min_detection_confidence: Palm detection confidence cut-off
            min_presence_confidence: Hand presence confidence cut-off
            min_tracking_confidence: Landmark tracking confidence cut-off
        """
        self.model_path = Path(model_path) if model_path else config.HAND_LANDMARKER_PATH
        self.min_detection_confidence = min_detection_confidence
        self.min_presence_confidence = min_presence_confidence
        self.min_tracking_confidence = min_tracking_confidence
        self.detector = None

    def load(self):
        """
        Create the HandLandmarker. Slow; callers run it off the event loop.

        Raises:
            ModelLoadError: if the model file is missing or cannot be loaded
        """
        if not self.model_path.exists():
            raise ModelLoadError(f"Hand landmark model not found: {self.model_path}")

        try:
            from mediapipe.tasks import python as mp_python
            from mediapipe.tasks.python import vision

            base_options = mp_python.BaseOptions(model_asset_path=str(self.model_path))
            options = vision.HandLandmarkerOptions(
                base_options=base_options,
                num_hands=1,
                min_hand_detection_confidence=self.min_detection_confidence,
                min_hand_presence_confidence=self.min_presence_confidence,
                min_tracking_confidence=self.min_tracking_confidence,
            )
            self.detector = vision.HandLandmarker.create_from_options(options)
        except Exception as e:
            raise ModelLoadError(f"Failed to load hand landmark model: {e}") from e

        logger.info("Hand landmark model loaded: %s", self.model_path.name)
        return self

    def detect(self, frame) -> List[Detection]:
        """
        Detect a hand in a frame.

        Args:
            frame: BGR image from OpenCV

        Returns:
            Empty list, or one Detection with pixel-space landmarks
        """
        if self.detector is None:
            raise RuntimeError("Hand landmark model is not loaded")

        import mediapipe as mp

        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_frame)
        results = self.detector.detect(mp_image)

        if not results.hand_landmarks:
            return []

        height, width = frame.shape[:2]
        score = 1.0
        if results.handedness and results.handedness[0]:
            score = float(results.handedness[0][0].score)
        return [Detection(to_pixel_landmarks(results.hand_landmarks[0], width, height), score)]

    def close(self):
        if self.detector is not None:
            self.detector.close()
            self.detector = None


def to_pixel_landmarks(hand_landmarks, width: int, height: int) -> List[Point]:
    """
    Convert normalized MediaPipe landmarks to frame-pixel coordinates.

    z is scaled by the frame width, matching how MediaPipe normalizes depth.
    """
    return [(lm.x * width, lm.y * height, lm.z * width) for lm in hand_landmarks]


class LandmarkOverlay:
    """Draws the detected hand skeleton on top of the video frame."""

    POINT_COLOR = (246, 130, 59)  # BGR
    LINE_COLOR = (250, 165, 96)

    def __init__(self):
        self.image: Optional[np.ndarray] = None

    def draw(self, frame, landmarks):
        """
        Draw keypoints and skeleton edges on a copy of the frame.

        Args:
            frame: BGR image (left untouched)
            landmarks: 21 pixel-space (x, y, z) points

        Returns:
            The annotated copy, also kept in self.image
        """
        canvas = frame.copy()
        points = [(int(round(x)), int(round(y))) for x, y, _ in landmarks]

        for start, end in config.HAND_CONNECTIONS:
            if start < len(points) and end < len(points):
                cv2.line(canvas, points[start], points[end], self.LINE_COLOR, 3)

        for pt in points:
            cv2.circle(canvas, pt, 5, self.POINT_COLOR, -1)

        self.image = canvas
        return canvas

    def clear(self, frame=None):
        """Drop the overlay; the plain frame is shown instead."""
        self.image = frame.copy() if frame is not None else None
        return self.image

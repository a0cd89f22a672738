"""Detection module for sign language recognition.

Handles hand capture, feature extraction, classification and the frame loop.
"""
from src.fingerspell.detection.hand_capture import (
    Detection,
    LandmarkProvider,
    MediaPipeHandProvider,
    LandmarkOverlay,
)
from src.fingerspell.detection.features import extract_features
from src.fingerspell.detection.classifier import NearestNeighborClassifier, euclidean_distance
from src.fingerspell.detection.recognizer import SignRecognizer
from src.fingerspell.detection.frame_loop import FrameLoop, LoopState, Debouncer

__all__ = [
    'Detection',
    'LandmarkProvider',
    'MediaPipeHandProvider',
    'LandmarkOverlay',
    'extract_features',
    'NearestNeighborClassifier',
    'euclidean_distance',
    'SignRecognizer',
    'FrameLoop',
    'LoopState',
    'Debouncer',
]

"""Video input for the frame loop."""
from src.fingerspell.video.capture import VideoCapture

__all__ = ['VideoCapture']

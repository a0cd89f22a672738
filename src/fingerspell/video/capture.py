"""
Webcam frame source for the frame loop.
"""
import asyncio
import logging

import cv2

logger = logging.getLogger(__name__)


class VideoCapture:
    def __init__(self, source=0, mirror=True, width=None, height=None):
        self.source = source
        self.mirror = mirror
        self.cap = cv2.VideoCapture(source)
        if not self.cap.isOpened():
            raise ValueError("Unable to open a camera")
        if width:
            self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        if height:
            self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))

    def read(self):
        flag, frame = self.cap.read()
        if not flag:
            raise RuntimeError("Failed to read frame from the source.")
        if self.mirror:
            frame = cv2.flip(frame, 1)
        return frame

    async def next_frame(self):
        """Read the next frame off the event loop. None once the camera stops."""
        if self.cap is None:
            return None
        try:
            return await asyncio.to_thread(self.read)
        except RuntimeError as e:
            logger.error("Camera stopped: %s", e)
            return None

    def release(self):
        if hasattr(self, 'cap') and self.cap is not None:
            self.cap.release()
            self.cap = None

    def __del__(self):
        self.release()

"""
Per-frame detection loop: frame -> landmarks -> features -> letter or sample.

The loop is a single asyncio task. Each frame's detect-classify-render cycle
finishes before the next frame is requested, so at most one detection is in
flight. Teardown clears one liveness flag; every step re-checks it after an
await, so results that arrive late are dropped.
"""
import asyncio
import logging
import time
from enum import Enum
from typing import Callable, Optional

from src.fingerspell.core.config import FEATURE_DEBOUNCE, FRAME_SKIP, HAND_TOAST_COOLDOWN
from src.fingerspell.core.errors import ModelLoadError
from src.fingerspell.detection.features import extract_features

logger = logging.getLogger(__name__)


class LoopState(Enum):
    UNINITIALIZED = "uninitialized"
    MODEL_LOADING = "model_loading"
    MODEL_FAILED = "model_failed"
    READY = "ready"
    STOPPED = "stopped"


class Debouncer:
    """
    Trailing-edge debounce on the running event loop.

    Each call restarts the timer; only the last arguments are delivered once
    `delay` seconds pass without another call.
    """

    def __init__(self, delay: float, callback: Callable):
        self.delay = delay
        self.callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None

    def __call__(self, *args):
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, args)

    def _fire(self, args):
        self._handle = None
        self.callback(*args)

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def cancel(self):
        """Drop the pending call, if any. Safe to call repeatedly."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


def _noop(*args):
    pass


def _current_task():
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class FrameLoop:
    """
    Drives detection for one mounted video view.

    In recognition mode every processed frame is classified and the caller
    hears about the letter only when it changes. In training mode the
    extracted feature vector is emitted instead, debounced so a burst of
    frames produces a single emission.
    """

    def __init__(self, provider, recognizer=None, frame_source=None, *,
                 training_mode: bool = False,
                 on_hand_detected: Optional[Callable[[bool], None]] = None,
                 on_letter_recognized: Optional[Callable[[str], None]] = None,
                 on_feature_extracted: Optional[Callable[[tuple], None]] = None,
                 on_notify: Optional[Callable[[str], None]] = None,
                 on_error: Optional[Callable[[str], None]] = None,
                 overlay=None,
                 frame_skip: int = FRAME_SKIP,
                 toast_cooldown: float = HAND_TOAST_COOLDOWN,
                 feature_debounce: float = FEATURE_DEBOUNCE,
                 clock: Callable[[], float] = time.monotonic):
        """
        Args:
            provider: LandmarkProvider with load() and detect(frame)
            recognizer: SignRecognizer used in recognition mode
            frame_source: Object with an async next_frame() (None ends the stream)
            training_mode: Emit features instead of letters
            on_hand_detected: Called with the new hand-presence state on change
            on_letter_recognized: Called with the new letter ("" for none) on change
            on_feature_extracted: Called with a debounced feature vector in training mode
            on_notify: Called with short user-facing messages
            on_error: Called with a message when the model fails to load
            overlay: LandmarkOverlay to draw on, optional
            frame_skip: Process every Nth frame
            toast_cooldown: Minimum seconds between "Hand detected" notifications
            feature_debounce: Seconds to coalesce feature emissions
            clock: Monotonic time source in seconds
        """
        if frame_skip < 1:
            raise ValueError("frame_skip must be at least 1")
        if not training_mode and recognizer is None:
            raise ValueError("A recognizer is required in recognition mode")

        self.provider = provider
        self.recognizer = recognizer
        self.frame_source = frame_source
        self.training_mode = training_mode
        self.overlay = overlay
        self.frame_skip = frame_skip
        self.toast_cooldown = toast_cooldown
        self.clock = clock

        self.on_hand_detected = on_hand_detected or _noop
        self.on_letter_recognized = on_letter_recognized or _noop
        self.on_notify = on_notify or _noop
        self.on_error = on_error or _noop
        self._feature_debouncer = Debouncer(feature_debounce, on_feature_extracted or _noop)

        self.state = LoopState.UNINITIALIZED
        self.load_error: Optional[str] = None
        self.frame_index = 0
        self.processed_frames = 0
        self.hand_present = False
        self.current_letter = ""
        self._last_toast: Optional[float] = None
        self._alive = False
        self._task: Optional[asyncio.Task] = None

    @property
    def alive(self) -> bool:
        return self._alive

    async def mount(self):
        """
        Load the landmark model. A failure is final for this loop.

        Raises:
            ModelLoadError: if the model could not be loaded
        """
        if self.state is not LoopState.UNINITIALIZED:
            raise RuntimeError(f"Cannot mount a loop in state {self.state.value}")

        self.state = LoopState.MODEL_LOADING
        self._alive = True
        try:
            await asyncio.to_thread(self.provider.load)
        except Exception as e:
            self.state = LoopState.MODEL_FAILED
            self._alive = False
            self.load_error = str(e)
            logger.error("Hand detection model failed to load: %s", e)
            self.on_error(f"Hand detection model failed to load: {e}. Reload to try again.")
            if isinstance(e, ModelLoadError):
                raise
            raise ModelLoadError(str(e)) from e

        if not self._alive:
            # stopped while the model was loading
            return

        self.state = LoopState.READY
        logger.info("Frame loop ready (%s mode)", "training" if self.training_mode else "recognition")
        self.on_notify("Hand detection model loaded")

    async def run(self):
        """Mount if needed, then process frames until stopped or the source ends."""
        if self.state is LoopState.UNINITIALIZED:
            await self.mount()
        if self.state is not LoopState.READY:
            return
        if self.frame_source is None:
            raise RuntimeError("No frame source to run on")

        self._task = asyncio.current_task()
        try:
            while self._alive:
                frame = await self.frame_source.next_frame()
                if not self._alive or frame is None:
                    break
                await self.step(frame)
        except asyncio.CancelledError:
            logger.debug("Frame loop cancelled")
        finally:
            self._task = None
            self.stop()

    async def step(self, frame):
        """Count a frame and process it unless it falls between processed frames."""
        self.frame_index += 1
        if (self.frame_index - 1) % self.frame_skip:
            return
        await self.process_frame(frame)

    async def process_frame(self, frame):
        """Detect and handle one frame. Errors are logged and the frame skipped."""
        if not self._alive:
            return
        try:
            detections = await asyncio.to_thread(self.provider.detect, frame)
            if not self._alive:
                return
            self.process_detections(detections, frame)
        except Exception:
            logger.exception("Error processing frame %d", self.frame_index)

    def process_detections(self, detections, frame=None):
        """
        Apply one frame's detections: presence edge, letter or features, overlay.

        Args:
            detections: List of 0 or 1 Detection
            frame: Frame the detections came from, for the overlay
        """
        if not self._alive:
            return
        self.processed_frames += 1

        landmarks = detections[0].landmarks if detections else None
        hand_detected = landmarks is not None and len(landmarks) > 0
        self._update_hand_presence(hand_detected)

        if not hand_detected:
            if not self.training_mode:
                self._emit_letter("")
            if self.overlay is not None:
                self.overlay.clear(frame)
            return

        features = extract_features(landmarks)
        if self.training_mode:
            if features:
                self._feature_debouncer(features)
        else:
            letter = self.recognizer.recognize_features(features) if features else ""
            self._emit_letter(letter)

        if self.overlay is not None and frame is not None:
            self.overlay.draw(frame, landmarks)

    def _update_hand_presence(self, hand_detected: bool):
        if hand_detected == self.hand_present:
            return
        self.hand_present = hand_detected
        self.on_hand_detected(hand_detected)

        if hand_detected:
            now = self.clock()
            if self._last_toast is None or now - self._last_toast >= self.toast_cooldown:
                self._last_toast = now
                self.on_notify("Hand detected")

    def _emit_letter(self, letter: str):
        if letter == self.current_letter:
            return
        self.current_letter = letter
        self.on_letter_recognized(letter)

    def stop(self):
        """Tear the loop down. Safe to call more than once."""
        self._alive = False
        self._feature_debouncer.cancel()
        if self._task is not None and self._task is not _current_task():
            self._task.cancel()
        self._task = None
        if self.state is not LoopState.MODEL_FAILED:
            self.state = LoopState.STOPPED

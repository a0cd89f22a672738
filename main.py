"""
Webcam window for fingerspelling recognition and training.

Usage:
    python main.py                      # recognize with the active language
    python main.py --language FSL
    python main.py --mode train
"""
import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path

import cv2

from src.fingerspell.core import config
from src.fingerspell.core.errors import FingerspellError, ModelLoadError
from src.fingerspell.core.languages import SignLanguage, parse_language
from src.fingerspell.core.session_manager import RecognitionSession, TrainingSession
from src.fingerspell.detection import FrameLoop, LandmarkOverlay, MediaPipeHandProvider
from src.fingerspell.detection.classifier import NearestNeighborClassifier
from src.fingerspell.detection.recognizer import SignRecognizer
from src.fingerspell.training import FileStorage, ReferenceStore
from src.fingerspell.video import VideoCapture

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

WINDOW_NAME = "Fingerspell"
KEY_ESC = 27
KEY_ENTER = 13
KEY_BACKSPACE = 8
KEY_TAB = 9
CONFIRM_WINDOW = 3.0  # seconds to press the clear key a second time


class PreviewSource:
    """Frame source for the loop that remembers the last frame for display."""

    def __init__(self, camera):
        self.camera = camera
        self.frame = None

    async def next_frame(self):
        frame = await self.camera.next_frame()
        if frame is not None:
            self.frame = frame
        return frame


class App:
    def __init__(self, args, store=None, camera=None, provider=None):
        self.args = args
        self.store = store if store is not None else ReferenceStore(FileStorage(config.STORAGE_DIR))
        self.export_dir = Path(args.export_dir) if args.export_dir else config.EXPORT_DIR
        if args.language:
            self.store.active_language = parse_language(args.language)

        self.training = args.mode == "train"
        self.message = ""
        self.message_until = 0.0
        self.clear_requested_at = None

        threshold = args.threshold

        def make_recognizer(language, store):
            return SignRecognizer(language, store, NearestNeighborClassifier(threshold=threshold))

        if self.training:
            self.session = TrainingSession(self.store)
        else:
            self.session = RecognitionSession(self.store, recognizer_factory=make_recognizer)

        self.camera = camera if camera is not None else VideoCapture(args.camera)
        self.source = PreviewSource(self.camera)
        self.overlay = LandmarkOverlay()
        self.loop = self._build_loop(provider or MediaPipeHandProvider(args.model))

    def _build_loop(self, provider):
        if self.training:
            return FrameLoop(
                provider,
                frame_source=self.source,
                training_mode=True,
                on_hand_detected=self.session.handle_hand_detected,
                on_feature_extracted=self.session.handle_features,
                on_notify=self.notify,
                on_error=self.notify,
                overlay=self.overlay,
            )
        return FrameLoop(
            provider,
            self.session.recognizer,
            self.source,
            on_hand_detected=self.session.handle_hand_detected,
            on_letter_recognized=self.on_letter,
            on_notify=self.notify,
            on_error=self.notify,
            overlay=self.overlay,
        )

    def notify(self, message, duration=1.5):
        logger.info(message)
        self.message = message
        self.message_until = time.monotonic() + duration

    def on_letter(self, letter):
        if self.session.handle_letter(letter):
            self.notify(f"Recognized: {letter}")

    # Key handling

    def handle_key(self, key):
        """Returns False when the user asked to quit."""
        if key == KEY_ESC:
            return False
        try:
            if self.training:
                self._handle_training_key(key)
            else:
                self._handle_recognition_key(key)
        except FingerspellError as e:
            self.notify(str(e), duration=3.0)
        return True

    def _handle_recognition_key(self, key):
        if key == KEY_TAB:
            languages = list(SignLanguage)
            current = languages.index(self.session.language)
            language = languages[(current + 1) % len(languages)]
            # the loop holds the recognizer by reference, so swap it there too
            self.loop.recognizer = self.session.change_language(language)
            self.notify(f"Switched to {language.display_name}")
        elif key == KEY_BACKSPACE:
            self.session.clear_history()
            self.notify("History cleared")

    def _handle_training_key(self, key):
        if key == ord(' '):
            count = self.session.capture_sample()
            self.notify(f"Sample #{count} captured for letter {self.session.selected_letter}")
        elif key == KEY_ENTER:
            letter, count = self.session.selected_letter, self.session.sample_count
            self.session.save()
            self.notify(f"{count} samples for letter {letter} saved")
        elif key == KEY_BACKSPACE:
            self.session.discard()
            self.notify("Samples discarded")
        elif key == ord('1'):
            self._export()
        elif key == ord('2'):
            self._import()
        elif key == ord('3'):
            self._clear()
        elif key in (ord(']'), ord('[')):
            self.session.step_letter(1 if key == ord(']') else -1)
            self.notify(f"Training letter {self.session.selected_letter}")
        elif ord('a') <= key <= ord('z'):
            self.session.select_letter(chr(key).upper())
            self.notify(f"Training letter {self.session.selected_letter}")

    def _export_path(self):
        return self.export_dir / f"{self.session.language.value.lower()}-training-data.json"

    def _export(self):
        path = self._export_path()
        try:
            self.export_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(self.store.export_json(self.session.language), encoding="utf-8")
        except OSError as e:
            logger.error("Export failed: %s", e)
            self.notify(f"Export failed: {e}", duration=3.0)
            return
        self.notify(f"Exported to {path}")

    def _import(self):
        path = self._export_path()
        if not path.exists():
            self.notify(f"No file to import at {path}", duration=3.0)
            return
        try:
            payload = path.read_bytes()
        except OSError as e:
            logger.error("Import failed: %s", e)
            self.notify(f"Import failed: {e}", duration=3.0)
            return
        # undecodable or malformed files raise InvalidImportError
        entries = self.store.import_json(payload, self.session.language)
        self.notify(f"Imported {len(entries)} letters")

    def _clear(self):
        now = time.monotonic()
        if self.clear_requested_at is None or now - self.clear_requested_at > CONFIRM_WINDOW:
            self.clear_requested_at = now
            self.notify("Press 3 again to delete all training data", duration=CONFIRM_WINDOW)
            return
        self.clear_requested_at = None
        self.store.clear(self.session.language)
        self.notify("Training data cleared")

    # Display

    def status_line(self):
        if self.training:
            hand = "YES" if self.session.hand_detected else "NO"
            letter = self.session.selected_letter or "-"
            return f"Hand: {hand} | Letter: {letter} | Samples: {self.session.sample_count}"
        hand = "YES" if self.session.hand_detected else "NO"
        history = " ".join(self.session.get_history())
        return f"{self.session.language.value} | Hand: {hand} | {self.session.current_letter or '-'} | {history}"

    def render(self):
        image = self.overlay.image if self.overlay.image is not None else self.source.frame
        if image is None:
            return
        image = image.copy()
        color = (0, 255, 0) if self.session.hand_detected else (0, 0, 255)
        cv2.putText(image, self.status_line(), (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.6, color, 2)
        if self.message and time.monotonic() < self.message_until:
            cv2.putText(image, self.message, (10, 60), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (200, 200, 200), 1)
        cv2.imshow(WINDOW_NAME, image)

    async def display(self, loop_task):
        while not loop_task.done():
            self.render()
            key = cv2.waitKey(1) & 0xFF
            if key != 0xFF and not self.handle_key(key):
                break
            await asyncio.sleep(0.01)
        self.loop.stop()

    async def run(self):
        if not self.training:
            self.notify(self.session.ready_message(), duration=3.0)
        loop_task = asyncio.create_task(self.loop.run())
        try:
            await self.display(loop_task)
            await loop_task
        finally:
            self.loop.stop()
            self.loop.provider.close()
            self.camera.release()
            cv2.destroyAllWindows()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Fingerspelling recognition from a webcam")
    parser.add_argument('--mode', choices=('recognize', 'train'), default='recognize',
                        help='Recognize letters or capture training samples')
    parser.add_argument('--language', type=str, default=None,
                        help='ASL or FSL (defaults to the last language used)')
    parser.add_argument('--threshold', type=float, default=config.CLASSIFICATION_THRESHOLD,
                        help='Maximum distance for a confident match')
    parser.add_argument('--model', type=str, default=None,
                        help='Path to hand_landmarker.task')
    parser.add_argument('--camera', type=int, default=0, help='Camera index')
    parser.add_argument('--export-dir', type=str, default=None,
                        help='Directory for exported training data')
    return parser.parse_args(argv)


def main():
    args = parse_args()

    try:
        app = App(args)
    except (ValueError, FingerspellError) as e:
        logger.error(str(e))
        sys.exit(1)

    print("Controls:")
    print("  ESC: Quit")
    if app.training:
        print("  A-Z: Select letter   [ ]: Previous/next letter   SPACE: Capture   ENTER: Save   BACKSPACE: Discard")
        print("  1: Export   2: Import   3: Clear (press twice)")
    else:
        print("  TAB: Switch language   BACKSPACE: Clear history")

    try:
        asyncio.run(app.run())
    except ModelLoadError as e:
        logger.error("Reload required: %s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()

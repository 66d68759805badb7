"""Camera scanning loop.

A token source reads frames from a camera and yields every decoded QR payload
until it is cancelled. ``ScanLoop`` consumes those payloads, drops a repeat of
the token it has just handled while the debounce period runs, and pauses the
source while a mark-attendance call is in flight.
"""
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

import cv2

from qr_attendance.client.api_client import ApiClient, ApiError

logger = logging.getLogger(__name__)

DEFAULT_SCAN_INTERVAL = 0.5  # seconds between captured frames
DEFAULT_DEBOUNCE = 2.0       # seconds a just-handled token is ignored

def decode_frame(frame, detector=None) -> Optional[str]:
    """Decode the first QR code in an OpenCV frame, if any."""
    if frame is None:
        return None
    detector = detector or cv2.QRCodeDetector()
    data, _points, _ = detector.detectAndDecode(frame)
    return data or None

def decode_image(path: str) -> Optional[str]:
    """Decode a QR code from an image file, e.g. a photo taken on a phone."""
    frame = cv2.imread(path)
    if frame is None:
        raise ValueError(f"Cannot read image: {path}")
    return decode_frame(frame)

class CameraTokenSource:
    """Cancellable producer of decoded QR tokens from a camera."""

    def __init__(
        self,
        camera_index: int = 0,
        interval: float = DEFAULT_SCAN_INTERVAL,
        capture_factory: Callable = None,
        detector=None
    ):
        self.camera_index = camera_index
        self.interval = interval
        self.capture_factory = capture_factory or cv2.VideoCapture
        self.detector = detector

    def tokens(self, stop: threading.Event, paused: Optional[threading.Event] = None) -> Iterator[str]:
        capture = self.capture_factory(self.camera_index)
        if not capture.isOpened():
            raise RuntimeError(f"Could not open camera {self.camera_index}")

        detector = self.detector or cv2.QRCodeDetector()
        try:
            while not stop.is_set():
                ok, frame = capture.read()
                if not ok:
                    logger.warning("Camera %s stopped delivering frames", self.camera_index)
                    break

                if paused is None or not paused.is_set():
                    token = decode_frame(frame, detector)
                    if token:
                        yield token

                stop.wait(self.interval)
        finally:
            capture.release()

@dataclass
class ScanOutcome:
    token: str
    ok: bool
    message: str
    name: Optional[str] = None

class ScanLoop:
    """Consumes decoded tokens and marks attendance for each distinct scan."""

    def __init__(
        self,
        client: ApiClient,
        event_type: str,
        debounce: float = DEFAULT_DEBOUNCE,
        on_outcome: Optional[Callable[[ScanOutcome], None]] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        if event_type not in ('in', 'out'):
            raise ValueError("event_type must be 'in' or 'out'")

        self.client = client
        self.event_type = event_type
        self.debounce = debounce
        self.on_outcome = on_outcome
        self.clock = clock

        self.stop_event = threading.Event()
        self.in_flight = threading.Event()
        self._last_token: Optional[str] = None
        self._last_handled_at = 0.0

    def is_debounced(self, token: str) -> bool:
        return (
            token == self._last_token
            and self.clock() - self._last_handled_at < self.debounce
        )

    def handle(self, token: str) -> Optional[ScanOutcome]:
        """Mark attendance for ``token``; returns None when the scan is ignored."""
        if self.in_flight.is_set() or self.is_debounced(token):
            return None

        self.in_flight.set()
        try:
            result = self.client.mark(token, self.event_type)
            name = (result or {}).get('attendee', {}).get('name')
            outcome = ScanOutcome(token=token, ok=True, message='Attendance marked successfully', name=name)
            logger.info("Marked %s for %s", self.event_type, name)
        except ApiError as e:
            outcome = ScanOutcome(token=token, ok=False, message=e.message)
            logger.info("Scan of %s rejected: %s", token, e)
            if e.status == 401:
                # Session expired or revoked, scanning cannot continue
                self.stop()
        finally:
            self._last_token = token
            self._last_handled_at = self.clock()
            self.in_flight.clear()

        if self.on_outcome:
            self.on_outcome(outcome)
        return outcome

    def run(self, source, stop_after_success: bool = False) -> int:
        """Consume ``source`` until stopped. Returns the number of successful marks."""
        marked = 0
        for token in source.tokens(self.stop_event, self.in_flight):
            outcome = self.handle(token)
            if outcome and outcome.ok:
                marked += 1
                if stop_after_success:
                    self.stop()
            if self.stop_event.is_set():
                break
        return marked

    def stop(self) -> None:
        self.stop_event.set()

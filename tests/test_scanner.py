"""Scan loop: debouncing, in-flight pausing and stopping."""
import threading

import pytest

from qr_attendance.client.api_client import ApiError
from qr_attendance.client.scanner import CameraTokenSource, ScanLoop, decode_frame

class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now

class FakeClient:
    """Records marks; tokens listed in ``errors`` fail with the given ApiError."""

    def __init__(self, errors=None):
        self.errors = errors or {}
        self.marked = []

    def mark(self, qr_code, event_type):
        if qr_code in self.errors:
            raise self.errors[qr_code]
        self.marked.append((qr_code, event_type))
        return {'attendee': {'name': f'Owner of {qr_code}', 'type': event_type}}

class ListSource:
    """Token source replaying a fixed list of decoded tokens."""

    def __init__(self, tokens):
        self._tokens = tokens
        self.paused_seen = []

    def tokens(self, stop, paused=None):
        for token in self._tokens:
            if stop.is_set():
                return
            self.paused_seen.append(paused.is_set())
            yield token

def test_marks_each_scan():
    client = FakeClient()
    outcomes = []
    loop = ScanLoop(client, 'in', on_outcome=outcomes.append)

    outcome = loop.handle('ABC123')

    assert outcome.ok
    assert outcome.name == 'Owner of ABC123'
    assert client.marked == [('ABC123', 'in')]
    assert outcomes == [outcome]

def test_same_token_is_debounced():
    client = FakeClient()
    clock = FakeClock()
    loop = ScanLoop(client, 'in', debounce=2.0, clock=clock)

    loop.handle('ABC123')
    clock.now += 1.0
    assert loop.handle('ABC123') is None

    clock.now += 1.5
    assert loop.handle('ABC123') is not None
    assert len(client.marked) == 2

def test_other_token_is_not_debounced():
    client = FakeClient()
    loop = ScanLoop(client, 'out', clock=FakeClock())

    loop.handle('ABC123')
    loop.handle('XYZ789')

    assert client.marked == [('ABC123', 'out'), ('XYZ789', 'out')]

def test_scans_ignored_while_request_in_flight():
    client = FakeClient()
    loop = ScanLoop(client, 'in')
    loop.in_flight.set()

    assert loop.handle('ABC123') is None
    assert client.marked == []

def test_in_flight_cleared_after_failure():
    client = FakeClient(errors={'BAD': ApiError(404, 'Attendee not found')})
    loop = ScanLoop(client, 'in')

    outcome = loop.handle('BAD')

    assert not outcome.ok
    assert outcome.message == 'Attendee not found'
    assert not loop.in_flight.is_set()
    assert not loop.stop_event.is_set()

def test_expired_session_stops_loop():
    client = FakeClient(errors={'ABC123': ApiError(401, 'Token has expired')})
    loop = ScanLoop(client, 'in', clock=FakeClock())
    source = ListSource(['ABC123', 'XYZ789'])

    assert loop.run(source) == 0
    assert loop.stop_event.is_set()
    assert client.marked == []

def test_run_counts_successes_and_skips_repeats():
    client = FakeClient(errors={'BAD': ApiError(400, 'Attendance already marked')})
    loop = ScanLoop(client, 'in', clock=FakeClock())
    source = ListSource(['ABC123', 'ABC123', 'ABC123', 'BAD', 'XYZ789'])

    assert loop.run(source) == 2
    assert client.marked == [('ABC123', 'in'), ('XYZ789', 'in')]
    assert not any(source.paused_seen)

def test_stop_after_first_success():
    client = FakeClient()
    loop = ScanLoop(client, 'in', clock=FakeClock())

    assert loop.run(ListSource(['ABC123', 'XYZ789']), stop_after_success=True) == 1
    assert client.marked == [('ABC123', 'in')]

def test_rejects_unknown_direction():
    with pytest.raises(ValueError):
        ScanLoop(FakeClient(), 'sideways')

class FakeDetector:
    def __init__(self, payloads):
        self.payloads = list(payloads)

    def detectAndDecode(self, frame):
        return (self.payloads.pop(0) if self.payloads else ''), None, None

class FakeCapture:
    def __init__(self, frames, opened=True):
        self.frames = frames
        self.opened = opened
        self.released = False

    def isOpened(self):
        return self.opened

    def read(self):
        if not self.frames:
            return False, None
        return True, self.frames.pop(0)

    def release(self):
        self.released = True

def test_camera_source_yields_decoded_tokens():
    capture = FakeCapture(frames=['f1', 'f2', 'f3'])
    source = CameraTokenSource(interval=0, capture_factory=lambda index: capture,
                               detector=FakeDetector(['ABC123', '', 'XYZ789']))

    tokens = list(source.tokens(threading.Event()))

    assert tokens == ['ABC123', 'XYZ789']
    assert capture.released

def test_camera_source_skips_frames_while_paused():
    capture = FakeCapture(frames=['f1', 'f2'])
    detector = FakeDetector(['ABC123', 'XYZ789'])
    source = CameraTokenSource(interval=0, capture_factory=lambda index: capture, detector=detector)
    paused = threading.Event()
    paused.set()

    assert list(source.tokens(threading.Event(), paused)) == []
    assert detector.payloads == ['ABC123', 'XYZ789']

def test_camera_source_stops_on_request():
    capture = FakeCapture(frames=['f1', 'f2', 'f3'])
    source = CameraTokenSource(interval=0, capture_factory=lambda index: capture,
                               detector=FakeDetector(['ABC123', 'XYZ789', 'QQQ']))
    stop = threading.Event()

    tokens = []
    for token in source.tokens(stop):
        tokens.append(token)
        stop.set()

    assert tokens == ['ABC123']
    assert capture.released

def test_camera_that_cannot_open():
    source = CameraTokenSource(capture_factory=lambda index: FakeCapture([], opened=False))

    with pytest.raises(RuntimeError):
        list(source.tokens(threading.Event()))

def test_decode_frame_without_frame():
    assert decode_frame(None) is None

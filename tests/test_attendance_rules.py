"""Check-in/check-out rules applied when a QR code is scanned."""
from datetime import timedelta

import pytest

from qr_attendance.exceptions import (
    DuplicateEventError, NotFoundError, SequenceError, ValidationError
)
from qr_attendance.models.attendance import AttendanceEvent, EventType
from qr_attendance.services.attendance_service import AttendanceService

def test_check_in_records_one_event(make_attendee, noon_today):
    attendee = make_attendee()

    event, name = AttendanceService.mark_attendance('ABC123', 'in', now=noon_today)

    assert name == 'Jane Doe'
    assert event.type == EventType.IN
    assert event.date == noon_today
    assert event.attendee_id == attendee.id
    assert AttendanceEvent.query.count() == 1

def test_unknown_qr_code_is_not_found(make_attendee, noon_today):
    make_attendee()

    with pytest.raises(NotFoundError):
        AttendanceService.mark_attendance('XYZ', 'in', now=noon_today)

    assert AttendanceEvent.query.count() == 0

@pytest.mark.parametrize('qr, event_type', [('', 'in'), ('   ', 'in'), ('ABC123', 'sideways')])
def test_invalid_input_is_rejected(make_attendee, noon_today, qr, event_type):
    make_attendee()

    with pytest.raises(ValidationError):
        AttendanceService.mark_attendance(qr, event_type, now=noon_today)

@pytest.mark.parametrize('event_type', ['in', 'out'])
def test_same_direction_twice_within_window_is_duplicate(make_attendee, noon_today, event_type):
    make_attendee()
    if event_type == 'out':
        AttendanceService.mark_attendance('ABC123', 'in', now=noon_today - timedelta(hours=1))

    AttendanceService.mark_attendance('ABC123', event_type, now=noon_today)
    before = AttendanceEvent.query.count()

    with pytest.raises(DuplicateEventError):
        AttendanceService.mark_attendance('ABC123', event_type, now=noon_today + timedelta(minutes=4, seconds=59))

    assert AttendanceEvent.query.count() == before

def test_duplicate_window_slides_with_now(make_attendee, noon_today):
    make_attendee()
    AttendanceService.mark_attendance('ABC123', 'in', now=noon_today)

    with pytest.raises(DuplicateEventError):
        AttendanceService.mark_attendance('ABC123', 'in', now=noon_today + timedelta(minutes=5))

    event, _ = AttendanceService.mark_attendance('ABC123', 'in', now=noon_today + timedelta(minutes=5, seconds=1))

    assert event.type == EventType.IN
    assert AttendanceEvent.query.filter_by(type=EventType.IN).count() == 2

def test_opposite_direction_is_not_a_duplicate(make_attendee, noon_today):
    make_attendee()
    AttendanceService.mark_attendance('ABC123', 'in', now=noon_today)

    event, _ = AttendanceService.mark_attendance('ABC123', 'out', now=noon_today + timedelta(minutes=1))

    assert event.type == EventType.OUT

def test_check_out_without_check_in_today_fails(make_attendee, noon_today):
    make_attendee()

    with pytest.raises(SequenceError):
        AttendanceService.mark_attendance('ABC123', 'out', now=noon_today)

    assert AttendanceEvent.query.count() == 0

def test_check_in_yesterday_does_not_allow_check_out_today(make_attendee, noon_today):
    make_attendee()
    # Less than 24 hours ago but before local midnight
    AttendanceService.mark_attendance('ABC123', 'in', now=noon_today.replace(hour=0) - timedelta(minutes=30))

    with pytest.raises(SequenceError):
        AttendanceService.mark_attendance('ABC123', 'out', now=noon_today.replace(hour=6))

def test_check_in_then_check_out_stores_two_events_in_order(make_attendee, noon_today):
    attendee = make_attendee()

    AttendanceService.mark_attendance('ABC123', 'in', now=noon_today)
    AttendanceService.mark_attendance('ABC123', 'out', now=noon_today + timedelta(minutes=6))

    events = AttendanceEvent.query.filter_by(attendee_id=attendee.id).order_by(AttendanceEvent.date).all()
    assert [e.type for e in events] == [EventType.IN, EventType.OUT]
    assert events[1].date - events[0].date == timedelta(minutes=6)

def test_check_in_of_another_attendee_does_not_count(make_attendee, noon_today):
    make_attendee()
    make_attendee(reg_no='U200', qr='OTHER1', name='John Roe')
    AttendanceService.mark_attendance('OTHER1', 'in', now=noon_today)

    with pytest.raises(SequenceError):
        AttendanceService.mark_attendance('ABC123', 'out', now=noon_today + timedelta(minutes=1))

def test_duplicate_window_is_configurable(app, make_attendee, noon_today):
    app.config['DUPLICATE_SCAN_WINDOW'] = timedelta(minutes=1)
    make_attendee()
    AttendanceService.mark_attendance('ABC123', 'in', now=noon_today)

    event, _ = AttendanceService.mark_attendance('ABC123', 'in', now=noon_today + timedelta(minutes=2))

    assert event.type == EventType.IN

def test_delete_record_removes_only_that_event(make_attendee, noon_today):
    make_attendee()
    first, _ = AttendanceService.mark_attendance('ABC123', 'in', now=noon_today)
    second, _ = AttendanceService.mark_attendance('ABC123', 'out', now=noon_today + timedelta(minutes=10))
    second_id = second.id

    deleted = AttendanceService.delete_record(first.id)

    assert deleted['type'] == 'in'
    assert [e.id for e in AttendanceEvent.query.all()] == [second_id]

def test_delete_missing_record_is_not_found(app):
    with pytest.raises(NotFoundError):
        AttendanceService.delete_record(999)

"""Attendance rule engine.

Decides whether a scanned QR token may be recorded as a new check-in or
check-out right now:

1. the token must resolve to an attendee,
2. the same direction must not have been marked for that attendee within the
   trailing duplicate window (a sliding window ending at ``now``),
3. a departure needs at least one arrival since local midnight.

Only when all checks pass is a single event written. The checks and the write
are not wrapped in one transaction, so two scans of the same code racing
inside the window can both be recorded.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple, Union

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from qr_attendance import db
from qr_attendance.exceptions import (
    DuplicateEventError, NotFoundError, SequenceError, StorageError, ValidationError
)
from qr_attendance.models.attendance import AttendanceEvent, EventType
from qr_attendance.services.attendee_service import AttendeeService
from qr_attendance.utils.helpers import local_midnight, local_now

logger = logging.getLogger(__name__)

DEFAULT_DUPLICATE_WINDOW = timedelta(minutes=5)

DIRECTION_LABELS = {
    EventType.IN: 'arrival',
    EventType.OUT: 'departure'
}

class AttendanceService:
    """Service applying the check-in/check-out rules."""
    
    @staticmethod
    def _duplicate_window() -> timedelta:
        return current_app.config.get('DUPLICATE_SCAN_WINDOW', DEFAULT_DUPLICATE_WINDOW)
    
    @staticmethod
    def parse_event_type(value: Union[str, EventType]) -> EventType:
        if isinstance(value, EventType):
            return value
        try:
            return EventType(value)
        except ValueError:
            raise ValidationError("Attendance type must be 'in' or 'out'")
    
    @staticmethod
    def mark_attendance(
        qr_token: str,
        event_type: Union[str, EventType],
        now: Optional[datetime] = None
    ) -> Tuple[AttendanceEvent, str]:
        """Record a check-in or check-out for the attendee holding ``qr_token``.
        
        Returns the created event and the attendee's display name.
        """
        if not qr_token or not str(qr_token).strip():
            raise ValidationError("Invalid QR code")
        
        event_type = AttendanceService.parse_event_type(event_type)
        now = now or local_now()
        
        attendee = AttendeeService.get_by_qr_token(str(qr_token).strip())
        if not attendee:
            raise NotFoundError("Attendee not found")
        
        window_start = now - AttendanceService._duplicate_window()
        recent = AttendanceEvent.query.filter(
            AttendanceEvent.attendee_id == attendee.id,
            AttendanceEvent.type == event_type,
            AttendanceEvent.date >= window_start,
            AttendanceEvent.date <= now
        ).first()
        
        if recent:
            minutes = int(AttendanceService._duplicate_window().total_seconds() // 60)
            raise DuplicateEventError(
                f"Attendance already marked for {DIRECTION_LABELS[event_type]} "
                f"in the last {minutes} minutes"
            )
        
        if event_type == EventType.OUT and not AttendanceService.has_checked_in_today(attendee.id, now):
            raise SequenceError("Cannot mark departure without first marking arrival for today")
        
        event = AttendanceEvent(attendee_id=attendee.id, type=event_type, date=now)
        try:
            event.save()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Could not store attendance event: %s", e)
            raise StorageError("Error marking attendance")
        
        logger.info(
            "Marked %s for %s (%s) at %s",
            event_type.value, attendee.full_name, attendee.university_reg_no, now.isoformat()
        )
        return event, attendee.full_name
    
    @staticmethod
    def has_checked_in_today(attendee_id: int, now: datetime) -> bool:
        """True when the attendee has an arrival between local midnight and ``now``."""
        check_in = AttendanceEvent.query.filter(
            AttendanceEvent.attendee_id == attendee_id,
            AttendanceEvent.type == EventType.IN,
            AttendanceEvent.date >= local_midnight(now),
            AttendanceEvent.date <= now
        ).first()
        return check_in is not None
    
    @staticmethod
    def delete_record(record_id: int) -> dict:
        """Delete a single attendance event and return its last state."""
        record = AttendanceEvent.get_by_id(record_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        
        data = record.to_dict()
        record.delete()
        logger.info("Deleted attendance record %s", record_id)
        return data
    
    @staticmethod
    def history(limit: Optional[int] = None):
        """Latest events, newest first."""
        limit = limit or current_app.config.get('HISTORY_LIMIT', 100)
        return AttendanceEvent.query.order_by(
            AttendanceEvent.date.desc(), AttendanceEvent.id.desc()
        ).limit(limit).all()

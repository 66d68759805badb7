"""Attendance event model: one check-in or check-out."""
import enum
from datetime import datetime
from qr_attendance import db
from qr_attendance.models.base import BaseModel

class EventType(enum.Enum):
    """Direction of an attendance event."""
    IN = 'in'      # arrival
    OUT = 'out'    # departure

class AttendanceEvent(BaseModel):
    """Timestamped check-in/check-out record. Never mutated after insert."""
    
    __tablename__ = 'attendance_events'
    
    attendee_id = db.Column(db.Integer, db.ForeignKey('attendees.id'), nullable=False, index=True)
    type = db.Column(db.Enum(EventType), nullable=False)
    # Server-local time, the day boundary for check-out rules is local midnight
    date = db.Column(db.DateTime, default=datetime.now, nullable=False, index=True)
    
    def to_dict(self, include_attendee: bool = False) -> dict:
        """Convert to dictionary."""
        result = {
            'id': self.id,
            'attendeeId': self.attendee_id,
            'type': self.type.value if self.type else None,
            'date': self.date.isoformat() if self.date else None
        }
        
        if include_attendee:
            attendee = self.attendee
            result['attendee'] = {
                'id': attendee.id,
                'fullName': attendee.full_name,
                'universityRegNo': attendee.university_reg_no,
                'branch': attendee.branch
            } if attendee else None
        
        return result
    
    def __repr__(self):
        return f'<AttendanceEvent {self.attendee_id}-{self.type.value if self.type else None}>'

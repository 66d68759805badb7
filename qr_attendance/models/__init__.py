"""Models package with all models."""
from .base import BaseModel
from .user import User, UserRole
from .attendee import Attendee
from .attendance import AttendanceEvent, EventType

__all__ = [
    'BaseModel', 'User', 'UserRole',
    'Attendee', 'AttendanceEvent', 'EventType'
]

"""Attendee model: the roster entry a QR code points at."""
from qr_attendance import db
from qr_attendance.models.base import BaseModel, TimestampMixin

class Attendee(TimestampMixin, BaseModel):
    """Attendee identified by a QR token and a university registration number."""
    
    __tablename__ = 'attendees'
    
    # Identity
    full_name = db.Column(db.String(255), nullable=False)
    university_reg_no = db.Column(db.String(50), unique=True, nullable=False, index=True)
    branch = db.Column(db.String(100), nullable=False)
    qrcode_number = db.Column(db.String(255), unique=True, nullable=False, index=True)
    
    # Contact
    email = db.Column(db.String(255), nullable=True)
    mobile_no = db.Column(db.String(30), nullable=True)
    
    # Ticketing metadata carried over from CSV imports
    receipt_no = db.Column(db.String(100), nullable=True)
    ticket_type = db.Column(db.String(100), nullable=True)
    quantity = db.Column(db.Integer, default=1)
    signup_date = db.Column(db.DateTime, nullable=True)
    external_attendee_id = db.Column(db.String(100), nullable=True)
    
    # Relationships
    events = db.relationship(
        'AttendanceEvent',
        backref='attendee',
        lazy='dynamic',
        cascade='all, delete-orphan'
    )
    
    def to_summary(self) -> dict:
        """Minimal projection used by list endpoints."""
        return {
            'id': self.id,
            'qrcodeNumber': self.qrcode_number,
            'fullName': self.full_name,
            'universityRegNo': self.university_reg_no,
            'branch': self.branch
        }
    
    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'id': self.id,
            'fullName': self.full_name,
            'universityRegNo': self.university_reg_no,
            'branch': self.branch,
            'qrcodeNumber': self.qrcode_number,
            'email': self.email,
            'mobileNo': self.mobile_no,
            'receiptNo': self.receipt_no,
            'ticketType': self.ticket_type,
            'quantity': self.quantity,
            'signupDate': self.signup_date.isoformat() if self.signup_date else None,
            'attendeeId': self.external_attendee_id,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None
        }
    
    def __repr__(self) -> str:
        return f'<Attendee {self.university_reg_no}>'

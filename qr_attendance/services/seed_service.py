"""Database seeding service for sample data."""
import logging
import random
from datetime import datetime, timedelta

from qr_attendance import db
from qr_attendance.models.attendee import Attendee
from qr_attendance.utils.helpers import generate_qr_token

logger = logging.getLogger(__name__)

BRANCHES = ['CSE', 'ECE', 'ME', 'CE', 'IT']
FIRST_NAMES = ['Aarav', 'Diya', 'Ishaan', 'Meera', 'Rohan', 'Sara', 'Kabir', 'Anaya', 'Vivaan', 'Zoya']
LAST_NAMES = ['Sharma', 'Patel', 'Iyer', 'Khan', 'Das', 'Reddy', 'Nair', 'Gupta']

class SeedService:
    """Service to seed database with sample attendees."""
    
    @staticmethod
    def seed_attendees(count: int = 20) -> int:
        """Create ``count`` sample attendees with fresh QR tokens. Returns how many were added."""
        sequence = Attendee.query.count()
        created = 0
        
        while created < count:
            sequence += 1
            reg_no = f"U{sequence:04d}"
            if Attendee.query.filter_by(university_reg_no=reg_no).first():
                continue
            
            first, last = random.choice(FIRST_NAMES), random.choice(LAST_NAMES)
            attendee = Attendee(
                full_name=f"{first} {last}",
                university_reg_no=reg_no,
                branch=random.choice(BRANCHES),
                email=f"{first.lower()}.{last.lower()}{sequence}@example.com",
                qrcode_number=generate_qr_token(),
                ticket_type='General',
                quantity=1,
                signup_date=datetime.now() - timedelta(days=random.randint(0, 30))
            )
            db.session.add(attendee)
            created += 1
        
        db.session.commit()
        logger.info("Seeded %d attendees", created)
        return created

"""Attendee roster management service."""
import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from flask import current_app
from sqlalchemy.exc import IntegrityError

from qr_attendance import db
from qr_attendance.exceptions import ConflictError, NotFoundError
from qr_attendance.models.attendance import AttendanceEvent
from qr_attendance.models.attendee import Attendee

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ['full_name', 'university_reg_no', 'branch', 'email', 'mobile_no', 'qrcode_number']

class AttendeeService:
    """Service for managing attendees."""

    @staticmethod
    def list_attendees() -> List[Attendee]:
        return Attendee.query.order_by(Attendee.full_name.asc()).all()

    @staticmethod
    def get_attendee(attendee_id: int) -> Attendee:
        attendee = Attendee.get_by_id(attendee_id)
        if not attendee:
            raise NotFoundError("Attendee not found")
        return attendee

    @staticmethod
    def get_by_qr_token(qr_token: str) -> Optional[Attendee]:
        return Attendee.query.filter_by(qrcode_number=qr_token).first()

    @staticmethod
    def get_by_reg_no(university_reg_no: str) -> Optional[Attendee]:
        return Attendee.query.filter_by(university_reg_no=university_reg_no).first()

    @staticmethod
    def get_details(attendee_id: int, limit: Optional[int] = None) -> Tuple[Attendee, List[AttendanceEvent]]:
        """Attendee with its most recent attendance records, newest first."""
        attendee = AttendeeService.get_attendee(attendee_id)
        limit = limit or current_app.config.get('ATTENDEE_RECORDS_LIMIT', 50)

        records = attendee.events.order_by(
            AttendanceEvent.date.desc(), AttendanceEvent.id.desc()
        ).limit(limit).all()

        return attendee, records

    @staticmethod
    def _ensure_qr_available(qrcode_number: str, owner_id: Optional[int] = None) -> None:
        query = Attendee.query.filter(Attendee.qrcode_number == qrcode_number)
        if owner_id is not None:
            query = query.filter(Attendee.id != owner_id)

        if query.first():
            message = (
                "Another attendee with this QR code already exists" if owner_id is not None
                else "An attendee with this QR code already exists"
            )
            raise ConflictError(message, field='qrcodeNumber')

    @staticmethod
    def _ensure_reg_no_available(university_reg_no: str, owner_id: int) -> None:
        existing = Attendee.query.filter(
            Attendee.university_reg_no == university_reg_no,
            Attendee.id != owner_id
        ).first()

        if existing:
            raise ConflictError(
                "Another attendee with this registration number already exists",
                field='universityRegNo'
            )

    @staticmethod
    def _commit_or_conflict() -> None:
        """Commit, turning a unique index violation from a concurrent write into a conflict."""
        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            detail = str(e.orig).lower()
            field = 'qrcodeNumber' if 'qrcode_number' in detail else 'universityRegNo'
            raise ConflictError("Attendee with this %s already exists" % field, field=field)

    @staticmethod
    def create_attendee(
        full_name: str,
        university_reg_no: str,
        branch: str,
        qrcode_number: str,
        email: Optional[str] = None,
        mobile_no: Optional[str] = None
    ) -> Tuple[Attendee, bool]:
        """Create an attendee, or refresh the QR token of an existing registration number.

        Returns the attendee and whether it was newly created.
        """
        existing = AttendeeService.get_by_reg_no(university_reg_no)

        if existing:
            if existing.qrcode_number != qrcode_number:
                AttendeeService._ensure_qr_available(qrcode_number, owner_id=existing.id)
                existing.qrcode_number = qrcode_number
                AttendeeService._commit_or_conflict()
                logger.info("QR code updated for registration number %s", university_reg_no)
            return existing, False

        AttendeeService._ensure_qr_available(qrcode_number)

        attendee = Attendee(
            full_name=full_name,
            university_reg_no=university_reg_no,
            branch=branch,
            email=email,
            mobile_no=mobile_no,
            qrcode_number=qrcode_number,
            signup_date=datetime.now()
        )
        db.session.add(attendee)
        AttendeeService._commit_or_conflict()

        logger.info("Created attendee %s (%s)", attendee.full_name, attendee.university_reg_no)
        return attendee, True

    @staticmethod
    def update_attendee(attendee_id: int, **fields) -> Attendee:
        """Update any editable field, keeping QR token and registration number unique."""
        attendee = AttendeeService.get_attendee(attendee_id)

        reg_no = fields.get('university_reg_no')
        if reg_no and reg_no != attendee.university_reg_no:
            AttendeeService._ensure_reg_no_available(reg_no, attendee.id)

        qrcode_number = fields.get('qrcode_number')
        if qrcode_number:
            AttendeeService._ensure_qr_available(qrcode_number, owner_id=attendee.id)

        changes = {field: fields[field] for field in EDITABLE_FIELDS if field in fields}
        attendee.update(commit=False, **changes)

        AttendeeService._commit_or_conflict()
        logger.info("Updated attendee %s", attendee.id)
        return attendee

    @staticmethod
    def delete_attendee(attendee_id: int) -> Dict:
        """Delete an attendee and every attendance record it owns."""
        attendee = AttendeeService.get_attendee(attendee_id)
        data = attendee.to_dict()
        removed = attendee.events.count()

        attendee.delete()
        logger.info("Deleted attendee %s and %d attendance records", attendee_id, removed)

        data['deletedRecords'] = removed
        return data

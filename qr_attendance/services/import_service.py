"""CSV bulk import of attendees."""
import io
import logging
import os
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

import pandas as pd
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from qr_attendance import db
from qr_attendance.exceptions import StorageError, ValidationError
from qr_attendance.models.attendee import Attendee

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = [
    'Full Name',
    'qrcodeNumber',
    'University Registration No',
    'Branch'
]

TEMPLATE_COLUMNS = [
    'Receipt No', 'Full Name', 'Email Id', 'Mobile No', 'TicketType', 'Quantity',
    'qrcodeNumber', 'University Registration No', 'Branch', 'Signup Date', 'Attendee Id'
]

MERGE_KEYS = ('registration', 'qrcode')

MAX_QUANTITY = 2 ** 31 - 1

@dataclass
class ImportResult:
    """Outcome of a CSV import."""
    count: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    skipped_rows: List[Dict] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'count': self.count,
            'created': self.created,
            'updated': self.updated,
            'skipped': self.skipped
        }

def clean_mobile_no(value: Optional[str]) -> Optional[str]:
    """Strip spreadsheet artefacts such as ="0123" from a phone number."""
    if not value:
        return None
    return re.sub(r'[="\']', '', value) or None

def parse_quantity(value: Optional[str]) -> int:
    """Ticket quantity, 1 when missing, zero, unparseable or out of range."""
    try:
        quantity = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 1
    if not quantity or abs(quantity) > MAX_QUANTITY:
        return 1
    return quantity

def parse_signup_date(value: Optional[str], now: Optional[datetime] = None) -> datetime:
    """Parse a signup date, falling back to now when it is empty or malformed."""
    now = now or datetime.now()
    if not value:
        return now

    parsed = pd.to_datetime(value, errors='coerce')
    if pd.isna(parsed):
        return now
    parsed = parsed.to_pydatetime()
    if parsed.tzinfo is not None:
        # Stored times are server-local and naive
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed

def row_to_attendee_fields(row: Dict[str, str], now: Optional[datetime] = None) -> Dict:
    """Map one CSV row to Attendee column values."""
    def value(column):
        raw = row.get(column)
        return raw.strip() if isinstance(raw, str) and raw.strip() else None

    return {
        'receipt_no': value('Receipt No'),
        'full_name': value('Full Name'),
        'email': value('Email Id'),
        'mobile_no': clean_mobile_no(value('Mobile No')),
        'ticket_type': value('TicketType'),
        'quantity': parse_quantity(value('Quantity')),
        'qrcode_number': value('qrcodeNumber'),
        'university_reg_no': value('University Registration No'),
        'branch': value('Branch'),
        'signup_date': parse_signup_date(value('Signup Date'), now),
        'external_attendee_id': value('Attendee Id')
    }

class ImportService:
    """Upserts attendees from an uploaded CSV file."""

    @staticmethod
    def template_csv() -> str:
        """CSV template with the expected headers and one example row."""
        df = pd.DataFrame([{
            'Receipt No': 'R-0001',
            'Full Name': 'Jane Doe',
            'Email Id': 'jane@example.com',
            'Mobile No': '9876543210',
            'TicketType': 'General',
            'Quantity': 1,
            'qrcodeNumber': 'QR0001ABCDEF',
            'University Registration No': 'U100',
            'Branch': 'CSE',
            'Signup Date': '2024-01-15 10:30:00',
            'Attendee Id': 'A-0001'
        }], columns=TEMPLATE_COLUMNS)

        output = io.StringIO()
        df.to_csv(output, index=False)
        return output.getvalue()

    @staticmethod
    def save_upload(upload: FileStorage) -> str:
        """Store the uploaded file in the transient upload folder."""
        folder = current_app.config.get('UPLOAD_FOLDER', 'uploads')
        os.makedirs(folder, exist_ok=True)

        filename = secure_filename(upload.filename or 'import.csv') or 'import.csv'
        path = os.path.join(folder, f"{uuid.uuid4().hex}_{filename}")
        upload.save(path)
        return path

    @staticmethod
    def read_rows(path: str) -> List[Dict[str, str]]:
        """Read a CSV file into a list of string-valued rows."""
        try:
            df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding='utf-8-sig')
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise ValidationError(f"Error reading file: {str(e)}")

        df.columns = [str(column).strip() for column in df.columns]
        missing_columns = [col for col in REQUIRED_COLUMNS if col not in df.columns]
        if missing_columns:
            raise ValidationError(f"Missing columns: {', '.join(missing_columns)}")

        return df.to_dict(orient='records')

    @staticmethod
    def import_file(upload: FileStorage, merge_key: Optional[str] = None) -> ImportResult:
        """Save, import and always delete an uploaded CSV."""
        path = ImportService.save_upload(upload)
        try:
            return ImportService.import_csv(path, merge_key=merge_key)
        finally:
            if os.path.exists(path):
                os.remove(path)

    @staticmethod
    def import_csv(path: str, merge_key: Optional[str] = None) -> ImportResult:
        """Upsert every row of the CSV at ``path``."""
        merge_key = merge_key or current_app.config.get('IMPORT_MERGE_KEY', 'registration')
        if merge_key not in MERGE_KEYS:
            raise ValidationError(f"Unknown merge key: {merge_key}")

        rows = ImportService.read_rows(path)
        result = ImportResult(count=len(rows))
        now = datetime.now()

        try:
            for index, row in enumerate(rows):
                fields = row_to_attendee_fields(row, now)
                outcome = ImportService.upsert_row(fields, merge_key)

                if outcome == 'created':
                    result.created += 1
                elif outcome == 'updated':
                    result.updated += 1
                else:
                    result.skipped += 1
                    result.skipped_rows.append({'row': index + 2, 'reason': outcome})
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Import aborted: %s", e)
            raise StorageError(f"Error importing attendees: {str(e)}")

        for skipped in result.skipped_rows:
            logger.warning("Row %d skipped: %s", skipped['row'], skipped['reason'])
        logger.info(
            "Imported %d rows: %d created, %d updated, %d skipped",
            result.count, result.created, result.updated, result.skipped
        )
        return result

    @staticmethod
    def upsert_row(fields: Dict, merge_key: str = 'registration') -> str:
        """Insert or refresh one attendee. Returns 'created', 'updated' or a skip reason."""
        reg_no = fields.get('university_reg_no')
        qrcode_number = fields.get('qrcode_number')

        if not reg_no:
            return 'missing registration number'
        if not qrcode_number:
            return 'missing QR code'

        by_reg_no = Attendee.query.filter_by(university_reg_no=reg_no).first()
        by_qr = Attendee.query.filter_by(qrcode_number=qrcode_number).first()

        if merge_key == 'registration':
            existing, holder = by_reg_no, by_qr
            key_attr, refreshed = 'qrcode_number', qrcode_number
        else:
            existing, holder = by_qr, by_reg_no
            key_attr, refreshed = 'university_reg_no', reg_no

        if existing:
            if holder and holder.id != existing.id:
                logger.warning(
                    "Skipping row for %s: %s already belongs to attendee %s",
                    reg_no, key_attr, holder.id
                )
                return f'{key_attr} already used by another attendee'

            if getattr(existing, key_attr) != refreshed:
                setattr(existing, key_attr, refreshed)
                db.session.commit()
            return 'updated'

        if holder:
            logger.warning("Skipping row for %s: conflicts with attendee %s", reg_no, holder.id)
            return 'conflicting attendee already exists'

        if not fields.get('full_name') or not fields.get('branch'):
            return 'missing name or branch'

        db.session.add(Attendee(**fields))
        db.session.commit()
        return 'created'

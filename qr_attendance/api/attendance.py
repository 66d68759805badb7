"""Attendance API: roster management, scanning and reporting."""
import io

from flask import Blueprint, current_app, request, send_file
from flask_jwt_extended import jwt_required

from qr_attendance.exceptions import ValidationError
from qr_attendance.services.attendance_service import AttendanceService
from qr_attendance.services.attendee_service import AttendeeService
from qr_attendance.services.import_service import ImportService
from qr_attendance.services.qr_service import QRService
from qr_attendance.services.stats_service import StatsService
from qr_attendance.utils.decorators import admin_required, login_required
from qr_attendance.utils.helpers import success_response
from qr_attendance.utils.validators import AttendeeSchema, MarkAttendanceSchema

attendance_bp = Blueprint('attendance', __name__)

# =================== ATTENDEES ===================

@attendance_bp.route('/attendees', methods=['GET'])
@jwt_required()
@login_required
def get_attendees():
    """List attendees (minimal projection) sorted by name."""
    attendees = [attendee.to_summary() for attendee in AttendeeService.list_attendees()]
    return success_response(data=attendees)

@attendance_bp.route('/attendee', methods=['POST'])
@jwt_required()
@admin_required
def create_attendee():
    """Create attendee, or refresh the QR code of an existing registration number."""
    data = AttendeeSchema.load(request.get_json(silent=True))
    
    attendee, created = AttendeeService.create_attendee(**data)
    
    if not created:
        return success_response(
            data=attendee.to_summary(),
            message="QR code updated for existing registration number"
        ), 200
    
    return success_response(
        data=attendee.to_summary(),
        message="Attendee created successfully"
    ), 201

@attendance_bp.route('/attendee/<int:attendee_id>', methods=['GET'])
@jwt_required()
@login_required
def get_attendee_details(attendee_id):
    """Attendee with its most recent attendance records."""
    attendee, records = AttendeeService.get_details(attendee_id)
    
    return success_response(data={
        'attendee': attendee.to_dict(),
        'attendanceRecords': [record.to_dict() for record in records]
    })

@attendance_bp.route('/attendee/<int:attendee_id>', methods=['PUT'])
@jwt_required()
@admin_required
def update_attendee(attendee_id):
    """Update attendee information."""
    data = AttendeeSchema.load(request.get_json(silent=True))
    
    attendee = AttendeeService.update_attendee(attendee_id, **data)
    
    return success_response(
        data=attendee.to_dict(),
        message="Attendee updated successfully"
    )

@attendance_bp.route('/attendee/<int:attendee_id>', methods=['DELETE'])
@jwt_required()
@admin_required
def delete_attendee(attendee_id):
    """Delete attendee together with its attendance records."""
    attendee = AttendeeService.delete_attendee(attendee_id)
    
    return success_response(
        data=attendee,
        message="Attendee and related attendance records deleted successfully"
    )

@attendance_bp.route('/attendee/<int:attendee_id>/qrcode', methods=['GET'])
@jwt_required()
@login_required
def get_attendee_qrcode(attendee_id):
    """PNG QR code for an attendee's badge."""
    attendee = AttendeeService.get_attendee(attendee_id)
    png = QRService.render_png(attendee.qrcode_number)
    
    return send_file(
        io.BytesIO(png),
        mimetype='image/png',
        as_attachment=request.args.get('download', type=int) == 1,
        download_name=QRService.download_name(attendee.university_reg_no)
    )

# =================== RECORDS ===================

@attendance_bp.route('/record/<int:record_id>', methods=['DELETE'])
@jwt_required()
@admin_required
def delete_attendance_record(record_id):
    record = AttendanceService.delete_record(record_id)
    
    return success_response(
        data=record,
        message="Attendance record deleted successfully"
    )

@attendance_bp.route('/mark', methods=['POST'])
@jwt_required()
@login_required
def mark_attendance():
    """Record a check-in or check-out for a scanned QR code."""
    data = MarkAttendanceSchema.load(request.get_json(silent=True))
    
    event, name = AttendanceService.mark_attendance(data['qr_token'], data['event_type'])
    
    return success_response(
        data={
            'attendee': {
                'name': name,
                'type': event.type.value
            },
            'record': event.to_dict()
        },
        message="Attendance marked successfully"
    ), 201

# =================== REPORTING ===================

@attendance_bp.route('/stats', methods=['GET'])
@jwt_required()
@login_required
def get_stats():
    return success_response(data=StatsService.get_stats())

@attendance_bp.route('/history', methods=['GET'])
@jwt_required()
@login_required
def get_history():
    """Latest attendance events, newest first."""
    records = AttendanceService.history()
    return success_response(data=[record.to_dict(include_attendee=True) for record in records])

# =================== IMPORT ===================

@attendance_bp.route('/import', methods=['POST'])
@jwt_required()
@admin_required
def import_csv():
    """Upsert attendees from an uploaded CSV file."""
    if 'file' not in request.files:
        raise ValidationError("No file uploaded")
    
    file = request.files['file']
    if file.filename == '':
        raise ValidationError("No file selected")
    
    extension = file.filename.rsplit('.', 1)[-1].lower() if '.' in file.filename else ''
    if extension not in current_app.config.get('ALLOWED_EXTENSIONS', {'csv'}):
        raise ValidationError("Please upload a CSV file")
    
    result = ImportService.import_file(file)
    
    return success_response(
        data=result.to_dict(),
        message="Attendees imported successfully"
    )

@attendance_bp.route('/import/template', methods=['GET'])
@jwt_required()
@admin_required
def get_import_template():
    """CSV template for bulk import."""
    return ImportService.template_csv(), 200, {
        'Content-Type': 'text/csv; charset=utf-8',
        'Content-Disposition': 'attachment; filename=attendees_import_template.csv'
    }

"""Helper functions for the application."""
import secrets
import string
from datetime import datetime
from flask import jsonify
from typing import Any

QR_TOKEN_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits

def handle_error(error, status_code: int):
    """Handle application errors with consistent format."""
    return jsonify({
        'error': True,
        'message': getattr(error, 'description', None) or str(error),
        'status_code': status_code
    }), status_code

def success_response(data: Any = None, message: str = "Success"):
    """Return consistent success response."""
    response = {
        'error': False,
        'message': message
    }
    
    if data is not None:
        response['data'] = data
    
    return jsonify(response)

def generate_qr_token(length: int = 12) -> str:
    """Generate a random alphanumeric QR token."""
    return ''.join(secrets.choice(QR_TOKEN_ALPHABET) for _ in range(length))

def local_midnight(moment: datetime) -> datetime:
    """Start of the local calendar day containing ``moment``."""
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)

def local_now() -> datetime:
    """Current server-local time; attendance events are stored in local time."""
    return datetime.now()

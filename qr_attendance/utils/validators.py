"""Request body schemas and validation helpers.

Every JSON body accepted by the API goes through a ``Schema`` before it reaches
a service. A schema maps wire field names (camelCase, as sent by the console
and scanner) to the keyword arguments the services expect, and collects every
problem into a single ``ValidationError``.
"""
import re
from typing import Any, Callable, Dict, List, Optional

from qr_attendance.exceptions import ValidationError

class Field:
    """Single field of a request schema."""
    
    def __init__(
        self,
        attr: str,
        required: bool = False,
        choices: Optional[List[str]] = None,
        max_length: Optional[int] = None,
        check: Optional[Callable[[str], bool]] = None,
        message: Optional[str] = None,
        strip: bool = True
    ):
        self.attr = attr
        self.strip = strip
        self.required = required
        self.choices = choices
        self.max_length = max_length
        self.check = check
        self.message = message

class Schema:
    """Declarative schema for a JSON request body."""
    
    fields: Dict[str, Field] = {}
    required_message: Optional[str] = None
    
    @classmethod
    def load(cls, data: Any) -> Dict[str, Any]:
        """Validate ``data`` and return service keyword arguments."""
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        
        errors = []
        missing = []
        cleaned = {}
        
        for name, field in cls.fields.items():
            value = data.get(name)
            if isinstance(value, str) and field.strip:
                value = value.strip()
            
            if value is None or value == '':
                if field.required:
                    missing.append(name)
                else:
                    cleaned[field.attr] = None
                continue
            
            if not isinstance(value, str):
                value = str(value)
            
            if field.choices and value not in field.choices:
                errors.append(f"{name} must be one of: {', '.join(field.choices)}")
                continue
            
            if field.max_length and len(value) > field.max_length:
                errors.append(f"{name} is too long (max {field.max_length} characters)")
                continue
            
            if field.check and not field.check(value):
                errors.append(field.message or f"{name} is invalid")
                continue
            
            cleaned[field.attr] = value
        
        if missing:
            message = cls.required_message or f"Missing required fields: {', '.join(missing)}"
            raise ValidationError(message, errors=[f"{name} is required" for name in missing] + errors)
        
        if errors:
            raise ValidationError(errors[0], errors=errors)
        
        return cleaned

class Validator:
    """Validation helper class."""
    
    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format."""
        if not email:
            return False
        pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        return bool(re.match(pattern, email))
    
    @staticmethod
    def validate_password(password: str) -> bool:
        """Validate password strength."""
        return bool(password) and 6 <= len(password) <= 128
    
    @staticmethod
    def validate_username(username: str) -> bool:
        """Usernames are 3-80 characters of letters, digits, dot, dash or underscore."""
        return bool(re.match(r'^[A-Za-z0-9._-]{3,80}$', username or ''))

class LoginSchema(Schema):
    fields = {
        'username': Field('username', required=True),
        'password': Field('password', required=True, strip=False)
    }
    required_message = "Username and password are required"

class RegisterSchema(Schema):
    fields = {
        'username': Field('username', required=True, check=Validator.validate_username,
                          message="Username must be 3-80 letters, digits, '.', '-' or '_'"),
        'password': Field('password', required=True, check=Validator.validate_password,
                          message="Password must be at least 6 characters long", strip=False),
        'email': Field('email', check=Validator.validate_email, message="Invalid email format"),
        'role': Field('role', choices=['admin', 'user'])
    }

class AttendeeSchema(Schema):
    fields = {
        'fullName': Field('full_name', required=True, max_length=255),
        'universityRegNo': Field('university_reg_no', required=True, max_length=50),
        'branch': Field('branch', required=True, max_length=100),
        'qrcodeNumber': Field('qrcode_number', required=True, max_length=255),
        'email': Field('email', check=Validator.validate_email, message="Invalid email format"),
        'mobileNo': Field('mobile_no', max_length=30)
    }
    required_message = (
        "Missing required fields: name, registration number, branch, and QR code are required"
    )

class MarkAttendanceSchema(Schema):
    fields = {
        'qrCode': Field('qr_token', required=True),
        'type': Field('event_type', required=True, choices=['in', 'out'])
    }

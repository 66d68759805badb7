"""Custom decorators for authorization."""
from functools import wraps
from flask import g
from flask_jwt_extended import get_jwt_identity
from qr_attendance.exceptions import AuthError, ForbiddenError
from qr_attendance.models.user import User
from qr_attendance.services.auth_service import AuthService

def _load_current_user() -> User:
    """Resolve the JWT identity to an active operator and keep it on ``g``."""
    identity = get_jwt_identity()
    
    try:
        user = AuthService.get_user_by_id(int(identity))
    except (TypeError, ValueError):
        user = None
    
    if not user or not user.is_active:
        raise AuthError("Invalid token")
    
    g.current_user = user
    return user

def login_required(f):
    """Decorator to require any active operator. Use after ``jwt_required``."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        _load_current_user()
        return f(*args, **kwargs)
    return decorated_function

def admin_required(f):
    """Decorator to require admin role. Use after ``jwt_required``."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = _load_current_user()
        
        if not user.is_admin():
            raise ForbiddenError("Admin access required")
        
        return f(*args, **kwargs)
    return decorated_function

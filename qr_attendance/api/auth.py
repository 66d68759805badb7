"""Authentication API: login, token verification and operator registration."""
from flask import Blueprint, current_app, g, request
from flask_jwt_extended import jwt_required
from qr_attendance import limiter
from qr_attendance.services.auth_service import AuthService
from qr_attendance.utils.decorators import admin_required, login_required
from qr_attendance.utils.helpers import success_response
from qr_attendance.utils.validators import LoginSchema, RegisterSchema

auth_bp = Blueprint("auth", __name__)

def _login_rate_limit() -> str:
    return current_app.config.get('LOGIN_RATE_LIMIT', '10 per minute')

@auth_bp.route("/login", methods=["POST"])
@limiter.limit(_login_rate_limit)
def login():
    """Operator login with username and password."""
    data = LoginSchema.load(request.get_json(silent=True))
    
    token, user = AuthService.login(data['username'], data['password'])
    
    return success_response(
        data={
            "token": token,
            "user": user.to_dict()
        },
        message="Login successful"
    )

@auth_bp.route("/verify", methods=["GET"])
@jwt_required()
@login_required
def verify_token():
    """Verify the bearer token and return the operator it belongs to."""
    return success_response(
        data={"user": g.current_user.to_dict()},
        message="Token is valid"
    )

@auth_bp.route("/register", methods=["POST"])
@jwt_required()
@admin_required
def register():
    """Create a new operator account (admin only)."""
    data = RegisterSchema.load(request.get_json(silent=True))
    
    user = AuthService.register(
        username=data['username'],
        password=data['password'],
        email=data.get('email'),
        role=data.get('role')
    )
    
    return success_response(
        data={"user": user.to_dict()},
        message="User registered successfully"
    ), 201
